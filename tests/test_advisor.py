"""
Tests pour StudyAdvisor : le résultat est toujours un StudyAdvice.
"""

import json
from datetime import datetime, timezone

import pytest

from french_corrector.correction import StudyAdvisor, collect_items
from french_corrector.correction.advisor import (
    NOTHING_TO_ANALYZE,
    RAW_ADVICE_SUMMARY,
    TECHNICAL_ERROR_SUMMARY,
)
from french_corrector.exceptions import RateLimited, TransportError
from french_corrector.models import CorrectionItem, CorrectionType, StoredCorrection

from conftest import FakeGateway


ITEMS = [
    CorrectionItem("aller", "allé", "Participe passé", "", CorrectionType.GRAMMAR),
    CorrectionItem("a", "à", "Préposition", "Confusion a / à.", CorrectionType.SPELLING),
]

ADVICE = {
    "summary": "Travaillez les accords.",
    "corrections": [
        {
            "category": "Grammar",
            "title": "Accord du participe passé",
            "content": "Avec être, le participe s'accorde.",
            "examples": [{"original": "aller", "corrected": "allé", "explanation": "pp"}],
        }
    ],
}


@pytest.fixture
def make_advisor(retry):
    def factory(*outcomes):
        gateway = FakeGateway(*outcomes)
        return StudyAdvisor(gateway, retry=retry), gateway

    return factory


class TestSummarize:
    """Tests pour StudyAdvisor.summarize."""

    def test_nominal(self, make_advisor):
        advisor, gateway = make_advisor(json.dumps(ADVICE, ensure_ascii=False))
        advice = advisor.summarize(ITEMS)

        assert advice.summary == "Travaillez les accords."
        assert len(advice.corrections) == 1
        entry = advice.corrections[0]
        assert entry.title == "Accord du participe passé"
        assert entry.examples[0].corrected == "allé"

        call = gateway.calls[0]
        assert call["context"] == "study_advice"
        assert "Original : aller" in call["prompt"]
        assert "Explication : Participe passé" in call["prompt"]

    def test_json_inside_prose(self, make_advisor):
        raw = f"Voici mon analyse :\n{json.dumps(ADVICE)}\nBon courage !"
        advisor, _ = make_advisor(raw)

        assert advisor.summarize(ITEMS).summary == "Travaillez les accords."

    def test_empty_items_no_call(self, make_advisor):
        advisor, gateway = make_advisor(json.dumps(ADVICE))
        advice = advisor.summarize([])

        assert advice.summary == NOTHING_TO_ANALYZE
        assert advice.corrections == ()
        assert gateway.calls == []

    def test_unstructured_response(self, make_advisor):
        advisor, _ = make_advisor("  Révisez les accords du participe passé.  ")
        advice = advisor.summarize(ITEMS)

        assert advice.summary == RAW_ADVICE_SUMMARY
        assert len(advice.corrections) == 1
        assert advice.corrections[0].content == "Révisez les accords du participe passé."

    @pytest.mark.parametrize("error", [TransportError(status_code=500), RuntimeError("boom")])
    def test_gateway_failure(self, make_advisor, error):
        advisor, _ = make_advisor(error)
        advice = advisor.summarize(ITEMS)

        assert advice.summary == TECHNICAL_ERROR_SUMMARY
        assert len(advice.corrections) == 1
        assert advice.corrections[0].category == CorrectionType.OTHER.value
        assert "boom" not in advice.corrections[0].content

    def test_retries_exhausted(self, make_advisor, sleeps):
        advisor, gateway = make_advisor(RateLimited())
        advice = advisor.summarize(ITEMS)

        assert advice.summary == TECHNICAL_ERROR_SUMMARY
        assert len(gateway.calls) == 3
        assert sleeps == [1.0, 2.0]


def test_collect_items():
    now = datetime.now(timezone.utc)
    history = [
        StoredCorrection("1", "u", "a", "a", now, corrections=(ITEMS[0],)),
        StoredCorrection("2", "u", "b", "b", now, corrections=()),
        StoredCorrection("3", "u", "c", "c", now, corrections=(ITEMS[1],)),
    ]

    assert collect_items(history) == ITEMS
    assert collect_items(history, limit=1) == ITEMS[:1]
    assert collect_items([]) == []
