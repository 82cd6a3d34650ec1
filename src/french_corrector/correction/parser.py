"""
Parsing des sorties JSON semi-structurées du modèle.

Deux stratégies d'extraction, volontairement distinctes :
- `parse_correction_response` : JSON strict après retrait d'un éventuel bloc
  de code Markdown, avec repli sur le texte brut si le JSON est invalide.
- `extract_json_object` : premier objet JSON équilibré trouvé n'importe où dans
  le texte, tolérant la prose autour (utilisé pour les conseils d'étude).
"""

import json
import re
from typing import Any, Optional

from ..exceptions import MalformedResponse
from ..models import (
    NO_EXPLANATION,
    AdviceCategory,
    AdviceExample,
    CorrectionResult,
    StudyAdvice,
)
from .classifier import classify_correction


INVALID_FORMAT_EXPLANATION = "The AI provided an invalid response format."

# ```json\n{...}\n```  ou  ```\n{...}\n```
FENCE_RE = re.compile(r"^```(\w*)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """
    Retire les délimiteurs d'un bloc de code Markdown entourant le texte.

    Un bloc ouvert mais jamais fermé (réponse tronquée) perd seulement
    sa ligne d'ouverture.

    Example:
        >>> strip_code_fence('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    text = text.strip()
    if not text.startswith("```"):
        return text

    match = FENCE_RE.match(text)
    if match:
        return match.group(2).strip()

    # Pas de fence fermante : on retire la ligne d'ouverture
    _, _, rest = text.partition("\n")
    return rest.strip()


def parse_correction_response(raw_text: str) -> CorrectionResult:
    """
    Parse la réponse brute du modèle en CorrectionResult.

    Étapes :
    1. Trim + retrait d'un bloc ```json ... ```
    2. Parsing JSON strict
    3. JSON valide : `correctedText` doit être une string, sinon MalformedResponse
    4. JSON invalide : repli sur le texte brut, sans corrections

    Args:
        raw_text: Texte renvoyé par la passerelle

    Returns:
        CorrectionResult normalisé

    Raises:
        MalformedResponse: JSON valide mais pas un objet, ou `correctedText`
            absent ou du mauvais type

    Example:
        >>> parse_correction_response('{"correctedText": "Je vais bien."}').corrected_text
        'Je vais bien.'
    """
    text = raw_text.strip()
    candidate = strip_code_fence(text)

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return CorrectionResult(
            corrected_text=text,
            explanation=f"{INVALID_FORMAT_EXPLANATION} {e}",
            corrections=(),
        )

    if not isinstance(data, dict):
        raise MalformedResponse(
            f"La réponse de l'IA n'est pas un objet JSON ({type(data).__name__}).",
            raw_text=text,
        )

    if "correctedText" not in data:
        raise MalformedResponse(
            "La réponse de l'IA ne contient pas de champ correctedText.",
            raw_text=text,
        )

    corrected_text = data["correctedText"]
    if not isinstance(corrected_text, str):
        raise MalformedResponse(
            "Le champ correctedText de la réponse de l'IA n'est pas du texte.",
            raw_text=text,
        )

    explanation = data.get("explanation")
    if not isinstance(explanation, str) or not explanation:
        explanation = NO_EXPLANATION

    raw_corrections = data.get("corrections")
    if not isinstance(raw_corrections, list):
        raw_corrections = []

    return CorrectionResult(
        corrected_text=corrected_text,
        explanation=explanation,
        corrections=tuple(classify_correction(item) for item in raw_corrections),
    )


def _balanced_end(text: str, start: int) -> Optional[int]:
    """Index juste après l'accolade fermant celle ouverte en `start`, None si jamais fermée."""
    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1

    return None


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """
    Extrait le premier objet JSON équilibré et valide présent dans le texte.

    Tolère la prose avant/après l'objet et les blocs de code.

    Args:
        text: Sortie brute du modèle

    Returns:
        L'objet décodé, ou None si aucun objet valide n'est trouvé

    Example:
        >>> extract_json_object('Voici : {"summary": "ok"} Bonne étude !')
        {'summary': 'ok'}
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            try:
                data = json.loads(text[start:end])
            except json.JSONDecodeError:
                data = None
            if isinstance(data, dict):
                return data
        start = text.find("{", start + 1)

    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _parse_example(raw: Any) -> Optional[AdviceExample]:
    if not isinstance(raw, dict):
        return None
    return AdviceExample(
        original=_as_text(raw.get("original")),
        corrected=_as_text(raw.get("corrected")),
        explanation=_as_text(raw.get("explanation")),
    )


def _parse_category(raw: Any) -> Optional[AdviceCategory]:
    if not isinstance(raw, dict):
        return None

    raw_examples = raw.get("examples")
    if not isinstance(raw_examples, list):
        raw_examples = []
    examples = [_parse_example(example) for example in raw_examples]

    return AdviceCategory(
        category=_as_text(raw.get("category")) or "Other",
        title=_as_text(raw.get("title")),
        content=_as_text(raw.get("content")),
        examples=tuple(example for example in examples if example is not None),
    )


def parse_study_advice(raw_text: str) -> StudyAdvice:
    """
    Parse une réponse du modèle au format StudyAdvice.

    Raises:
        MalformedResponse: Aucun objet JSON trouvé, ou objet sans `summary`
            ni `corrections`
    """
    data = extract_json_object(raw_text)
    if data is None:
        raise MalformedResponse(
            "Aucun objet JSON trouvé dans la réponse de l'IA.", raw_text=raw_text
        )

    if "summary" not in data and "corrections" not in data:
        raise MalformedResponse(
            "La réponse de l'IA ne contient ni summary ni corrections.",
            raw_text=raw_text,
        )

    raw_categories = data.get("corrections")
    if not isinstance(raw_categories, list):
        raw_categories = []
    categories = [_parse_category(entry) for entry in raw_categories]

    return StudyAdvice(
        summary=_as_text(data.get("summary")),
        corrections=tuple(entry for entry in categories if entry is not None),
    )
