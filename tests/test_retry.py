"""Tests pour le RetryController (backoff exponentiel sur limite de débit)."""

from unittest.mock import Mock

import pytest

from french_corrector.correction.retry import RetryController, exponential_backoff
from french_corrector.exceptions import (
    ConfigurationError,
    MalformedResponse,
    RateLimited,
    RetriesExhausted,
    TransportError,
)


def test_success_first_attempt(retry, sleeps):
    operation = Mock(return_value="ok")

    assert retry.attempt(operation) == "ok"
    operation.assert_called_once()
    assert sleeps == []


@pytest.mark.parametrize("failures", [1, 2])
def test_success_after_rate_limits(retry, sleeps, failures):
    """k < max_retries échecs 429 puis succès : k+1 appels, délais 1s, 2s, ..."""
    operation = Mock(side_effect=[RateLimited()] * failures + ["ok"])

    assert retry.attempt(operation) == "ok"
    assert operation.call_count == failures + 1
    assert sleeps == [1.0, 2.0][:failures]


def test_exhaustion_after_max_retries(retry, sleeps):
    """Limite de débit persistante : RetriesExhausted après exactement max_retries appels."""
    last = RateLimited()
    operation = Mock(side_effect=[RateLimited(), RateLimited(), last])

    with pytest.raises(RetriesExhausted) as exc_info:
        retry.attempt(operation)

    assert operation.call_count == 3
    assert exc_info.value.attempts == 3
    assert exc_info.value.__cause__ is last
    assert sleeps == [1.0, 2.0]


@pytest.mark.parametrize(
    "error",
    [TransportError(status_code=500), MalformedResponse(), ConfigurationError(), KeyError("x")],
)
def test_non_rate_limit_errors_are_not_retried(retry, sleeps, error):
    operation = Mock(side_effect=error)

    with pytest.raises(type(error)):
        retry.attempt(operation)

    operation.assert_called_once()
    assert sleeps == []


def test_per_call_overrides(sleeps):
    controller = RetryController(sleep=sleeps.append)
    operation = Mock(side_effect=RateLimited())

    with pytest.raises(RetriesExhausted):
        controller.attempt(operation, max_retries=4, initial_delay_ms=100)

    assert operation.call_count == 4
    assert sleeps == [0.1, 0.2, 0.4]


def test_custom_predicate_and_schedule(sleeps):
    controller = RetryController(
        max_retries=2,
        is_retryable=lambda e: isinstance(e, TimeoutError),
        backoff=lambda initial, index: 50,
        sleep=sleeps.append,
    )
    operation = Mock(side_effect=[TimeoutError(), "ok"])

    assert controller.attempt(operation) == "ok"
    assert sleeps == [0.05]


def test_invalid_max_retries():
    with pytest.raises(ValueError):
        RetryController(max_retries=0).attempt(Mock())


def test_exponential_backoff_schedule():
    assert [exponential_backoff(1000, i) for i in range(4)] == [1000, 2000, 4000, 8000]
