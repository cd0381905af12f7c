from __future__ import annotations

import pytest

from monorelease.utils.retry import retry


def _sequence(*results: bool):
    remaining = list(results)
    calls: list[int] = []

    def operation() -> bool:
        calls.append(len(calls) + 1)
        return remaining.pop(0)

    return operation, calls


def test_retry_returns_first_success_without_retrying() -> None:
    operation, calls = _sequence(True)

    result, attempts = retry(operation, should_retry=lambda ok: not ok)

    assert result is True
    assert attempts == 1
    assert calls == [1]


def test_retry_retries_once_and_reports_callback() -> None:
    operation, calls = _sequence(False, True)
    retried: list[tuple[int, bool]] = []

    result, attempts = retry(
        operation,
        should_retry=lambda ok: not ok,
        on_retry=lambda attempt, outcome: retried.append((attempt, outcome)),
    )

    assert result is True
    assert attempts == 2
    assert calls == [1, 2]
    assert retried == [(1, False)]


def test_retry_stops_after_max_attempts() -> None:
    operation, calls = _sequence(False, False, True)

    result, attempts = retry(operation, should_retry=lambda ok: not ok, max_attempts=2)

    assert result is False
    assert attempts == 2
    assert calls == [1, 2]


def test_retry_rejects_non_positive_attempts() -> None:
    operation, _ = _sequence(True)

    with pytest.raises(ValueError):
        retry(operation, should_retry=lambda ok: not ok, max_attempts=0)
