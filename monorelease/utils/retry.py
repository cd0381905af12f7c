"""Bounded retry helper for operations that report failure through their result."""
from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T")


def retry(
    operation: Callable[[], T],
    *,
    should_retry: Callable[[T], bool],
    max_attempts: int = 2,
    on_retry: Callable[[int, T], None] | None = None,
) -> tuple[T, int]:
    """Invoke ``operation`` until it succeeds or ``max_attempts`` is reached.

    Returns the last result together with the number of attempts made. There is
    no delay between attempts. ``on_retry`` receives the number of the attempt
    that just failed and its result, before the next attempt starts.
    """

    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    result = operation()
    while should_retry(result) and attempt < max_attempts:
        if on_retry is not None:
            on_retry(attempt, result)
        attempt += 1
        result = operation()
    return result, attempt
