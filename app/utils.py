"""Utility helpers for the CineList service."""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Sequence, TypeVar

T = TypeVar("T")


def require_positive(value: int, *, name: str) -> int:
    """Return *value* if it is a positive integer, otherwise raise an error."""

    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split *items* into consecutive batches of at most *size* entries."""

    require_positive(size, name="size")
    return [list(items[start : start + size]) for start in range(0, len(items), size)]


def backoff_delay(base: float, attempts_used: int, *, jitter: float = 0.0) -> float:
    """Return the wait before the next attempt.

    ``attempts_used`` counts retries already scheduled, so the first wait is
    ``base`` and each following wait doubles.
    """

    delay = base * (2**attempts_used)
    if jitter > 0:
        delay += random.uniform(0, jitter)
    return delay


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, as stored in SQLite."""

    return datetime.now(timezone.utc).replace(tzinfo=None)
