"""
Time source for database backends, with overrides for testing.

Attempt timestamps are assigned at write time from get_current_time().
Tests can freeze or step the clock to produce deterministic orderings,
including timestamp ties.
"""

from __future__ import annotations

from typing import Callable, Iterator, Optional
from datetime import datetime, timedelta, timezone
from contextlib import contextmanager

# UTC timezone constant
UTC = timezone.utc


# Global override for testing
_time_override: Optional[Callable[[], datetime]] = None


def get_current_time() -> datetime:
    """Get current time, using override if set.

    Always returns a timezone-aware datetime in UTC.
    """
    if _time_override is not None:
        return _time_override()
    return datetime.now(UTC)


def epoch_seconds() -> int:
    """Current time as whole seconds since the epoch"""
    return int(get_current_time().timestamp())


@contextmanager
def freeze_time(frozen_time: datetime) -> Iterator[None]:
    """Context manager to freeze time for testing.

    Args:
        frozen_time: The datetime to return for all get_current_time() calls.

    Example:
        with freeze_time(datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)):
            db.attempts.insert(3, "alice", True, 40, ["a1"])
            db.attempts.insert(3, "alice", False, 55, ["b2"])
            # Both attempts carry the same timestamp
    """
    global _time_override
    old_override = _time_override

    def _frozen() -> datetime:
        return frozen_time

    _time_override = _frozen
    try:
        yield
    finally:
        _time_override = old_override


@contextmanager
def advancing_time(
    start_time: datetime, increment_seconds: float = 1.0
) -> Iterator[Callable[[], datetime]]:
    """Context manager for time that advances with each call.

    Args:
        start_time: The starting datetime.
        increment_seconds: How many seconds to advance per call.

    Yields:
        A function that returns the current (advancing) time.

    Example:
        with advancing_time(datetime(2025, 1, 1, tzinfo=UTC), 60.0) as get_time:
            time1 = get_time()  # 2025-01-01 00:00:00
            time2 = get_time()  # 2025-01-01 00:01:00
    """
    global _time_override
    old_override = _time_override

    current = [start_time]

    def advance() -> datetime:
        result = current[0]
        current[0] = current[0] + timedelta(seconds=increment_seconds)
        return result

    _time_override = advance
    try:
        yield advance
    finally:
        _time_override = old_override
