"""
Injectable time sources.

Expiration predicates and scheduler transitions ask a clock for "now"
instead of reading the system time directly, so sessions can be replayed
deterministically in tests and simulations.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Real-time clock used in production."""

    def now(self) -> datetime:
        return datetime.now()

    def __repr__(self) -> str:
        return "SystemClock()"


class FixedClock:
    """
    Controllable clock for tests.

    Time only moves when told to via set() or advance().
    """

    def __init__(self, now: datetime):
        self._now = now

    def now(self) -> datetime:
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when

    def advance(self, delta: timedelta | None = None, **kwargs) -> datetime:
        """
        Move the clock forward.

        Args:
            delta: Explicit offset
            **kwargs: timedelta keyword arguments (days=, hours=, ...)

        Returns:
            The new current time
        """
        self._now += delta if delta is not None else timedelta(**kwargs)
        return self._now

    def __repr__(self) -> str:
        return f"FixedClock({self._now.isoformat()})"


DEFAULT_CLOCK: Clock = SystemClock()


def resolve_clock(clock: Clock | None) -> Clock:
    """Return the given clock, or the process default when None."""
    return clock if clock is not None else DEFAULT_CLOCK
