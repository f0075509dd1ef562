"""
Leitner interval policy.

The scheduling core never decides how long a card stays learned; callers
pass the expiration date into raise_level(). This module provides the
default policy: a fixed table of days per level.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol

from leitbox.config import DEFAULT_INTERVAL_DAYS, get_settings

if TYPE_CHECKING:
    from leitbox.config import Settings


class IntervalPolicy(Protocol):
    """Decides when a card that reached a level becomes due again."""

    def expiration_for(self, level: int, test_time: datetime) -> datetime:
        ...


@dataclass
class LeitnerIntervals:
    """
    Fixed interval table.

    A card that reaches level N stays learned for days[N - 1] days.
    Levels past the end of the table use max_days.
    """

    days: list[int] = field(default_factory=lambda: list(DEFAULT_INTERVAL_DAYS))
    max_days: int = 365

    def __post_init__(self) -> None:
        if not self.days or any(d <= 0 for d in self.days):
            raise ValueError("Interval table needs positive day counts")
        if self.max_days <= 0:
            raise ValueError("max_days must be positive")

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LeitnerIntervals:
        settings = settings or get_settings()
        return cls(days=list(settings.interval_days), max_days=settings.max_interval_days)

    def interval_for(self, level: int) -> timedelta:
        if level < 1:
            raise ValueError(f"Level {level} has no interval (only learned levels do)")

        index = level - 1
        days = self.days[index] if index < len(self.days) else self.max_days
        return timedelta(days=min(days, self.max_days))

    def expiration_for(self, level: int, test_time: datetime) -> datetime:
        return test_time + self.interval_for(level)

    def table(self, levels: int | None = None) -> list[tuple[int, int]]:
        """(level, days) pairs for display, one per table entry by default."""
        levels = levels or len(self.days)
        return [(level, self.interval_for(level).days) for level in range(1, levels + 1)]
