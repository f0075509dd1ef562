"""
Card: a flash card with a front and back side that can be learned.

A card is created detached. Its level and category are owned by the
category tree and only change through Category.add_card(),
Category.remove_card(), Category.move_card() and the transitions in
leitbox.core.scheduler.

Learn state is derived from the expiration date:
- Unlearned: date_expired is None
- Learned:   date_expired is after now
- Expired:   date_expired is now or earlier
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from .card_side import CardSide, SideChange, normalize_text
from .clock import Clock, resolve_clock
from .events import CardEvent
from .exceptions import NullDateError

if TYPE_CHECKING:
    from .category import Category


class Card:
    """
    A learnable unit with two sides, a level, dates and test statistics.

    Every content or score change on an attached card is reported to the
    owning category as an EDITED event. Detached cards never fire events.
    """

    def __init__(
        self,
        front: str | CardSide,
        back: str | CardSide,
        created: datetime | None = None,
        clock: Clock | None = None,
    ):
        """
        Create a detached card.

        Args:
            front: Front side text (or a prepared CardSide)
            back: Back side text (or a prepared CardSide)
            created: Creation date (defaults to clock.now())
            clock: Time source for modification dates

        Raises:
            InvalidContentError: If a side has no text
        """
        self._clock = resolve_clock(clock)
        self._front = front if isinstance(front, CardSide) else CardSide(front)
        self._back = back if isinstance(back, CardSide) else CardSide(back)

        created = created if created is not None else self._clock.now()
        self._date_created = created
        self._date_modified = created
        self._date_touched = created  # global ordering key across categories
        self._date_tested: datetime | None = None
        self._date_expired: datetime | None = None

        self._tests_total = 0
        self._tests_passed = 0

        self._category: Category | None = None
        self._level = 0

        self._attach_side_listeners()

    # =========================================================================
    # Content
    # =========================================================================

    @property
    def front(self) -> CardSide:
        return self._front

    @property
    def back(self) -> CardSide:
        return self._back

    def set_sides(self, front: str, back: str) -> bool:
        """
        Replace the text of both sides.

        Fires a single EDITED event and bumps the modification date, but
        only when the card is attached and something actually changed.

        Raises:
            InvalidContentError: If either side is empty after normalization

        Returns:
            True if the content changed
        """
        front = normalize_text(front)
        back = normalize_text(back)

        if front == self._front.text and back == self._back.text:
            return False

        self._front.set_text(front, notify=False)
        self._back.set_text(back, notify=False)

        if self._category is not None:
            self._touch_modified()
            self._fire_edited()
        return True

    def reset_learned_amounts(self) -> None:
        """Reset the per-side correct answer counters to 0."""
        self._front.set_learned_amount(0)
        self._back.set_learned_amount(0)

    # =========================================================================
    # Dates
    # =========================================================================

    @property
    def date_created(self) -> datetime:
        """Creation date. Never None."""
        return self._date_created

    @date_created.setter
    def date_created(self, value: datetime) -> None:
        if value is None:
            raise NullDateError("Creation date can't be None")
        if value > self._date_modified:
            raise ValueError("Creation date can't be after modification date")
        self._date_created = value

    @property
    def date_modified(self) -> datetime:
        """Modification date. Never None and never before the creation date."""
        return self._date_modified

    @date_modified.setter
    def date_modified(self, value: datetime) -> None:
        if value is None:
            raise NullDateError("Modification date can't be None")
        if value < self._date_created:
            raise ValueError("Modification date can't be before creation date")
        self._date_modified = value

    @property
    def date_tested(self) -> datetime | None:
        """Last time the card was passed or failed in a test (skips don't count)."""
        return self._date_tested

    @date_tested.setter
    def date_tested(self, value: datetime | None) -> None:
        self._date_tested = value
        self._date_touched = value

    @property
    def date_expired(self) -> datetime | None:
        return self._date_expired

    @date_expired.setter
    def date_expired(self, value: datetime | None) -> None:
        self._date_expired = value

    @property
    def date_touched(self) -> datetime | None:
        """
        Date the card was last learned, skipped, reset or created.

        Used to order cards by one global value shared by all categories
        and decks.
        """
        return self._date_touched

    @date_touched.setter
    def date_touched(self, value: datetime | None) -> None:
        self._date_touched = value

    # =========================================================================
    # Stats
    # =========================================================================

    @property
    def tests_total(self) -> int:
        return self._tests_total

    @property
    def tests_passed(self) -> int:
        return self._tests_passed

    @property
    def pass_ratio(self) -> int:
        """Percentage of passed tests, rounded. 0 if never tested."""
        if self._tests_total == 0:
            return 0
        return round(100.0 * self._tests_passed / self._tests_total)

    def inc_stats(self, hit: int, total: int) -> None:
        if hit < 0 or total < 0:
            raise ValueError("Test counters can only grow")
        self._add_stats(hit, total)
        self._fire_edited()

    def reset_stats(self) -> None:
        self._tests_total = 0
        self._tests_passed = 0
        self.reset_learned_amounts()

    def _add_stats(self, hit: int, total: int) -> None:
        self._tests_total += total
        self._tests_passed += hit

    # =========================================================================
    # Learn State
    # =========================================================================

    def is_expired(self, clock: Clock | None = None) -> bool:
        """Learned successfully once, but the learn time has run out."""
        return (
            self._date_expired is not None
            and self._date_expired <= resolve_clock(clock).now()
        )

    def is_learned(self, clock: Clock | None = None) -> bool:
        """Learned successfully and the learn time hasn't run out yet."""
        return (
            self._date_expired is not None
            and self._date_expired > resolve_clock(clock).now()
        )

    def is_unlearned(self) -> bool:
        """Never learned, or failed since the last success."""
        return self._date_expired is None

    # =========================================================================
    # Tree Membership (written by the category tree only)
    # =========================================================================

    @property
    def level(self) -> int:
        return self._level

    @property
    def category(self) -> Category | None:
        """The owning category, or None while detached."""
        return self._category

    # =========================================================================
    # Cloning
    # =========================================================================

    def clone(self) -> Card:
        """Detached copy including all dates, stats and level."""
        card = Card(self._front.copy(), self._back.copy(), self._date_created, self._clock)
        card._date_modified = self._date_modified
        card._date_touched = self._date_touched
        card._date_tested = self._date_tested
        card._date_expired = self._date_expired
        card._tests_total = self._tests_total
        card._tests_passed = self._tests_passed
        card._level = self._level
        return card

    def clone_without_progress(self) -> Card:
        """
        Detached copy without any user dependent progress.

        Only the sides (text and images) and the creation date are kept.
        Placing the clone into a category is up to the caller.
        """
        front = CardSide(self._front.text, self._front.images)
        back = CardSide(self._back.text, self._back.images)
        return Card(front, back, self._date_created, self._clock)

    # =========================================================================
    # Internals
    # =========================================================================

    def _attach_side_listeners(self) -> None:
        self._front.add_listener(self._on_side_changed)
        self._back.add_listener(self._on_side_changed)

    def _on_side_changed(self, side: CardSide, change: SideChange) -> None:
        if self._category is None:
            return
        if change is not SideChange.LEARNED_AMOUNT:
            self._touch_modified()
        self._fire_edited()

    def _touch_modified(self) -> None:
        self._date_modified = max(self._clock.now(), self._date_created)

    def _fire_edited(self) -> None:
        category = self._category
        if category is not None:
            category._fire_card_event(CardEvent.EDITED, self, category, self._level)

    def __repr__(self) -> str:
        return f"Card({self._front.text!r}/{self._back.text!r}, level={self._level})"
