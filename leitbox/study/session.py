"""
Learn Session: drives one round of reviews over a category.

Builds a queue of learnable cards and turns answers into Leitner
transitions:
- pass -> raise_level (expiration from the interval policy)
- fail -> reset_level
- skip -> reappend (card goes to the back of the queue)

The session observes its category while running, so cards that are
removed or moved out of the subtree mid-session leave the queue.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from leitbox.config import Settings, get_settings
from leitbox.core.card import Card
from leitbox.core.category import Category
from leitbox.core.clock import Clock, resolve_clock
from leitbox.core.events import CardEvent, CategoryEvent
from leitbox.core.exceptions import InvariantViolationError
from leitbox.core.intervals import IntervalPolicy, LeitnerIntervals
from leitbox.core.scheduler import raise_level, reappend, reset_level


@dataclass
class SessionStats:
    """Answer tallies of a session."""

    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.skipped

    @property
    def accuracy(self) -> float:
        """Share of passed answers among graded ones (skips don't count)."""
        graded = self.passed + self.failed
        return self.passed / graded if graded else 0.0


class LearnSession:
    """
    One learning session over a category subtree.

    Due (expired) cards come first, then unlearned cards; each group is
    ordered by touch date so cards from different categories are
    interleaved fairly.
    """

    def __init__(
        self,
        category: Category,
        policy: IntervalPolicy | None = None,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()

        self.category = category
        self.policy = policy or LeitnerIntervals.from_settings(settings)
        self.clock = resolve_clock(clock)
        self.new_cards_limit = settings.new_cards_per_session
        self.due_cards_limit = settings.max_due_cards

        self.stats = SessionStats()
        self._queue: list[Card] = []
        self._running = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> list[Card]:
        """Build the queue and start listening to the category."""
        self._queue = self.build_queue()
        if not self._running:
            self.category.add_observer(self)
            self._running = True

        logger.info(f"Session started on {self.category.path}: {len(self._queue)} cards")
        return self.queue

    def end(self) -> SessionStats:
        if self._running:
            self.category.remove_observer(self)
            self._running = False

        logger.info(
            f"Session ended on {self.category.path}: {self.stats.passed} passed, "
            f"{self.stats.failed} failed, {self.stats.skipped} skipped"
        )
        return self.stats

    @property
    def running(self) -> bool:
        return self._running

    def build_queue(self) -> list[Card]:
        def touched(card: Card) -> datetime:
            return card.date_touched or card.date_created

        due = sorted(self.category.get_expired_cards(clock=self.clock), key=touched)
        due = due[: self.due_cards_limit]
        new = sorted(self.category.get_cards(0), key=touched)[: self.new_cards_limit]

        logger.debug(f"Queue for {self.category.path}: {len(due)} due + {len(new)} new")
        return due + new

    # =========================================================================
    # Queue
    # =========================================================================

    @property
    def queue(self) -> list[Card]:
        return list(self._queue)

    def next_card(self) -> Card | None:
        return self._queue[0] if self._queue else None

    @property
    def finished(self) -> bool:
        return not self._queue

    # =========================================================================
    # Answers
    # =========================================================================

    def record_pass(self, card: Card) -> datetime:
        """
        Move the card up one level.

        Returns:
            The card's new expiration date
        """
        self._check_queued(card)
        now = self.clock.now()
        expiration = self.policy.expiration_for(card.level + 1, now)

        raise_level(card, now, expiration, self.clock)
        self._queue.remove(card)
        self.stats.passed += 1
        return expiration

    def record_fail(self, card: Card) -> None:
        self._check_queued(card)
        reset_level(card, self.clock.now(), self.clock)
        self._queue.remove(card)
        self.stats.failed += 1

    def skip(self, card: Card) -> None:
        self._check_queued(card)
        reappend(card, self.clock)
        self._queue.remove(card)
        self._queue.append(card)
        self.stats.skipped += 1

    def _check_queued(self, card: Card) -> None:
        if card not in self._queue:
            raise InvariantViolationError(f"{card!r} is not in the session queue")

    # =========================================================================
    # CategoryObserver
    # =========================================================================

    def on_card_event(self, event: CardEvent, card: Card, category: Category, deck: int) -> None:
        if event in (CardEvent.REMOVED, CardEvent.MOVED) and card in self._queue:
            if not self._in_subtree(card):
                self._queue.remove(card)

    def on_category_event(self, event: CategoryEvent, category: Category) -> None:
        # the removed category still has its parent link while this runs
        if event is CategoryEvent.REMOVED and category is not self.category:
            self._queue = [
                card for card in self._queue
                if card.category is None or not category.contains(card.category)
            ]

    def _in_subtree(self, card: Card) -> bool:
        return card.category is not None and self.category.contains(card.category)


def fire_expirations(
    category: Category,
    since: datetime,
    clock: Clock | None = None,
) -> list[Card]:
    """
    Fire EXPIRED for every card whose expiration lies in (since, now].

    Meant to be called periodically by a timer on the thread that owns the
    tree, passing the time of the previous call.

    Returns:
        The cards that expired in the window
    """
    now = resolve_clock(clock).now()

    expired = [
        card for card in category.get_cards()
        if card.date_expired is not None and since < card.date_expired <= now
    ]
    for card in expired:
        category.notify_card_expired(card)

    if expired:
        logger.debug(f"{len(expired)} cards expired in {category.path} since {since}")
    return expired
