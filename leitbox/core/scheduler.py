"""
Leitner level transitions.

Every transition takes the card out of its deck, updates its level, dates
and stats while it is detached (so no intermediate EDITED events escape),
puts it back into the deck for its new level and fires exactly one
DECK_CHANGED event carrying the old level.

How long a card stays learned is decided by the caller: raise_level()
takes the new expiration date as an opaque value (see
leitbox.core.intervals for the default policy).

Transitions:
- raise_level:  passed a test, move up one deck
- reset_level:  failed a test, back to deck 0
- reappend:     skipped, same deck, only the touch date changes
- full_reset:   administrative reset, all stats cleared
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from loguru import logger

from .clock import Clock, resolve_clock
from .events import CardEvent
from .exceptions import InvariantViolationError

if TYPE_CHECKING:
    from .card import Card
    from .category import Category


def raise_level(
    card: Card,
    test_time: datetime,
    new_expiration: datetime,
    clock: Clock | None = None,
) -> None:
    """
    Record a passed test and move the card to the next deck.

    Args:
        card: An attached card
        test_time: When the test happened
        new_expiration: When the card becomes due again
        clock: Time source for the touch date
    """
    _change_level(card, card.level + 1, test_time, new_expiration, clock, hit=1)


def reset_level(card: Card, test_time: datetime, clock: Clock | None = None) -> None:
    """Record a failed test and move the card back to deck 0 (even if it's already there)."""
    _change_level(card, 0, test_time, None, clock, hit=0)


def reappend(card: Card, clock: Clock | None = None) -> None:
    """
    Put the card back at the end of its own deck.

    Only the touch date changes; stats and expiration are left alone.
    """
    category = _owner(card)
    clock = resolve_clock(clock)
    level = card.level

    category._remove_card_internal(card)
    card.date_touched = clock.now()
    category._add_card_internal(card, level, clock)

    logger.debug(f"Reappended {card!r} in {category.path}")
    category._fire_card_event(CardEvent.DECK_CHANGED, card, category, level)


def full_reset(card: Card, clock: Clock | None = None) -> None:
    """Move the card back to deck 0 and delete all of its stats and test dates."""
    _change_level(card, 0, None, None, clock, hit=None)


def _change_level(
    card: Card,
    new_level: int,
    test_time: datetime | None,
    new_expiration: datetime | None,
    clock: Clock | None,
    hit: int | None,
) -> None:
    """
    Relocate the card and fire DECK_CHANGED.

    hit is 1 for a passed test, 0 for a failed one and None for a full
    reset that clears the stats instead of counting a test.
    """
    category = _owner(card)
    clock = resolve_clock(clock)
    old_level = card.level

    category._remove_card_internal(card)

    if hit is None:
        card.reset_stats()
    else:
        card._add_stats(hit, 1)
        card.reset_learned_amounts()

    card.date_tested = test_time
    card.date_expired = new_expiration
    card.date_touched = clock.now()

    # the new expiration is set before re-adding, so the deck sanity
    # checks see the final value
    category._add_card_internal(card, new_level, clock)

    logger.debug(
        f"{card!r} in {category.path}: level {old_level} -> {new_level}, "
        f"expires={new_expiration}"
    )
    category._fire_card_event(CardEvent.DECK_CHANGED, card, category, old_level)


def _owner(card: Card) -> Category:
    category = card.category
    if category is None:
        raise InvariantViolationError(f"{card!r} is not attached to a category")
    return category
