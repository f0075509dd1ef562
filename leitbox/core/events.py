"""
Event types and the observer protocol of the category tree.

Events originate at the category where a mutation was applied and bubble
up to the root, so observing any category also observes every event from
its descendants.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .card import Card
    from .category import Category


class CardEvent(str, Enum):
    """Card related events."""
    ADDED = "added"
    REMOVED = "removed"
    MOVED = "moved"              # single event instead of REMOVED + ADDED
    DECK_CHANGED = "deck_changed"
    EDITED = "edited"
    EXPIRED = "expired"          # raised by the periodic expiration check


class CategoryEvent(str, Enum):
    """Category hierarchy related events."""
    ADDED = "added"
    REMOVED = "removed"
    EDITED = "edited"


# Card events that can't change the shape of any deck
SHAPE_PRESERVING_EVENTS = frozenset({CardEvent.EDITED, CardEvent.EXPIRED})


class CategoryObserver(Protocol):
    """Protocol for listeners registered on a category."""

    def on_card_event(
        self,
        event: CardEvent,
        card: Card,
        category: Category,
        deck: int,
    ) -> None:
        """
        Called when a card event happens in the observed category or below.

        Args:
            event: What happened
            card: The card that changed
            category: The category the card belonged to when it happened
                (for MOVED, the category it was moved out of)
            deck: The level that held the card when the event happened
        """
        ...

    def on_category_event(self, event: CategoryEvent, category: Category) -> None:
        """Called when a category is added, removed or edited at or below the observed node."""
        ...
