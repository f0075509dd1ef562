"""
Lesson: the root category of a card collection plus its save state.

The lesson observes its root category and marks itself dirty on every
change a persistence layer would have to write. EXPIRED events don't
count, since expiration is derived from dates already stored.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from leitbox.config import get_settings

from .card import Card
from .category import Category
from .events import CardEvent, CategoryEvent
from .exceptions import InvariantViolationError


class Lesson:
    """A card collection backed (eventually) by a file."""

    def __init__(
        self,
        root: Category | None = None,
        needs_save: bool = False,
        path: Path | None = None,
    ):
        """
        Args:
            root: Root category (a new empty one if None)
            needs_save: Initial dirty flag
            path: File the lesson was loaded from or saved to
        """
        root = root if root is not None else Category(get_settings().root_category_name)
        if root.parent is not None:
            raise InvariantViolationError(f"{root!r} is not a root category")

        self._root = root
        self._root.add_observer(self)
        self._needs_save = needs_save
        self.path = path

    @property
    def root(self) -> Category:
        return self._root

    @property
    def needs_save(self) -> bool:
        """True if the lesson changed since it was last loaded or saved."""
        return self._needs_save

    def mark_saved(self, path: Path | None = None) -> None:
        """Called by the persistence layer after a successful write."""
        if path is not None:
            self.path = path
        self._needs_save = False
        logger.debug(f"{self!r} saved")

    def on_category_event(self, event: CategoryEvent, category: Category) -> None:
        self._needs_save = True

    def on_card_event(self, event: CardEvent, card: Card, category: Category, deck: int) -> None:
        if event is not CardEvent.EXPIRED:
            self._needs_save = True

    def clone_without_progress(self) -> Lesson:
        """Copy of all categories and cards with every card reset to no learn stats."""
        return Lesson(self._root.clone_without_progress(), needs_save=True)

    def close(self) -> None:
        """Stop observing the root category."""
        self._root.remove_observer(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Lesson):
            return NotImplemented
        return self._root.get_cards() == other._root.get_cards()

    def __hash__(self) -> int:
        return hash(tuple(id(card) for card in self._root.get_cards()))

    def __repr__(self) -> str:
        return f"Lesson({self.path})"
