"""
One side of a flash card: text, attachment ids and a learned counter.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

from .exceptions import InvalidContentError


class SideChange(str, Enum):
    """Which part of a side changed."""
    TEXT = "text"
    IMAGES = "images"
    LEARNED_AMOUNT = "learned_amount"


SideListener = Callable[["CardSide", SideChange], None]


def normalize_text(text: str | None) -> str:
    """Strip surrounding whitespace. Raises InvalidContentError if nothing is left."""
    normalized = (text or "").strip()
    if not normalized:
        raise InvalidContentError("Card side text can't be empty")
    return normalized


class CardSide:
    """
    A card side holding text and the ids of attached images.

    Image bytes live in an external attachment store; only opaque ids are
    kept here. Listeners are notified after every effective change.
    """

    def __init__(self, text: str, images: Iterable[str] | None = None):
        self._text = normalize_text(text)
        self._images: list[str] = list(images or [])
        self._learned_amount = 0
        self._listeners: list[SideListener] = []

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str, notify: bool = True) -> bool:
        """
        Replace the text.

        Note that this won't touch the card's modification date on its own;
        use Card.set_sides() for edits made by the user.

        Returns:
            True if the text actually changed
        """
        text = normalize_text(text)
        if text == self._text:
            return False

        self._text = text
        if notify:
            self._notify(SideChange.TEXT)
        return True

    @property
    def images(self) -> list[str]:
        """Ids of all images of this side (a copy)."""
        return list(self._images)

    def set_images(self, ids: Iterable[str]) -> None:
        ids = list(ids)
        if ids == self._images:
            return

        self._images = ids
        self._notify(SideChange.IMAGES)

    @property
    def learned_amount(self) -> int:
        """Times this side was answered correctly in its current deck."""
        return self._learned_amount

    def set_learned_amount(self, amount: int) -> None:
        self._learned_amount = amount
        self._notify(SideChange.LEARNED_AMOUNT)

    def increment_learned_amount(self) -> None:
        self.set_learned_amount(self._learned_amount + 1)

    def add_listener(self, listener: SideListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SideListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def copy(self) -> CardSide:
        """Copy text, images and learned amount. Listeners are not copied."""
        side = CardSide(self._text, self._images)
        side._learned_amount = self._learned_amount
        return side

    def _notify(self, change: SideChange) -> None:
        for listener in list(self._listeners):
            listener(self, change)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"CardSide({self._text!r})"
