"""
Category: a named node of the deck tree.

Each category owns one deck (a list of cards) per level and an ordered list
of child categories. Card queries aggregate recursively over the subtree
and always return fresh lists, so callers can't corrupt the decks by
mutating a result.

Deck count invariant: after any mutation settles, a category has at least
as many decks as its deepest child, and never trailing empty decks beyond
that. The count is recomputed on every node along the event path.
"""

from __future__ import annotations

import re

from loguru import logger

from .card import Card
from .clock import Clock, resolve_clock
from .events import SHAPE_PRESERVING_EVENTS, CardEvent, CategoryEvent, CategoryObserver
from .exceptions import InvalidContentError, InvariantViolationError
from .scheduler import full_reset

_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(name: str) -> tuple:
    """
    Sort key that orders embedded numbers numerically and text case-insensitively.

    "Chapter 2" sorts before "Chapter 10"; ties on the folded text fall
    back to the raw name so the order stays total.
    """
    parts = []
    for chunk in _DIGITS.split(name):
        if not chunk:
            continue
        if chunk.isdigit():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk.casefold()))
    return (tuple(parts), name)


class Category:
    """A tree node owning leveled decks of cards and child categories."""

    def __init__(self, name: str):
        self._name = _normalize_name(name)
        self._depth = 0  # 0 for the root
        self._parent: Category | None = None
        self._children: list[Category] = []
        self._decks: list[list[Card]] = []
        self._observers: list[CategoryObserver] = []

    # =========================================================================
    # Card Mutations
    # =========================================================================

    def add_card(self, card: Card, level: int = 0, clock: Clock | None = None) -> None:
        """
        Add a card to the deck with the given level.

        A card added to level 0 is unlearned. A card added to a higher level
        without an expiration date expires right away.

        Fires ADDED.
        """
        if card.category is not None:
            raise InvariantViolationError(f"{card!r} already belongs to {card.category!r}")
        if level < 0:
            raise InvariantViolationError(f"Invalid deck level {level}")

        self._add_card_internal(card, level, resolve_clock(clock))
        logger.debug(f"Added {card!r} to {self.path} at level {level}")

        self._fire_card_event(CardEvent.ADDED, card, self, level)

    def remove_card(self, card: Card) -> None:
        """
        Remove a card from its deck.

        May be called on any ancestor of the card's category; the card is
        always removed from the category that actually holds it.

        Fires REMOVED.
        """
        owner = self._owner_in_subtree(card)
        level = card.level

        self._remove_card_internal(card)
        logger.debug(f"Removed {card!r} from {owner.path}")

        owner._fire_card_event(CardEvent.REMOVED, card, owner, level)

    def move_card(self, card: Card, new_category: Category, clock: Clock | None = None) -> None:
        """
        Move a card to another category, keeping its level, dates and stats.

        Unlike removing and re-adding, this fires a single MOVED event at
        the old and at the new category, so history listeners don't count
        the card twice.
        """
        old_category = self._owner_in_subtree(card)
        level = card.level

        old_category._remove_card_internal(card)
        new_category._add_card_internal(card, level, resolve_clock(clock))
        logger.debug(f"Moved {card!r} from {old_category.path} to {new_category.path}")

        # both paths settle before anyone hears about the move
        _settle(old_category._path_to_root())
        _settle(new_category._path_to_root())

        old_category._broadcast_card_event(CardEvent.MOVED, card, old_category, level)
        new_category._broadcast_card_event(CardEvent.MOVED, card, old_category, level)

    def reset_card(self, card: Card, clock: Clock | None = None) -> None:
        """Move the card back to level 0 and delete its stats. Fires DECK_CHANGED."""
        self._owner_in_subtree(card)
        full_reset(card, clock)

    def notify_card_expired(self, card: Card) -> None:
        """Fire EXPIRED for a card of this subtree whose learn time has run out."""
        owner = self._owner_in_subtree(card)
        owner._fire_card_event(CardEvent.EXPIRED, card, owner, card.level)

    # =========================================================================
    # Card Queries
    # =========================================================================

    def get_cards(self, level: int | None = None) -> list[Card]:
        """
        All cards of this category and its child categories.

        Args:
            level: Only cards of this deck level (all levels if None)

        Returns:
            Cards ordered by level, local cards before child cards
        """
        if level is None:
            cards: list[Card] = []
            for i in range(self.deck_count):
                cards.extend(self.get_cards(i))
            return cards

        _check_level(level)
        if level >= self.deck_count:
            return []

        cards = list(self._decks[level])
        for child in self._children:
            cards.extend(child.get_cards(level))
        return cards

    def get_expired_cards(self, level: int | None = None, clock: Clock | None = None) -> list[Card]:
        clock = resolve_clock(clock)
        return [card for card in self.get_cards(level) if card.is_expired(clock)]

    def get_learned_cards(self, level: int | None = None, clock: Clock | None = None) -> list[Card]:
        """Cards that were learned and haven't expired yet. Level 0 never has any."""
        if level == 0:
            return []

        clock = resolve_clock(clock)
        return [card for card in self.get_cards(level) if card.is_learned(clock)]

    def get_learnable_cards(self, level: int | None = None, clock: Clock | None = None) -> list[Card]:
        """
        Cards that can be learned now.

        All level 0 cards are learnable regardless of their dates; on higher
        levels only expired cards are.
        """
        if level is None:
            cards: list[Card] = []
            for i in range(self.deck_count):
                cards.extend(self.get_learnable_cards(i, clock))
            return cards

        if level == 0:
            return self.get_cards(0)
        return self.get_expired_cards(level, clock)

    def get_unlearned_cards(self) -> list[Card]:
        return self.get_cards(0) if self._decks else []

    def get_local_cards(self, level: int | None = None) -> list[Card]:
        """Cards that belong directly to this category, excluding child categories."""
        if level is None:
            return [card for deck in self._decks for card in deck]

        _check_level(level)
        if level >= self.deck_count:
            return []
        return list(self._decks[level])

    @property
    def deck_count(self) -> int:
        """
        Number of decks of this category.

        No child category ever has more decks than its parent.
        """
        return len(self._decks)

    # =========================================================================
    # Tree
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    def rename(self, name: str) -> None:
        """
        Give this category a new name, keeping the parent's children sorted.

        Fires EDITED if the name changed.
        """
        name = _normalize_name(name)
        if name == self._name:
            return

        parent = self._parent
        if parent is not None:
            sibling = parent.get_child(name)
            if sibling is not None and sibling is not self:
                raise InvariantViolationError(f"{parent.path} already has a child named {name!r}")

        self._name = name
        if parent is not None:
            parent._children.remove(self)
            parent._insert_sorted(self)

        self._fire_category_event(CategoryEvent.EDITED, self)

    @property
    def depth(self) -> int:
        """Number of hops from this node to the root."""
        return self._depth

    @property
    def parent(self) -> Category | None:
        return self._parent

    @property
    def children(self) -> tuple[Category, ...]:
        return tuple(self._children)

    @property
    def path(self) -> str:
        """Slash separated names from the root down to this category."""
        if self._parent is None:
            return self._name
        return f"{self._parent.path}/{self._name}"

    @property
    def root(self) -> Category:
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    def get_child(self, name: str) -> Category | None:
        for child in self._children:
            if child.name == name:
                return child
        return None

    def add_child(self, category: Category) -> Category:
        """
        Add a child category at its natural sort position.

        Fires ADDED.
        """
        if category._parent is not None:
            raise InvariantViolationError(f"{category!r} already has a parent")
        if category.contains(self):
            raise InvariantViolationError(f"Can't add {category!r} below itself")
        if self.get_child(category.name) is not None:
            raise InvariantViolationError(f"{self.path} already has a child named {category.name!r}")

        category._parent = self
        category._set_depth(self._depth + 1)
        self._insert_sorted(category)
        logger.debug(f"Added category {category.path}")

        self._fire_category_event(CategoryEvent.ADDED, category)
        return category

    def remove(self) -> None:
        """
        Detach this category from its parent. The root can't be removed.

        Fires REMOVED while the parent link is still in place, so observers
        can still see where the category was.
        """
        parent = self._parent
        if parent is None:
            raise InvariantViolationError("Root category can't be removed")

        parent._children.remove(self)
        logger.debug(f"Removed category {self.path}")

        self._fire_category_event(CategoryEvent.REMOVED, self)

        self._parent = None
        self._set_depth(0)

    def contains(self, category: Category) -> bool:
        """True if the given category is this category or one of its descendants."""
        node: Category | None = category
        while node is not None:
            if node is self:
                return True
            node = node._parent
        return False

    def walk(self) -> list[Category]:
        """This category followed by all of its descendants, depth first."""
        nodes = [self]
        for child in self._children:
            nodes.extend(child.walk())
        return nodes

    def clone_without_progress(self) -> Category:
        """
        Deep copy of this subtree without user dependent progress.

        The clone has the same names and structure and copies of all cards,
        but every card sits at level 0 with no test or expiration dates.
        """
        clone = Category(self._name)
        for card in self.get_local_cards():
            clone.add_card(card.clone_without_progress())

        for child in self._children:
            clone.add_child(child.clone_without_progress())

        return clone

    # =========================================================================
    # Observers
    # =========================================================================

    def add_observer(self, observer: CategoryObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: CategoryObserver) -> None:
        # identity, not equality: observers may define __eq__
        for i, registered in enumerate(self._observers):
            if registered is observer:
                del self._observers[i]
                return

    def _path_to_root(self) -> list[Category]:
        nodes = []
        node: Category | None = self
        while node is not None:
            nodes.append(node)
            node = node._parent
        return nodes

    def _fire_card_event(self, event: CardEvent, card: Card, category: Category, deck: int) -> None:
        if event not in SHAPE_PRESERVING_EVENTS:
            _settle(self._path_to_root())
        self._broadcast_card_event(event, card, category, deck)

    def _broadcast_card_event(self, event: CardEvent, card: Card, category: Category, deck: int) -> None:
        for node in self._path_to_root():
            for observer in list(node._observers):
                observer.on_card_event(event, card, category, deck)

    def _fire_category_event(self, event: CategoryEvent, category: Category) -> None:
        nodes = self._path_to_root()
        _settle(nodes)

        for node in nodes:
            for observer in list(node._observers):
                observer.on_category_event(event, category)

    # =========================================================================
    # Internals
    # =========================================================================

    def _owner_in_subtree(self, card: Card) -> Category:
        owner = card.category
        if owner is None or not self.contains(owner):
            raise InvariantViolationError(f"{card!r} is not part of {self.path}")
        return owner

    def _add_card_internal(self, card: Card, level: int, clock: Clock) -> None:
        while len(self._decks) <= level:
            self._decks.append([])

        self._decks[level].append(card)
        card._category = self
        card._level = level

        # sanity checks
        if level > 0 and card.date_expired is None:
            card.date_expired = clock.now()
        if level == 0:
            card.date_expired = None

    def _remove_card_internal(self, card: Card) -> None:
        owner = card.category
        if owner is None:
            raise InvariantViolationError(f"{card!r} is not attached to a category")

        if owner is not self:
            owner._remove_card_internal(card)
            return

        deck = self._decks[card.level] if card.level < len(self._decks) else []
        if card not in deck:
            raise InvariantViolationError(f"{card!r} is missing from deck {card.level} of {self.path}")

        deck.remove(card)
        card._category = None

    def _adjust_deck_count(self) -> None:
        max_child_decks = max((child.deck_count for child in self._children), default=0)

        while len(self._decks) < max_child_decks:
            self._decks.append([])

        while len(self._decks) > max_child_decks and not self._decks[-1]:
            self._decks.pop()

    def _insert_sorted(self, category: Category) -> None:
        key = natural_sort_key(category.name)
        position = 0
        for child in self._children:
            if key < natural_sort_key(child.name):
                break
            position += 1
        self._children.insert(position, category)

    def _set_depth(self, depth: int) -> None:
        self._depth = depth
        for child in self._children:
            child._set_depth(depth + 1)

    def __repr__(self) -> str:
        return f"Category({self._name})"


def _normalize_name(name: str) -> str:
    if name is None or not str(name).strip():
        raise InvalidContentError("Category name can't be empty")
    return str(name).strip()


def _check_level(level: int) -> None:
    if level < 0:
        raise InvariantViolationError(f"Deck level can't be negative: {level}")


def _settle(nodes: list[Category]) -> None:
    """Recompute deck counts bottom-up along a path to the root."""
    for node in nodes:
        node._adjust_deck_count()
