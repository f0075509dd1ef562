"""
Scheduling core: cards, the category tree, Leitner transitions and events.

Components:
- Card / CardSide: learnable units and their content
- Category: tree of leveled decks with bubbling change events
- scheduler: raise_level, reset_level, reappend, full_reset
- Lesson: root holder with a save-needed flag
"""

from .card import Card
from .card_side import CardSide, SideChange
from .category import Category, natural_sort_key
from .clock import Clock, FixedClock, SystemClock
from .events import CardEvent, CategoryEvent, CategoryObserver
from .exceptions import (
    InvalidContentError,
    InvariantViolationError,
    LeitboxError,
    NullDateError,
)
from .intervals import IntervalPolicy, LeitnerIntervals
from .lesson import Lesson
from .scheduler import full_reset, raise_level, reappend, reset_level
from .search import SearchSide, find_positions, search_cards

__all__ = [
    # Cards
    "Card",
    "CardSide",
    "SideChange",
    # Tree
    "Category",
    "natural_sort_key",
    "Lesson",
    # Time
    "Clock",
    "FixedClock",
    "SystemClock",
    # Events
    "CardEvent",
    "CategoryEvent",
    "CategoryObserver",
    # Errors
    "LeitboxError",
    "InvalidContentError",
    "InvariantViolationError",
    "NullDateError",
    # Scheduling
    "IntervalPolicy",
    "LeitnerIntervals",
    "raise_level",
    "reset_level",
    "reappend",
    "full_reset",
    # Search
    "SearchSide",
    "search_cards",
    "find_positions",
]
