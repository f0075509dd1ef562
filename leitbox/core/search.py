"""
Plain substring search over card sides.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from .card import Card


class SearchSide(str, Enum):
    """Which card sides a search looks at."""
    FRONT = "front"
    BACK = "back"
    BOTH = "both"


def search_cards(
    text: str,
    side: SearchSide,
    match_case: bool,
    cards: Iterable[Card],
) -> list[Card]:
    """
    Find cards whose selected side(s) contain the given text.

    Args:
        text: Substring to look for
        side: FRONT, BACK or BOTH (either side matches)
        match_case: Case sensitive if True
        cards: Cards to search, e.g. category.get_cards()

    Returns:
        Matching cards in input order
    """
    needle = text if match_case else text.casefold()

    found = []
    for card in cards:
        haystacks = []
        if side in (SearchSide.FRONT, SearchSide.BOTH):
            haystacks.append(card.front.text)
        if side in (SearchSide.BACK, SearchSide.BOTH):
            haystacks.append(card.back.text)

        if not match_case:
            haystacks = [h.casefold() for h in haystacks]

        if any(needle in h for h in haystacks):
            found.append(card)

    return found


def find_positions(text: str, query: str, ignore_case: bool = False) -> list[int]:
    """Start offsets of all non-overlapping occurrences of query in text."""
    if not query:
        return []

    if ignore_case:
        text = text.lower()
        query = query.lower()

    positions = []
    pos = text.find(query)
    while pos >= 0:
        positions.append(pos)
        pos = text.find(query, pos + len(query))
    return positions
