"""
Unit tests for the Category tree.

Tests:
- add/remove/move of cards and the events they fire
- Recursive card queries and their edge cases
- Deck count propagation
- Child ordering, paths and depths
- clone_without_progress

Run: pytest tests/unit/test_category.py -v
"""

from datetime import timedelta

import pytest

from leitbox.core import (
    CardEvent,
    Category,
    CategoryEvent,
    InvalidContentError,
    InvariantViolationError,
    natural_sort_key,
    raise_level,
)


def child(root, path):
    node = root
    for name in path.split("/"):
        node = node.get_child(name)
    return node


class TestAddCard:
    """Test add_card()."""

    def test_add_to_level_zero(self, root, make_card):
        card = make_card()
        root.add_card(card)

        assert root.get_cards(0) == [card]
        assert card.category is root
        assert card.level == 0
        assert card.is_unlearned()

    def test_add_to_higher_level_grows_decks_and_sets_expiration(self, root, make_card, clock):
        card = make_card()
        root.add_card(card, 3, clock=clock)

        assert root.deck_count == 4
        assert card.level == 3
        assert card.date_expired == clock.now()

    def test_add_to_higher_level_keeps_existing_expiration(self, root, make_card, clock):
        card = make_card()
        expiration = clock.now() + timedelta(days=5)
        card.date_expired = expiration
        root.add_card(card, 2, clock=clock)
        assert card.date_expired == expiration

    def test_add_to_level_zero_clears_expiration(self, root, make_card, clock):
        card = make_card()
        card.date_expired = clock.now()
        root.add_card(card)
        assert card.date_expired is None

    def test_fires_added(self, tree, make_card, recorder):
        spanish = child(tree, "Languages/Spanish")
        tree.add_observer(recorder)
        card = make_card()

        spanish.add_card(card)
        assert recorder.card_events == [(CardEvent.ADDED, card, spanish, 0)]

    def test_attached_card_rejected(self, tree, make_card):
        card = make_card()
        tree.add_card(card)
        with pytest.raises(InvariantViolationError):
            child(tree, "Math").add_card(card)
        assert card.category is tree

    def test_negative_level_rejected(self, root, make_card):
        with pytest.raises(InvariantViolationError):
            root.add_card(make_card(), -1)
        assert root.deck_count == 0


class TestRemoveCard:
    """Test remove_card()."""

    def test_remove_clears_category(self, root, make_card):
        card = make_card()
        root.add_card(card)
        root.remove_card(card)

        assert card.category is None
        assert root.get_cards() == []

    def test_remove_from_ancestor_reaches_owner(self, tree, make_card, recorder):
        french = child(tree, "Languages/French")
        card = make_card()
        french.add_card(card, 2)
        tree.add_observer(recorder)

        tree.remove_card(card)
        assert card.category is None
        assert french.get_cards() == []
        assert recorder.card_events == [(CardEvent.REMOVED, card, french, 2)]

    def test_remove_trims_decks_up_the_tree(self, tree, make_card):
        french = child(tree, "Languages/French")
        card = make_card()
        french.add_card(card, 4)
        assert tree.deck_count == 5

        tree.remove_card(card)
        assert french.deck_count == 0
        assert child(tree, "Languages").deck_count == 0
        assert tree.deck_count == 0

    def test_remove_card_outside_subtree_rejected(self, tree, make_card):
        card = make_card()
        child(tree, "Math").add_card(card)
        with pytest.raises(InvariantViolationError):
            child(tree, "Languages").remove_card(card)
        assert card.category is child(tree, "Math")

    def test_remove_detached_card_rejected(self, root, make_card):
        with pytest.raises(InvariantViolationError):
            root.remove_card(make_card())


class TestMoveCard:
    """Test move_card()."""

    def test_move_keeps_level_and_stats(self, tree, make_card, clock):
        spanish = child(tree, "Languages/Spanish")
        math = child(tree, "Math")
        card = make_card()
        spanish.add_card(card)
        raise_level(card, clock.now(), clock.now() + timedelta(days=1), clock)
        expiration = card.date_expired

        tree.move_card(card, math)
        assert card.category is math
        assert card.level == 1
        assert card.tests_passed == 1
        assert card.date_expired == expiration
        assert math.get_cards(1) == [card]
        assert spanish.get_cards() == []

    def test_move_fires_single_moved_pair(self, tree, make_card, recorder):
        spanish = child(tree, "Languages/Spanish")
        math = child(tree, "Math")
        card = make_card()
        spanish.add_card(card)
        tree.add_observer(recorder)

        tree.move_card(card, math)
        assert recorder.card_event_types == [CardEvent.MOVED, CardEvent.MOVED]
        assert all(category is spanish for _, _, category, _ in recorder.card_events)

    def test_both_subtrees_observe_move(self, tree, make_card, recorder, recorder_factory):
        languages = child(tree, "Languages")
        math = child(tree, "Math")
        card = make_card()
        child(tree, "Languages/French").add_card(card)

        math_recorder = recorder_factory()
        languages.add_observer(recorder)
        math.add_observer(math_recorder)

        languages.move_card(card, math)
        assert recorder.card_event_types == [CardEvent.MOVED]
        assert math_recorder.card_event_types == [CardEvent.MOVED]


class TestQueries:
    """Test the recursive card queries."""

    def test_get_cards_aggregates_subtree(self, tree, make_card):
        spanish = child(tree, "Languages/Spanish")
        math = child(tree, "Math")
        a, b, c = make_card("a", "1"), make_card("b", "2"), make_card("c", "3")
        tree.add_card(a)
        spanish.add_card(b)
        math.add_card(c, 1)

        assert tree.get_cards(0) == [a, b]
        assert tree.get_cards(1) == [c]
        assert tree.get_cards() == [a, b, c]
        assert child(tree, "Languages").get_cards() == [b]

    def test_level_beyond_deck_count_is_empty(self, root, make_card):
        root.add_card(make_card())
        assert root.get_cards(7) == []
        assert root.get_local_cards(7) == []

    def test_negative_level_rejected(self, root):
        with pytest.raises(InvariantViolationError):
            root.get_cards(-1)
        with pytest.raises(InvariantViolationError):
            root.get_local_cards(-1)

    def test_learned_cards_at_level_zero_always_empty(self, root, make_card, clock):
        card = make_card()
        root.add_card(card)
        card.date_expired = clock.now() + timedelta(days=1)
        assert root.get_learned_cards(0, clock) == []

    def test_learnable_level_zero_ignores_expiration(self, root, make_card, clock):
        card = make_card()
        root.add_card(card)
        card.date_expired = clock.now() + timedelta(days=1)
        assert root.get_learnable_cards(0, clock) == [card]

    def test_learnable_higher_levels_are_expired_only(self, root, make_card, clock):
        fresh, due = make_card("fresh", "x"), make_card("due", "y")
        fresh.date_expired = clock.now() + timedelta(days=3)
        due.date_expired = clock.now() - timedelta(days=1)
        root.add_card(fresh, 1)
        root.add_card(due, 1)
        new = make_card("new", "z")
        root.add_card(new)

        assert root.get_learnable_cards(1, clock) == [due]
        assert root.get_learnable_cards(clock=clock) == [new, due]
        assert root.get_learned_cards(clock=clock) == [fresh]
        assert root.get_expired_cards(clock=clock) == [due]

    def test_unlearned_cards(self, tree, make_card):
        assert tree.get_unlearned_cards() == []
        card = make_card()
        child(tree, "Math").add_card(card)
        assert tree.get_unlearned_cards() == [card]

    def test_local_cards_exclude_children(self, tree, make_card):
        languages = child(tree, "Languages")
        local, nested = make_card("l", "1"), make_card("n", "2")
        languages.add_card(local, 1)
        child(tree, "Languages/Spanish").add_card(nested, 1)

        assert languages.get_local_cards() == [local]
        assert languages.get_local_cards(1) == [local]
        assert languages.get_cards(1) == [local, nested]

    def test_results_are_fresh_lists(self, root, make_card):
        card = make_card()
        root.add_card(card)

        root.get_cards(0).clear()
        root.get_local_cards(0).clear()
        assert root.get_cards(0) == [card]


class TestDeckCount:
    """Test deck count propagation."""

    def test_parent_grows_with_child(self, tree, make_card):
        child(tree, "Languages/Spanish").add_card(make_card(), 3)
        assert child(tree, "Languages").deck_count == 4
        assert tree.deck_count == 4
        assert child(tree, "Math").deck_count == 0

    def test_deck_count_is_max_of_children(self, tree, make_card):
        child(tree, "Languages/Spanish").add_card(make_card(), 1)
        child(tree, "Math").add_card(make_card(), 4)
        assert child(tree, "Languages").deck_count == 2
        assert tree.deck_count == 5

    def test_removing_category_trims_to_sibling_maximum(self, tree, make_card):
        languages = child(tree, "Languages")
        child(tree, "Languages/Spanish").add_card(make_card(), 1)
        child(tree, "Languages/French").add_card(make_card(), 5)
        assert languages.deck_count == 6

        child(tree, "Languages/French").remove()
        assert languages.deck_count == 2
        assert tree.deck_count == 2

    def test_local_cards_keep_decks_beyond_children(self, tree, make_card):
        languages = child(tree, "Languages")
        languages.add_card(make_card(), 3)
        child(tree, "Languages/Spanish").add_card(make_card(), 1)
        assert languages.deck_count == 4

    def test_adding_filled_subtree_grows_new_parent(self, tree, make_card):
        extra = Category("Extra")
        extra.add_card(make_card(), 2)
        child(tree, "Math").add_child(extra)
        assert child(tree, "Math").deck_count == 3
        assert tree.deck_count == 3


class TestTree:
    """Test category hierarchy operations."""

    def test_children_sorted_naturally(self, root):
        for name in ["Chapter 10", "chapter 2", "Appendix", "Chapter 1"]:
            root.add_child(Category(name))
        assert [c.name for c in root.children] == ["Appendix", "Chapter 1", "chapter 2", "Chapter 10"]

    def test_natural_sort_key(self):
        names = ["item20", "Item3", "item100"]
        assert sorted(names, key=natural_sort_key) == ["Item3", "item20", "item100"]

    def test_path_and_depth(self, tree):
        spanish = child(tree, "Languages/Spanish")
        assert spanish.path == "All/Languages/Spanish"
        assert spanish.depth == 2
        assert tree.depth == 0
        assert spanish.root is tree

    def test_add_child_fires_added(self, root, recorder):
        root.add_observer(recorder)
        math = root.add_child(Category("Math"))
        assert recorder.category_events == [(CategoryEvent.ADDED, math)]
        assert math.parent is root

    def test_duplicate_sibling_name_rejected(self, tree):
        with pytest.raises(InvariantViolationError):
            tree.add_child(Category("Math"))

    def test_child_with_parent_rejected(self, tree):
        with pytest.raises(InvariantViolationError):
            Category("Other").add_child(child(tree, "Math"))

    def test_cycle_rejected(self, root):
        sub = Category("Sub")
        with pytest.raises(InvariantViolationError):
            sub.add_child(sub)

    def test_added_subtree_depths_updated(self, root):
        outer = Category("Outer")
        inner = outer.add_child(Category("Inner"))
        root.add_child(outer)
        assert inner.depth == 2

    def test_remove_root_rejected(self, root):
        with pytest.raises(InvariantViolationError):
            root.remove()

    def test_remove_fires_before_parent_cleared(self, tree):
        math = child(tree, "Math")
        seen_parents = []

        class ParentSpy:
            def on_card_event(self, event, card, category, deck):
                pass

            def on_category_event(self, event, category):
                seen_parents.append((event, category.parent))

        tree.add_observer(ParentSpy())
        math.remove()

        assert seen_parents == [(CategoryEvent.REMOVED, tree)]
        assert math.parent is None
        assert math.depth == 0
        assert tree.get_child("Math") is None

    def test_contains_and_walk(self, tree):
        spanish = child(tree, "Languages/Spanish")
        assert tree.contains(spanish)
        assert not child(tree, "Math").contains(spanish)
        assert [c.name for c in tree.walk()] == ["All", "Languages", "French", "Spanish", "Math"]

    def test_rename_resorts_and_fires_edited(self, tree, recorder):
        tree.add_observer(recorder)
        math = child(tree, "Math")
        math.rename("Algebra")

        assert [c.name for c in tree.children] == ["Algebra", "Languages"]
        assert recorder.category_events == [(CategoryEvent.EDITED, math)]

    def test_rename_to_same_name_fires_nothing(self, tree, recorder):
        tree.add_observer(recorder)
        child(tree, "Math").rename("Math")
        assert recorder.category_events == []

    def test_empty_name_rejected(self):
        with pytest.raises(InvalidContentError):
            Category("  ")


class TestCloneWithoutProgress:
    """Test deep cloning of a tree."""

    def test_structure_and_content_preserved(self, tree, make_card, clock):
        spanish = child(tree, "Languages/Spanish")
        learned = make_card("hablar", "to speak")
        spanish.add_card(learned)
        raise_level(learned, clock.now(), clock.now() + timedelta(days=1), clock)
        tree.add_card(make_card("top", "level"))

        clone = tree.clone_without_progress()

        assert [c.path for c in clone.walk()] == [c.path for c in tree.walk()]
        cloned_cards = clone.get_cards()
        assert sorted(c.front.text for c in cloned_cards) == ["hablar", "top"]
        for card in cloned_cards:
            assert card.level == 0
            assert card.date_tested is None
            assert card.date_expired is None
            assert (card.tests_total, card.tests_passed) == (0, 0)
        assert child(clone, "Languages/Spanish").get_cards(0)[0].front.text == "hablar"

    def test_clone_is_independent(self, tree, make_card):
        tree.add_card(make_card())
        clone = tree.clone_without_progress()
        clone.get_cards()[0].set_sides("changed", "too")
        assert tree.get_cards()[0].front.text == "Q"
