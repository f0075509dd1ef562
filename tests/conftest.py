"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from leitbox.config import Settings
from leitbox.core import Card, Category, FixedClock


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class EventRecorder:
    """Category observer that remembers every event it receives."""

    def __init__(self):
        self.card_events = []
        self.category_events = []

    def on_card_event(self, event, card, category, deck):
        self.card_events.append((event, card, category, deck))

    def on_category_event(self, event, category):
        self.category_events.append((event, category))

    @property
    def card_event_types(self):
        return [event for event, *_ in self.card_events]

    @property
    def category_event_types(self):
        return [event for event, _ in self.category_events]

    def clear(self):
        self.card_events.clear()
        self.category_events.clear()


@pytest.fixture
def start_time():
    return datetime(2024, 1, 1, 12, 0)


@pytest.fixture
def clock(start_time):
    """Fixed clock starting at 2024-01-01 12:00."""
    return FixedClock(start_time)


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def recorder_factory():
    """Build extra recorders when a test watches several categories."""
    return EventRecorder


@pytest.fixture
def make_card(clock):
    """Factory for detached cards on the test clock."""

    def _make(front="Q", back="R"):
        return Card(front, back, clock=clock)

    return _make


@pytest.fixture
def root():
    return Category("All")


@pytest.fixture
def tree(root):
    """
    Sample tree:

        All
        ├── Languages
        │   ├── French
        │   └── Spanish
        └── Math
    """
    languages = root.add_child(Category("Languages"))
    languages.add_child(Category("Spanish"))
    languages.add_child(Category("French"))
    root.add_child(Category("Math"))
    return root


@pytest.fixture
def settings():
    """Settings independent of the environment."""
    return Settings(
        _env_file=None,
        interval_days=[1, 3, 7],
        max_interval_days=30,
        new_cards_per_session=5,
        max_due_cards=5,
    )
