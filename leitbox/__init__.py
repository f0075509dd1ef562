"""
leitbox: a Leitner box spaced repetition engine.

Tracks flash cards in a tree of categories with one deck per level and
decides when each card becomes due again.
"""

__version__ = "1.0.0"
