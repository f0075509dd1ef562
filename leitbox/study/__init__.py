"""
Study: learn session driver on top of the scheduling core.
"""

from .session import LearnSession, SessionStats, fire_expirations

__all__ = [
    "LearnSession",
    "SessionStats",
    "fire_expirations",
]
