"""
Errors raised by the scheduling core.

All validation happens before any mutation, so catching one of these
leaves the card tree exactly as it was before the failing call.
"""


class LeitboxError(Exception):
    """Base class for all scheduling core errors."""
    pass


class InvalidContentError(LeitboxError, ValueError):
    """Raised when a card side has no text after normalization."""
    pass


class InvariantViolationError(LeitboxError):
    """
    Raised when a caller breaks a structural rule of the tree.

    Examples: removing the root category, removing or transitioning a
    card that is not attached to the tree it is queried against. This
    signals a caller bug, not a recoverable condition.
    """
    pass


class NullDateError(LeitboxError, ValueError):
    """Raised when a required date (creation, modification) is set to None."""
    pass
