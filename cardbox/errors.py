"""
cardbox.errors
---------

Exceptions raised by the card store, the scheduler and study sessions.
"""


class CardboxError(Exception):
    """Base class for every error raised by cardbox."""


class ValidationError(CardboxError):
    """A required text field was empty."""


class NotFound(CardboxError):
    """No card or group exists with the given id or name."""


class Conflict(CardboxError):
    """A group with the given name already exists."""


class InvalidDifficulty(CardboxError, ValueError):
    """The value is not one of the known difficulties."""


class InvalidState(CardboxError):
    """The study session action is not allowed in the session's current state."""


class PersistenceError(CardboxError):
    """The storage backend failed to load or save the collection."""


__all__ = [
    "CardboxError",
    "ValidationError",
    "NotFound",
    "Conflict",
    "InvalidDifficulty",
    "InvalidState",
    "PersistenceError",
]
