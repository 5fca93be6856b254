"""
cardbox
-------

Cardbox keeps a learner's flashcards, schedules their reviews from a self-reported difficulty,
and runs study sessions over the cards that are due.
"""

from cardbox.difficulty import Difficulty
from cardbox.errors import (
    CardboxError,
    ValidationError,
    NotFound,
    Conflict,
    InvalidDifficulty,
    InvalidState,
    PersistenceError,
)
from cardbox.clock import SystemClock, FixedClock
from cardbox.flashcard import Flashcard
from cardbox.review_log import ReviewLog
from cardbox.scheduler import Scheduler
from cardbox.storage import MemoryStorage, JsonFileStorage
from cardbox.store import CardStore, StoreAction, StoreEvent
from cardbox.statistics import Statistics, StatisticsAggregator
from cardbox.session import StudySession, SessionState, SessionSource

__all__ = [
    "Difficulty",
    "CardboxError",
    "ValidationError",
    "NotFound",
    "Conflict",
    "InvalidDifficulty",
    "InvalidState",
    "PersistenceError",
    "SystemClock",
    "FixedClock",
    "Flashcard",
    "ReviewLog",
    "Scheduler",
    "MemoryStorage",
    "JsonFileStorage",
    "CardStore",
    "StoreAction",
    "StoreEvent",
    "Statistics",
    "StatisticsAggregator",
    "StudySession",
    "SessionState",
    "SessionSource",
]
