"""
cardbox.session
---------

This module defines the StudySession class, the state machine behind a study sitting.

Classes:
    StudySession: Walks a learner through a set of cards, flipping and rating them.
    SessionState: Enum representing the states of a StudySession.
    SessionSource: Enum representing why a StudySession holds the cards it holds.
"""

from __future__ import annotations
from enum import Enum
from random import Random
import logging
from cardbox.clock import Clock
from cardbox.difficulty import Difficulty
from cardbox.errors import InvalidState
from cardbox.flashcard import Flashcard
from cardbox.review_log import ReviewLog
from cardbox.store import CardStore

logger = logging.getLogger(__name__)

PRACTICE_SIZE = 5


class SessionState(Enum):
    Building = "building"
    Active = "active"
    Complete = "complete"


class SessionSource(Enum):
    """
    Enum representing how the cards of a session were selected.

    Due: the cards due today.
    Practice: nothing was due, so a random sample of the collection was drawn.
    Empty: the collection has no cards at all.
    """

    Due = "due"
    Practice = "practice"
    Empty = "empty"


class StudySession:
    """
    A study sitting over a snapshot of a CardStore.

    The session starts on its first card with the answer hidden. The learner flips
    the card, rates it, and the session moves on until every card is done. A session
    over an empty collection is complete from the start; its source is
    SessionSource.Empty so callers can tell it apart from a finished session.

    Attributes:
        store: The collection studied and updated by ratings.
        clock: Supplies "today" when selecting due cards. Defaults to the store's clock.
        rng: Random source for the practice sample drawn when nothing is due.
        practice_size: The maximum number of cards in a practice sample.
    """

    def __init__(
        self,
        store: CardStore,
        clock: Clock | None = None,
        rng: Random | None = None,
        practice_size: int = PRACTICE_SIZE,
    ) -> None:
        if practice_size < 1:
            raise ValueError(f"practice_size must be at least 1, got {practice_size}")

        self.store = store
        self.clock = clock if clock is not None else store.clock
        self.rng = rng if rng is not None else Random()
        self.practice_size = practice_size

        self._build()

    def _build(self) -> None:
        self._state = SessionState.Building

        now = self.clock.now()
        scheduler = self.store.scheduler
        cards = self.store.list()
        due_cards = [card for card in cards if scheduler.is_due(card.next_review_at, now)]

        if due_cards:
            self._source = SessionSource.Due
            selected = due_cards
        elif cards:
            self._source = SessionSource.Practice
            selected = self.rng.sample(cards, min(self.practice_size, len(cards)))
            logger.info(f"No cards due, practicing {len(selected)} random cards")
        else:
            self._source = SessionSource.Empty
            selected = []

        self._cards = tuple(selected)
        self._index = 0
        self._flipped = False
        self._state = SessionState.Active if self._cards else SessionState.Complete

        logger.info(
            f"Study session built: {len(self._cards)} cards ({self._source.value})"
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def source(self) -> SessionSource:
        return self._source

    @property
    def cards(self) -> tuple[Flashcard, ...]:
        return self._cards

    @property
    def index(self) -> int:
        return self._index

    @property
    def flipped(self) -> bool:
        return self._flipped

    @property
    def is_complete(self) -> bool:
        return self._state == SessionState.Complete

    @property
    def current_card(self) -> Flashcard | None:
        if self.is_complete:
            return None
        return self._cards[self._index]

    @property
    def position(self) -> tuple[int, int]:
        """
        The 1-based number of the current card and the session length, e.g. (2, 5) for "card 2 of 5".
        """

        if self.is_complete:
            return len(self._cards), len(self._cards)
        return self._index + 1, len(self._cards)

    @property
    def progress(self) -> float:
        """
        The fraction of the session's cards already passed, between 0 and 1.
        """

        if self.is_complete:
            return 1.0
        return self._index / len(self._cards)

    def flip(self) -> None:
        self._require_active("flip")
        self._flipped = not self._flipped

    def next(self) -> None:
        self._require_active("next")
        self._flipped = False
        if self._index + 1 < len(self._cards):
            self._index += 1
        else:
            self._state = SessionState.Complete
            logger.info(f"Study session complete after {len(self._cards)} cards")

    def previous(self) -> None:
        self._require_active("previous")
        if self._index > 0:
            self._index -= 1
            self._flipped = False

    def rate(self, difficulty: Difficulty | str) -> ReviewLog:
        """
        Rates the current card and moves on to the next one.

        The answer must have been revealed with flip() first. If the store fails to
        record the review, the session stays on the current card.

        Args:
            difficulty: The difficulty the learner reported for the current card.

        Returns:
            ReviewLog: The log entry of the review.

        Raises:
            InvalidState: If the session is complete or the current card is not flipped.
            NotFound: If the current card was deleted from the store meanwhile.
            InvalidDifficulty: If difficulty is not one of the known difficulties.
            PersistenceError: If the store could not save the review.
        """

        self._require_active("rate")
        if not self._flipped:
            raise InvalidState("Cannot rate a card before its answer is revealed")

        current = self._cards[self._index]
        _, review_log = self.store.review(current.card_id, difficulty)
        self.next()

        return review_log

    def restart(self) -> None:
        """
        Builds a new session from the store's current cards, using the same selection rules.

        Raises:
            InvalidState: If the session is not complete yet.
        """

        if not self.is_complete:
            raise InvalidState("Only a complete session can be restarted")
        self._build()

    def _require_active(self, action: str) -> None:
        if self._state != SessionState.Active:
            raise InvalidState(f"Cannot {action} in a {self._state.value} session")


__all__ = ["StudySession", "SessionState", "SessionSource", "PRACTICE_SIZE"]
