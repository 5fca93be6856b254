"""
cardbox.store
---------

This module defines the CardStore class, the single owner of a learner's flashcards and groups.

Classes:
    CardStore: In-memory collection of flashcards and groups, persisted through a Storage backend.
    StoreAction: Enum of the mutations a CardStore reports to its subscribers.
    StoreEvent: The notification delivered to subscribers after a committed mutation.
"""

from __future__ import annotations
from collections.abc import Callable, Sequence
from copy import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
import logging
from cardbox.clock import Clock, SystemClock
from cardbox.difficulty import Difficulty
from cardbox.errors import (
    Conflict,
    NotFound,
    PersistenceError,
    ValidationError,
)
from cardbox.flashcard import Flashcard, new_card_id
from cardbox.review_log import ReviewLog
from cardbox.scheduler import Scheduler, parse_difficulty
from cardbox.storage import Storage

logger = logging.getLogger(__name__)

RECENT_DAYS = 7
FILTERS = ("all", "due", "recent")

SAMPLE_GROUPS = ("Math", "Science", "Languages")
SAMPLE_CARDS = (
    ("What is the capital of France?", "Paris", Difficulty.Easy, "Languages"),
    ("What is 2 + 2?", "4", Difficulty.Easy, "Math"),
    ("What's the formula for area of a circle?", "πr²", Difficulty.Medium, "Math"),
)


class StoreAction(Enum):
    CardCreated = "card_created"
    CardUpdated = "card_updated"
    CardDeleted = "card_deleted"
    CardReviewed = "card_reviewed"
    GroupCreated = "group_created"
    GroupDeleted = "group_deleted"


@dataclass(frozen=True)
class StoreEvent:
    """
    Attributes:
        action: What changed.
        target: The id of the card or the name of the group that changed.
    """

    action: StoreAction
    target: str


Listener = Callable[[StoreEvent], None]


class CardStore:
    """
    The authoritative collection of flashcards and groups.

    Every mutation is saved through the storage backend before it becomes visible.
    If the save fails, the mutation is discarded and a PersistenceError is raised.
    Cards returned by the store are copies; edit them and pass them to update().

    Attributes:
        storage: The backend the collection is loaded from and saved to.
        scheduler: Computes next review dates and due-ness.
        clock: Supplies the current date and time.

    With seed_samples, a loaded collection without groups receives the sample groups
    and one without cards receives the sample cards, each independently of the other.
    """

    def __init__(
        self,
        storage: Storage,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        seed_samples: bool = False,
    ) -> None:
        self.storage = storage
        self.scheduler = scheduler if scheduler is not None else Scheduler()
        self.clock = clock if clock is not None else SystemClock()
        self._listeners: list[Listener] = []

        try:
            cards, groups = storage.load()
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Failed to load collection: {e}")
            raise PersistenceError(f"Failed to load collection: {e}") from e

        self._cards: list[Flashcard] = list(cards)
        self._groups: tuple[str, ...] = tuple(groups)

        if seed_samples and (not self._cards or not self._groups):
            self._seed_samples()

        logger.info(
            f"Loaded {len(self._cards)} cards and {len(self._groups)} groups"
        )

    def _seed_samples(self) -> None:
        # groups and cards are seeded independently: a collection without groups
        # gets the sample groups, one without cards gets the sample cards
        groups = self._groups
        if not groups:
            logger.warning("No groups, seeding sample groups")
            groups = SAMPLE_GROUPS

        cards = self._cards
        if not cards:
            logger.warning("No cards, seeding sample cards")
            now = self.clock.now()
            cards = [
                Flashcard(
                    card_id=new_card_id(),
                    question=question,
                    answer=answer,
                    difficulty=difficulty,
                    last_reviewed_at=now,
                    next_review_at=self.scheduler.compute_next_review(now, difficulty),
                    group=group if group in groups else None,
                )
                for question, answer, difficulty, group in SAMPLE_CARDS
            ]

        self._save(cards, groups)
        self._cards = cards
        self._groups = groups

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return any(card.card_id == card_id for card in self._cards)

    @property
    def groups(self) -> tuple[str, ...]:
        return self._groups

    def list(self) -> list[Flashcard]:
        """
        Returns copies of all cards in insertion order.
        """

        return [copy(card) for card in self._cards]

    def get(self, card_id: str) -> Flashcard:
        return copy(self._cards[self._index_of(card_id)])

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registers a listener called with a StoreEvent after every committed mutation.

        Returns:
            A function that removes the listener again.
        """

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def create(
        self,
        question: str,
        answer: str,
        difficulty: Difficulty | str = Difficulty.Medium,
        group: str | None = None,
        next_review_at: datetime | None = None,
    ) -> Flashcard:
        """
        Creates a new card and appends it to the collection.

        Args:
            question: The front of the card. Must not be blank.
            answer: The back of the card. Must not be blank.
            difficulty: The initial difficulty, medium unless given.
            group: The name of an existing group, or None.
            next_review_at: An explicit first review date. Computed by the scheduler when None.

        Returns:
            Flashcard: A copy of the created card.

        Raises:
            ValidationError: If the question or answer is blank, or next_review_at is naive.
            InvalidDifficulty: If difficulty is not one of the known difficulties.
            NotFound: If the group does not exist.
            PersistenceError: If the collection could not be saved.
        """

        self._validate_text(question=question, answer=answer)
        difficulty = parse_difficulty(difficulty)
        self._check_group(group)
        if next_review_at is not None:
            self._validate_date(next_review_at)

        now = self.clock.now()
        if next_review_at is None:
            next_review_at = self.scheduler.compute_next_review(now, difficulty)

        card = Flashcard(
            card_id=new_card_id(),
            question=question,
            answer=answer,
            difficulty=difficulty,
            last_reviewed_at=now,
            next_review_at=next_review_at,
            group=group,
        )

        self._commit(
            [*self._cards, card],
            self._groups,
            StoreEvent(StoreAction.CardCreated, card.card_id),
        )
        return copy(card)

    def update(self, card: Flashcard) -> Flashcard:
        """
        Replaces the text, difficulty, group and next review date of an existing card.

        The next review date is resolved as follows:
        - a next_review_at different from the stored one is an explicit date and is kept,
          even when the difficulty changed too;
        - otherwise a changed difficulty reschedules the card from now;
        - otherwise the stored next review date is kept.
        The card's id and last review date are never changed by an update.

        Returns:
            Flashcard: A copy of the updated card.

        Raises:
            NotFound: If no card has this id, or the group does not exist.
            ValidationError: If the question or answer is blank, or next_review_at is naive.
            InvalidDifficulty: If difficulty is not one of the known difficulties.
            PersistenceError: If the collection could not be saved.
        """

        index = self._index_of(card.card_id)
        stored = self._cards[index]

        self._validate_text(question=card.question, answer=card.answer)
        difficulty = parse_difficulty(card.difficulty)
        self._check_group(card.group)
        self._validate_date(card.next_review_at)

        if card.next_review_at != stored.next_review_at:
            next_review_at = card.next_review_at
        elif difficulty != stored.difficulty:
            next_review_at = self.scheduler.compute_next_review(
                self.clock.now(), difficulty
            )
        else:
            next_review_at = stored.next_review_at

        updated = Flashcard(
            card_id=stored.card_id,
            question=card.question,
            answer=card.answer,
            difficulty=difficulty,
            last_reviewed_at=stored.last_reviewed_at,
            next_review_at=next_review_at,
            group=card.group,
        )

        cards = list(self._cards)
        cards[index] = updated
        self._commit(
            cards, self._groups, StoreEvent(StoreAction.CardUpdated, updated.card_id)
        )
        return copy(updated)

    def delete(self, card_id: str) -> None:
        """
        Removes a card from the collection.

        Raises:
            NotFound: If no card has this id, including when it was already deleted.
            PersistenceError: If the collection could not be saved.
        """

        index = self._index_of(card_id)
        cards = self._cards[:index] + self._cards[index + 1 :]
        self._commit(cards, self._groups, StoreEvent(StoreAction.CardDeleted, card_id))

    def review(
        self, card_id: str, difficulty: Difficulty | str
    ) -> tuple[Flashcard, ReviewLog]:
        """
        Records that the learner studied a card and rated it with a difficulty.

        The rating replaces the card's difficulty and the card is rescheduled from now.

        Args:
            card_id: The id of the reviewed card.
            difficulty: The difficulty the learner reported.

        Returns:
            tuple[Flashcard, ReviewLog]: A copy of the reviewed card and its review log.

        Raises:
            NotFound: If no card has this id.
            InvalidDifficulty: If difficulty is not one of the known difficulties.
            PersistenceError: If the collection could not be saved.
        """

        index = self._index_of(card_id)
        difficulty = parse_difficulty(difficulty)
        now = self.clock.now()

        reviewed = copy(self._cards[index])
        reviewed.difficulty = difficulty
        reviewed.last_reviewed_at = now
        reviewed.next_review_at = self.scheduler.compute_next_review(now, difficulty)

        cards = list(self._cards)
        cards[index] = reviewed
        self._commit(cards, self._groups, StoreEvent(StoreAction.CardReviewed, card_id))

        review_log = ReviewLog(card_id=card_id, rating=difficulty, review_datetime=now)
        return copy(reviewed), review_log

    def create_group(self, name: str) -> None:
        """
        Raises:
            ValidationError: If the name is blank.
            Conflict: If a group with exactly this name already exists.
            PersistenceError: If the collection could not be saved.
        """

        if not name.strip():
            raise ValidationError("Group name must not be empty")
        if name in self._groups:
            raise Conflict(f"A group named {name!r} already exists")

        self._commit(
            self._cards,
            (*self._groups, name),
            StoreEvent(StoreAction.GroupCreated, name),
        )

    def delete_group(self, name: str) -> None:
        """
        Removes a group and detaches every card that belonged to it. Cards are kept.

        Raises:
            NotFound: If no group has this name.
            PersistenceError: If the collection could not be saved.
        """

        if name not in self._groups:
            raise NotFound(f"No group named {name!r}")

        cards = []
        for card in self._cards:
            if card.group == name:
                card = copy(card)
                card.group = None
            cards.append(card)

        groups = tuple(group for group in self._groups if group != name)
        self._commit(cards, groups, StoreEvent(StoreAction.GroupDeleted, name))

    def search(
        self,
        query: str = "",
        filter_by: str = "all",
        group: str | None = None,
    ) -> list[Flashcard]:
        """
        Returns copies of the cards matching a text query, a filter and optionally a group.

        Args:
            query: Case-insensitive text looked up in the question and the answer.
            filter_by: "all", "due" for cards due today, or "recent" for cards
                reviewed or created within the last 7 days.
            group: Only return cards of this group when given.

        Raises:
            ValueError: If filter_by is not a known filter.
        """

        if filter_by not in FILTERS:
            raise ValueError(f"filter_by must be one of {FILTERS}, got {filter_by!r}")

        now = self.clock.now()
        needle = query.lower()
        recent_since = now - timedelta(days=RECENT_DAYS)

        matches = []
        for card in self._cards:
            if needle not in card.question.lower() and needle not in card.answer.lower():
                continue
            if group is not None and card.group != group:
                continue
            if filter_by == "due" and not self.scheduler.is_due(card.next_review_at, now):
                continue
            if filter_by == "recent" and card.last_reviewed_at < recent_since:
                continue
            matches.append(copy(card))

        return matches

    def _index_of(self, card_id: str) -> int:
        for index, card in enumerate(self._cards):
            if card.card_id == card_id:
                return index
        raise NotFound(f"No card with id {card_id!r}")

    def _validate_text(self, *, question: str, answer: str) -> None:
        if not question.strip():
            raise ValidationError("Question must not be empty")
        if not answer.strip():
            raise ValidationError("Answer must not be empty")

    def _validate_date(self, value: datetime) -> None:
        if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
            raise ValidationError("next_review_at must be timezone-aware")

    def _check_group(self, group: str | None) -> None:
        if group is not None and group not in self._groups:
            raise NotFound(f"No group named {group!r}")

    def _save(self, cards: Sequence[Flashcard], groups: Sequence[str]) -> None:
        try:
            saved = self.storage.save(cards, groups)
        except PersistenceError:
            logger.error("Failed to save collection")
            raise
        except Exception as e:
            logger.error(f"Failed to save collection: {e}")
            raise PersistenceError(f"Failed to save collection: {e}") from e

        if saved is False:
            logger.error("Storage refused to save collection")
            raise PersistenceError("Storage refused to save collection")

    def _commit(
        self,
        cards: list[Flashcard],
        groups: tuple[str, ...],
        event: StoreEvent,
    ) -> None:
        self._save(cards, groups)

        self._cards = cards
        self._groups = groups
        logger.info(f"{event.action.value}: {event.target}")

        for listener in list(self._listeners):
            listener(event)


__all__ = ["CardStore", "StoreAction", "StoreEvent", "SAMPLE_GROUPS"]
