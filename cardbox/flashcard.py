"""
cardbox.flashcard
---------

This module defines the Flashcard class.

Classes:
    Flashcard: Represents a question/answer card and its review schedule.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
import uuid
from typing_extensions import Self
from cardbox.difficulty import Difficulty


class FlashcardDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Flashcard object.
    """

    card_id: str
    question: str
    answer: str
    difficulty: str
    last_reviewed_at: str
    next_review_at: str
    group: str | None


def new_card_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Flashcard:
    """
    Represents a flashcard.

    Attributes:
        card_id: The opaque, immutable id of the card.
        question: The prompt shown on the front of the card.
        answer: The text revealed on the back of the card.
        difficulty: The last difficulty the card was created, edited or rated with.
        last_reviewed_at: The date and time of the card's last review, or of its creation.
        next_review_at: The date and time when the card is due next.
        group: The name of the group the card belongs to, or None.
    """

    card_id: str
    question: str
    answer: str
    difficulty: Difficulty
    last_reviewed_at: datetime
    next_review_at: datetime
    group: str | None = None

    def to_dict(self) -> FlashcardDict:
        """
        Returns a JSON-serializable dictionary representation of the Flashcard object.

        This method is specifically useful for handing Flashcard objects to a storage backend.

        Returns:
            A dictionary representation of the Flashcard object.
        """

        return {
            "card_id": self.card_id,
            "question": self.question,
            "answer": self.answer,
            "difficulty": self.difficulty.value,
            "last_reviewed_at": self.last_reviewed_at.isoformat(),
            "next_review_at": self.next_review_at.isoformat(),
            "group": self.group,
        }

    @classmethod
    def from_dict(cls, source_dict: FlashcardDict) -> Self:
        """
        Creates a Flashcard object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Flashcard object.

        Returns:
            A Flashcard object created from the provided dictionary.
        """

        return cls(
            card_id=str(source_dict["card_id"]),
            question=source_dict["question"],
            answer=source_dict["answer"],
            difficulty=Difficulty(source_dict["difficulty"]),
            last_reviewed_at=datetime.fromisoformat(source_dict["last_reviewed_at"]),
            next_review_at=datetime.fromisoformat(source_dict["next_review_at"]),
            group=source_dict.get("group"),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Flashcard object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Flashcard object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        source_dict: FlashcardDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Flashcard", "new_card_id"]
