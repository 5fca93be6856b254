"""
cardbox.review_log
---------

A ReviewLog is the receipt CardStore.review hands back: which card was studied,
the difficulty the learner reported and when. The store keeps no history itself.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
import json
from typing_extensions import Self
from cardbox.difficulty import Difficulty


class ReviewLogDict(TypedDict):
    card_id: str
    rating: str
    review_datetime: str


@dataclass
class ReviewLog:
    """
    One study of one card.

    Attributes:
        card_id: Id of the studied card.
        rating: Difficulty reported by the learner, which also became the card's difficulty.
        review_datetime: When the card was studied.
    """

    card_id: str
    rating: Difficulty
    review_datetime: datetime

    def to_dict(self) -> ReviewLogDict:
        return {
            "card_id": self.card_id,
            "rating": self.rating.value,
            "review_datetime": self.review_datetime.isoformat(),
        }

    @classmethod
    def from_dict(cls, source_dict: ReviewLogDict) -> Self:
        """
        Raises:
            ValueError: If the rating is not a known difficulty or the date is malformed.
        """

        return cls(
            card_id=source_dict["card_id"],
            rating=Difficulty(source_dict["rating"]),
            review_datetime=datetime.fromisoformat(source_dict["review_datetime"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        return cls.from_dict(json.loads(source_json))


__all__ = ["ReviewLog"]
