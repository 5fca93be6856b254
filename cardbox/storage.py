"""
cardbox.storage
---------

This module defines the storage backends a CardStore persists through.

Classes:
    Storage: Protocol every storage backend implements.
    MemoryStorage: Keeps a serialized copy of the collection in memory.
    JsonFileStorage: Keeps the collection in a single JSON file.
"""

from __future__ import annotations
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, TypedDict
import json
import logging
import os
import tempfile
from cardbox.errors import PersistenceError
from cardbox.flashcard import Flashcard, FlashcardDict

logger = logging.getLogger(__name__)


class CollectionDict(TypedDict):
    """
    JSON-serializable dictionary representation of a whole collection.
    """

    cards: list[FlashcardDict]
    groups: list[str]


class Storage(Protocol):
    def load(self) -> tuple[list[Flashcard], list[str]]: ...

    def save(self, cards: Sequence[Flashcard], groups: Sequence[str]) -> bool | None: ...


def dump_collection(
    cards: Sequence[Flashcard], groups: Sequence[str]
) -> CollectionDict:
    return {
        "cards": [card.to_dict() for card in cards],
        "groups": list(groups),
    }


def load_collection(
    source_dict: CollectionDict,
) -> tuple[list[Flashcard], list[str]]:
    cards = [Flashcard.from_dict(card_dict) for card_dict in source_dict["cards"]]
    for card in cards:
        for value in (card.last_reviewed_at, card.next_review_at):
            if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
                raise ValueError(f"Card {card.card_id} has a naive timestamp {value}")

    groups = [str(name) for name in source_dict["groups"]]
    return cards, groups


class MemoryStorage:
    """
    Storage backend that keeps a serialized copy of the last saved collection.

    Attributes:
        saves: The number of successful saves so far.
        fail_next_save: When set, the next save raises it instead of saving.
    """

    def __init__(
        self,
        cards: Sequence[Flashcard] = (),
        groups: Sequence[str] = (),
    ) -> None:
        self._data = dump_collection(cards, groups)
        self.saves = 0
        self.fail_next_save: Exception | None = None

    def load(self) -> tuple[list[Flashcard], list[str]]:
        return load_collection(self._data)

    def save(self, cards: Sequence[Flashcard], groups: Sequence[str]) -> None:
        if self.fail_next_save is not None:
            error, self.fail_next_save = self.fail_next_save, None
            raise error

        self._data = dump_collection(cards, groups)
        self.saves += 1


class JsonFileStorage:
    """
    Storage backend that rewrites a single JSON file on every save.

    The file is replaced atomically, so a failed save never leaves a half-written
    collection behind. A missing file loads as an empty collection.

    Attributes:
        path: The location of the JSON file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def load(self) -> tuple[list[Flashcard], list[str]]:
        if not self.path.exists():
            logger.info(f"No collection at {self.path}, starting empty")
            return [], []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                source_dict: CollectionDict = json.load(f)
            return load_collection(source_dict)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Failed to load collection from {self.path}: {e}")
            raise PersistenceError(f"Cannot load {self.path}: {e}") from e

    def save(self, cards: Sequence[Flashcard], groups: Sequence[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = dump_collection(cards, groups)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = [
    "Storage",
    "MemoryStorage",
    "JsonFileStorage",
    "dump_collection",
    "load_collection",
]
