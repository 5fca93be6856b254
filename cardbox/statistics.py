"""
cardbox.statistics
---------

This module computes the dashboard counters of a collection.

Classes:
    Statistics: The counters of a collection at a point in time.
    StatisticsAggregator: Reads fresh counters from a CardStore.
"""

from __future__ import annotations
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TypedDict
from cardbox.clock import Clock
from cardbox.flashcard import Flashcard
from cardbox.scheduler import Scheduler
from cardbox.store import CardStore


class StatisticsDict(TypedDict):
    total_cards: int
    reviewed_today: int
    due_today: int


@dataclass(frozen=True)
class Statistics:
    """
    Attributes:
        total_cards: The number of cards in the collection.
        reviewed_today: The number of cards reviewed or created on the current calendar day.
        due_today: The number of cards due for review today.
    """

    total_cards: int
    reviewed_today: int
    due_today: int

    def to_dict(self) -> StatisticsDict:
        return {
            "total_cards": self.total_cards,
            "reviewed_today": self.reviewed_today,
            "due_today": self.due_today,
        }


def compute_statistics(
    cards: Iterable[Flashcard], now: datetime, scheduler: Scheduler
) -> Statistics:
    total_cards = 0
    reviewed_today = 0
    due_today = 0

    for card in cards:
        total_cards += 1
        if scheduler.same_day(card.last_reviewed_at, now):
            reviewed_today += 1
        if scheduler.is_due(card.next_review_at, now):
            due_today += 1

    return Statistics(
        total_cards=total_cards,
        reviewed_today=reviewed_today,
        due_today=due_today,
    )


class StatisticsAggregator:
    """
    Computes Statistics from the current contents of a CardStore.

    Nothing is cached: every read() walks the store's current cards, so the
    counters always reflect the latest mutation.

    Attributes:
        store: The collection to count.
        clock: Supplies "today". Defaults to the store's clock.
        scheduler: Decides due-ness and calendar days. Defaults to the store's scheduler.
    """

    def __init__(
        self,
        store: CardStore,
        clock: Clock | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.store = store
        self.clock = clock if clock is not None else store.clock
        self.scheduler = scheduler if scheduler is not None else store.scheduler

    def read(self) -> Statistics:
        return compute_statistics(self.store.list(), self.clock.now(), self.scheduler)


__all__ = ["Statistics", "StatisticsAggregator", "compute_statistics"]
