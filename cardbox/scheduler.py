"""
cardbox.scheduler
---------

This module defines the Scheduler class as well as the default review intervals.

Classes:
    Scheduler: The difficulty-based spaced-repetition scheduler.
"""

from __future__ import annotations
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone, tzinfo
from typing import TypedDict
from zoneinfo import ZoneInfo
import json
from typing_extensions import Self
from cardbox.difficulty import Difficulty
from cardbox.errors import InvalidDifficulty

DEFAULT_INTERVALS = {
    Difficulty.Easy: 7,
    Difficulty.Medium: 3,
    Difficulty.Hard: 1,
}


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    intervals: dict[str, int]
    tz: str


def parse_difficulty(value: Difficulty | str) -> Difficulty:
    """
    Converts a Difficulty or its string value into a Difficulty.

    Raises:
        InvalidDifficulty: If the value is not one of the known difficulties.
    """

    try:
        return Difficulty(value)
    except (ValueError, TypeError):
        raise InvalidDifficulty(f"Unknown difficulty: {value!r}") from None


def _require_aware(value: datetime) -> None:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        raise ValueError("datetime must be timezone-aware")


class Scheduler:
    """
    The difficulty-based scheduler.

    Maps a difficulty to a whole number of days until the next review and decides
    whether a card is due. Calendar dates are evaluated in a single reference time zone.

    Attributes:
        intervals: The number of days until the next review, per difficulty.
        tz: The reference time zone used for calendar-day arithmetic and comparisons.
    """

    intervals: dict[Difficulty, int]
    tz: tzinfo

    def __init__(
        self,
        intervals: Mapping[Difficulty | str, int] = DEFAULT_INTERVALS,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.intervals = self._validate_intervals(intervals=intervals)
        self.tz = tz

    def _validate_intervals(
        self, *, intervals: Mapping[Difficulty | str, int]
    ) -> dict[Difficulty, int]:
        validated = {}
        error_messages = []
        for key, days in intervals.items():
            difficulty = parse_difficulty(key)
            if isinstance(days, bool) or not isinstance(days, int) or days < 1:
                error_messages.append(
                    f"intervals[{difficulty.value}] = {days!r} is not a positive whole number of days"
                )
            validated[difficulty] = days

        for difficulty in Difficulty:
            if difficulty not in validated:
                error_messages.append(f"intervals[{difficulty.value}] is missing")

        if len(error_messages) > 0:
            raise ValueError(
                "One or more intervals are invalid:\n" + "\n".join(error_messages)
            )

        return {difficulty: validated[difficulty] for difficulty in Difficulty}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Scheduler):
            return NotImplemented
        return self.intervals == other.intervals and self.tz == other.tz

    def __repr__(self) -> str:
        intervals = {d.value: days for d, days in self.intervals.items()}
        return f"Scheduler(intervals={intervals}, tz={self.tz})"

    def interval_days(self, difficulty: Difficulty | str) -> int:
        """
        Returns the number of days until the next review for a difficulty.

        Raises:
            InvalidDifficulty: If difficulty is not one of the known difficulties.
        """

        return self.intervals[parse_difficulty(difficulty)]

    def compute_next_review(
        self, now: datetime, difficulty: Difficulty | str
    ) -> datetime:
        """
        Calculates when a card rated with the given difficulty at `now` is due next.

        Days are added to the wall-clock time in the reference time zone, so the
        time of day stays the same across daylight saving changes. A result that
        falls into a skipped hour is moved forward to the first real wall time.

        Args:
            now: The date and time of the creation, edit or review.
            difficulty: The difficulty of the card.

        Returns:
            datetime: The date and time of the next review.

        Raises:
            InvalidDifficulty: If difficulty is not one of the known difficulties.
            ValueError: If `now` is not timezone-aware.
        """

        _require_aware(now)
        days = self.interval_days(difficulty)

        shifted = now.astimezone(self.tz) + timedelta(days=days)
        # a wall time skipped by a DST gap moves forward to a real one
        return shifted.astimezone(timezone.utc).astimezone(self.tz)

    def start_of_day(self, now: datetime) -> datetime:
        """
        Returns midnight of the calendar day containing `now`, in the reference time zone.
        """

        _require_aware(now)
        return now.astimezone(self.tz).replace(hour=0, minute=0, second=0, microsecond=0)

    def is_due(self, next_review_at: datetime, now: datetime) -> bool:
        """
        A card is due when its next review falls on or before the start of the current day.
        """

        _require_aware(next_review_at)
        return next_review_at <= self.start_of_day(now)

    def same_day(self, first: datetime, second: datetime) -> bool:
        _require_aware(first)
        _require_aware(second)
        return first.astimezone(self.tz).date() == second.astimezone(self.tz).date()

    def to_dict(
        self,
    ) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.

        Raises:
            ValueError: If the reference time zone is neither UTC nor an IANA zone.
        """

        if self.tz == timezone.utc:
            tz_name = "UTC"
        elif isinstance(self.tz, ZoneInfo):
            tz_name = self.tz.key
        else:
            raise ValueError(f"Cannot serialize time zone {self.tz!r}")

        return {
            "intervals": {
                difficulty.value: days for difficulty, days in self.intervals.items()
            },
            "tz": tz_name,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        tz_name = source_dict["tz"]
        return cls(
            intervals=source_dict["intervals"],
            tz=timezone.utc if tz_name == "UTC" else ZoneInfo(tz_name),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Scheduler object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the JSON string.
        """

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Scheduler", "DEFAULT_INTERVALS", "parse_difficulty"]
