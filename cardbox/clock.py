"""
cardbox.clock
---------

This module defines the clocks used to read the current date and time.

Classes:
    Clock: Protocol for anything that can report the current date and time.
    SystemClock: Reads the current UTC date and time from the system.
    FixedClock: A clock that only moves when told to, for tests and simulations.
"""

from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """
    Reads the current date and time from the system, in UTC.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    A clock frozen at a given instant.

    Attributes:
        current: The instant returned by now(). Must be timezone-aware.
    """

    current: datetime

    def __init__(self, current: datetime) -> None:
        self.set(current)

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        if current.tzinfo is None:
            raise ValueError("datetime must be timezone-aware")
        self.current = current

    def advance(self, **kwargs: float) -> datetime:
        """
        Moves the clock forward by a timedelta built from the keyword arguments.

        Example:
            clock.advance(days=1, hours=2)

        Returns:
            The new current instant.
        """

        self.current = self.current + timedelta(**kwargs)
        return self.current


__all__ = ["Clock", "SystemClock", "FixedClock"]
