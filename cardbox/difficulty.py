from enum import Enum


class Difficulty(str, Enum):
    """
    Enum representing the three self-reported recall difficulties of a Flashcard.
    """

    Easy = "easy"
    Medium = "medium"
    Hard = "hard"


__all__ = ["Difficulty"]
