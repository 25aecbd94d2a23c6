from __future__ import annotations
from enum import Enum


class ScoreResult(Enum):
    """Scoring outcome of a single play."""
    NONE = "none"
    EXTRA_POINT = "extra_point"
    TWO_POINT_CONVERSION = "two_point_conversion"
    SAFETY = "safety"
    FIELD_GOAL = "field_goal"
    TOUCHDOWN = "touchdown"

    def points(self) -> int:
        return _POINTS[self]

    def __str__(self) -> str:
        return self.value.replace("_", " ").title()


_POINTS = {
    ScoreResult.NONE: 0,
    ScoreResult.EXTRA_POINT: 1,
    ScoreResult.TWO_POINT_CONVERSION: 2,
    ScoreResult.SAFETY: 2,
    ScoreResult.FIELD_GOAL: 3,
    ScoreResult.TOUCHDOWN: 6,
}
