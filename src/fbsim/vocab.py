"""
Play-call and drive-result enums shared by the play caller, the rules and
the drive bookkeeping.
"""
from __future__ import annotations
from enum import Enum


class PlayCall(Enum):
    RUN = "run"
    PASS = "pass"
    FIELD_GOAL = "field_goal"
    PUNT = "punt"
    KICKOFF = "kickoff"
    EXTRA_POINT = "extra_point"
    QB_KNEEL = "qb_kneel"


PLAY_CALLS = tuple(PlayCall)


class DriveResult(Enum):
    NONE = "In Progress"
    PUNT = "Punt"
    FIELD_GOAL = "Field Goal"
    FIELD_GOAL_MISSED = "Missed Field Goal"
    TOUCHDOWN = "Touchdown"
    SAFETY = "Safety"
    INTERCEPTION = "Interception"
    PICK_SIX = "Pick Six"
    FUMBLE = "Fumble"
    SCOOP_AND_SCORE = "Scoop and Score"
    DOWNS = "Turnover on Downs"
    END_OF_HALF = "End of Half"

    def __str__(self) -> str:
        return self.value
