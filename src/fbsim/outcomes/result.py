from __future__ import annotations
from typing import TYPE_CHECKING, Union

from fbsim.constants import HOME_FIELD_BONUS
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.outcomes.betweenplay import BetweenPlayResult
    from fbsim.outcomes.fieldgoal import FieldGoalResult
    from fbsim.outcomes.kickoff import KickoffResult
    from fbsim.outcomes.passing import PassResult
    from fbsim.outcomes.punt import PuntResult
    from fbsim.outcomes.run import RunResult
    from fbsim.state import GameContext


class ValidationError(ValueError):
    """A play result or simulator input violates its invariants."""


class PlayResultBase:
    """Defaults shared by every play result; variants override what applies."""
    __slots__ = ()

    @property
    def play_duration(self) -> int:
        return 0

    @property
    def net_yards(self) -> int:
        return 0

    @property
    def turnover(self) -> bool:
        return False

    @property
    def offense_score(self) -> ScoreResult:
        return ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        return ScoreResult.NONE

    @property
    def offense_timeout(self) -> bool:
        return False

    @property
    def defense_timeout(self) -> bool:
        return False

    @property
    def incomplete(self) -> bool:
        return False

    @property
    def out_of_bounds(self) -> bool:
        return False

    @property
    def touchback(self) -> bool:
        return False

    @property
    def kickoff(self) -> bool:
        return False

    @property
    def punt(self) -> bool:
        return False

    @property
    def next_play_kickoff(self) -> bool:
        return False

    @property
    def next_play_extra_point(self) -> bool:
        return False

    def summary(self) -> str:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.summary()


PlayResult = Union["RunResult", "PassResult", "PuntResult", "KickoffResult",
                   "FieldGoalResult", "BetweenPlayResult"]


def require(cond: bool, msg: str) -> None:
    if not cond:
        raise ValidationError(msg)


def normalized_skill_diff(offense_rating: int, defense_rating: int) -> float:
    """Relative advantage in [0, 1]; 0.5 is an even matchup."""
    diff = 0.5 + (offense_rating - defense_rating) / 200
    require(0.0 <= diff <= 1.0, f"Normalized skill differential is out of range [0, 1]: {diff}")
    return diff


class ResultSimulator:
    """Base for outcome simulators; holds the home-field rating bonus."""

    def __init__(self, home_field_bonus: int = HOME_FIELD_BONUS):
        self.home_field_bonus = home_field_bonus

    def offense_rating(self, team: Team, skill: str, context: GameContext) -> int:
        bonus = self.home_field_bonus if context.offense_advantage() else 0
        return team.offense.advantage(skill, bonus)

    def defense_rating(self, team: Team, skill: str, context: GameContext) -> int:
        bonus = self.home_field_bonus if context.defense_advantage() else 0
        return team.defense.advantage(skill, bonus)

    def skill_diff(self, offense: Team, off_skill: str, defense: Team, def_skill: str,
                   context: GameContext) -> float:
        return normalized_skill_diff(
            self.offense_rating(offense, off_skill, context),
            self.defense_rating(defense, def_skill, context),
        )
