from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import FIELD_GOAL_SNAP_YARDS, MAX_PLAY_DURATION, MAX_YARDLINE
from fbsim.outcomes.distributions import bernoulli, clamp01, exponential, rounded, skew_normal
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, normalized_skill_diff, require
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

P_BLOCKED_SKILL_INTR = 0.013200206956159479
P_BLOCKED_SKILL_COEF = 0.01919733
P_BLOCKED_YARD_LINE_INTR = -5.320426815163247
P_BLOCKED_YARD_LINE_COEF = 0.05875677
P_BLOCKED_SKILL_WEIGHT = 0.9
P_BLOCKED_SCALE = 0.7

P_FIELD_GOAL_MADE_SKILL_INTR = 0.44298810053776055
P_FIELD_GOAL_MADE_SKILL_COEF = 0.57103524
P_FIELD_GOAL_MADE_YARD_LINE_INTR = 0.9580405463949037
P_FIELD_GOAL_MADE_YARD_LINE_COEF_1 = 0.00399668
P_FIELD_GOAL_MADE_YARD_LINE_COEF_2 = -0.00035704
P_FIELD_GOAL_MADE_SKILL_WEIGHT = 0.6
P_FIELD_GOAL_MADE_SCALE = 1.18

FIELD_GOAL_BLOCKED_DURATION = (9.843750, 3.385612, 1.541247)
FIELD_GOAL_NOT_BLOCKED_DURATION = (7.054470, 1.001211, -0.440028)


@dataclass(frozen=True, slots=True)
class FieldGoalResult(PlayResultBase):
    field_goal_distance: int = FIELD_GOAL_SNAP_YARDS
    return_yards: int = 0
    play_duration: int = 0
    made: bool = True
    blocked: bool = False
    touchdown: bool = False
    extra_point: bool = False

    def __post_init__(self) -> None:
        require(0 <= self.play_duration <= MAX_PLAY_DURATION,
                f"Play duration is out of range [0, {MAX_PLAY_DURATION}]: {self.play_duration}")
        require(0 <= self.field_goal_distance <= MAX_YARDLINE + FIELD_GOAL_SNAP_YARDS,
                f"Field goal distance is out of range: {self.field_goal_distance}")
        require(not (self.made and self.touchdown), "A field goal cannot be both made and returned for a touchdown")
        require(not (self.made and self.blocked), "A field goal cannot be both made and blocked")
        require(self.blocked or self.return_yards == 0,
                f"Return yards must be zero unless the kick was blocked: {self.return_yards}")
        require(self.blocked or not self.touchdown, "Only a blocked kick can be returned for a touchdown")
        require(0 <= self.return_yards <= MAX_YARDLINE,
                f"Return yards is out of range [0, 100]: {self.return_yards}")

    @property
    def missed(self) -> bool:
        return not (self.made or self.blocked)

    @property
    def net_yards(self) -> int:
        return -self.return_yards

    @property
    def turnover(self) -> bool:
        return not self.extra_point and (self.blocked or not self.made)

    @property
    def offense_score(self) -> ScoreResult:
        if self.made:
            return ScoreResult.EXTRA_POINT if self.extra_point else ScoreResult.FIELD_GOAL
        return ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        if self.blocked and self.touchdown:
            return ScoreResult.TWO_POINT_CONVERSION if self.extra_point else ScoreResult.TOUCHDOWN
        return ScoreResult.NONE

    @property
    def next_play_kickoff(self) -> bool:
        return self.extra_point or self.made

    @property
    def next_play_extra_point(self) -> bool:
        return not self.extra_point and self.blocked and self.touchdown

    def summary(self) -> str:
        kind = "extra point" if self.extra_point else "field goal"
        if self.made:
            outcome = "is good."
        elif self.blocked:
            outcome = "BLOCKED."
        else:
            outcome = "NO GOOD."
        text = f"{self.field_goal_distance} yard {kind} {outcome}"
        if self.blocked:
            text += f" Returned {self.return_yards} yards"
            text += ", TOUCHDOWN!" if self.touchdown else "."
        return text


class FieldGoalResultSimulator(ResultSimulator):
    """Field goals and extra points."""

    def blocked(self, norm_diff_blocking: float, td_yards: int, rng: np.random.Generator) -> bool:
        p_skill = P_BLOCKED_SKILL_INTR + P_BLOCKED_SKILL_COEF * norm_diff_blocking
        p_yard_line = np.exp(P_BLOCKED_YARD_LINE_INTR + P_BLOCKED_YARD_LINE_COEF * td_yards)
        p = P_BLOCKED_SKILL_WEIGHT * p_skill + (1 - P_BLOCKED_SKILL_WEIGHT) * p_yard_line
        return bernoulli(rng, clamp01(P_BLOCKED_SCALE * p))

    def made(self, norm_kicking: float, td_yards: int, rng: np.random.Generator) -> bool:
        p_skill = P_FIELD_GOAL_MADE_SKILL_INTR + P_FIELD_GOAL_MADE_SKILL_COEF * norm_kicking
        p_yard_line = (P_FIELD_GOAL_MADE_YARD_LINE_INTR + P_FIELD_GOAL_MADE_YARD_LINE_COEF_1 * td_yards
                       + P_FIELD_GOAL_MADE_YARD_LINE_COEF_2 * td_yards ** 2)
        p = P_FIELD_GOAL_MADE_SKILL_WEIGHT * p_skill + (1 - P_FIELD_GOAL_MADE_SKILL_WEIGHT) * p_yard_line
        return bernoulli(rng, clamp01(P_FIELD_GOAL_MADE_SCALE * p))

    def return_yards(self, rng: np.random.Generator) -> int:
        return rounded(exponential(rng))

    def play_duration(self, blocked: bool, rng: np.random.Generator) -> int:
        loc, scale, shape = FIELD_GOAL_BLOCKED_DURATION if blocked else FIELD_GOAL_NOT_BLOCKED_DURATION
        return min(MAX_PLAY_DURATION, max(0, rounded(skew_normal(rng, loc, scale, shape))))

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> FieldGoalResult:
        norm_diff_blocking = normalized_skill_diff(
            self.defense_rating(defense, "blitzing", context),
            self.offense_rating(offense, "blocking", context),
        )
        norm_kicking = offense.offense.field_goals / 100
        td_yards = context.yards_to_touchdown()
        safety_yards = context.yards_to_safety()
        extra_point = context.next_play_extra_point

        blocked = self.blocked(norm_diff_blocking, td_yards, rng)
        return_yards = min(-safety_yards, self.return_yards(rng)) if blocked else 0
        made = not blocked and self.made(norm_kicking, td_yards, rng)
        duration = self.play_duration(blocked, rng)
        res = FieldGoalResult(
            field_goal_distance=td_yards + FIELD_GOAL_SNAP_YARDS,
            return_yards=return_yards,
            play_duration=0 if extra_point else duration,
            made=made,
            blocked=blocked,
            touchdown=blocked and 0 < return_yards == -safety_yards,
            extra_point=extra_point,
        )
        logger.debug("field goal: %s", res.summary())
        return res
