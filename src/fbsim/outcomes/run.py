from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import MAX_PLAY_DURATION, MAX_YARDLINE
from fbsim.outcomes.distributions import bernoulli, clamp01, exponential, normal, rounded
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, require
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

# Rushing yards regressions (normal regime, then big-play regime)
MEAN_YARDS_INTR = 2.2503791522871384
MEAN_YARDS_COEF = 0.92550597
STD_YARDS_INTR = 4.053915588534795
STD_YARDS_COEF_1 = 0.2487578
STD_YARDS_COEF_2 = 0.0593874
MEAN_BP_YARDS_INTR = 12.781025340879893
MEAN_BP_YARDS_COEF = 16.32805521
STD_BP_YARDS_INTR = 10.014877063200005
STD_BP_YARDS_COEF_1 = -3.82403981
STD_BP_YARDS_COEF_2 = 7.60215528

# Big play probabilities (log-linear)
P_BP_INTR = -2.878726031553263
P_BP_COEF = 0.82863208
P_BP_TD_INTR = -3.9968093269427603
P_BP_TD_COEF = 0.39426769

# Fumbles
P_FUMBLE_INTR = 0.04932479844415921
P_FUMBLE_COEF = -0.08432772
P_FUMBLE_MIN = 0.001

# Play duration, quadratic in total yards covered
MEAN_DURATION_INTR = 8.32135821
MEAN_DURATION_COEF_1 = 0.11343699
MEAN_DURATION_COEF_2 = -0.00056798
STD_DURATION = 2.0

KNEEL_YARDS = -1
KNEEL_DURATION = 2


@dataclass(frozen=True, slots=True)
class RunResult(PlayResultBase):
    yards_gained: int = 0
    play_duration: int = 0
    fumble: bool = False
    return_yards: int = 0
    out_of_bounds: bool = False
    touchdown: bool = False
    safety: bool = False
    two_point_conversion: bool = False
    kneel: bool = False

    def __post_init__(self) -> None:
        require(0 <= self.play_duration <= MAX_PLAY_DURATION,
                f"Play duration is out of range [0, {MAX_PLAY_DURATION}]: {self.play_duration}")
        require(abs(self.yards_gained) <= MAX_YARDLINE,
                f"Yards gained is out of range [-100, 100]: {self.yards_gained}")
        require(abs(self.return_yards) <= MAX_YARDLINE,
                f"Return yards is out of range [-100, 100]: {self.return_yards}")
        require(self.fumble or self.return_yards == 0,
                f"Cannot have non-zero return yards without a fumble: {self.return_yards}")
        require(not (self.fumble and self.safety), "Cannot both fumble and have a safety")
        require(not (self.out_of_bounds and (self.touchdown or self.safety)),
                "Cannot go out of bounds on a touchdown or safety")
        require(not (self.touchdown and self.safety), "Cannot have both a touchdown and a safety")
        require(not (self.kneel and (self.fumble or self.touchdown)),
                "A kneel cannot fumble or score a touchdown")

    @property
    def net_yards(self) -> int:
        return self.yards_gained - self.return_yards

    @property
    def turnover(self) -> bool:
        return self.fumble

    @property
    def offense_score(self) -> ScoreResult:
        if self.touchdown and not self.fumble:
            return ScoreResult.TWO_POINT_CONVERSION if self.two_point_conversion else ScoreResult.TOUCHDOWN
        return ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        if self.touchdown and self.fumble:
            return ScoreResult.TWO_POINT_CONVERSION if self.two_point_conversion else ScoreResult.TOUCHDOWN
        if self.safety:
            return ScoreResult.SAFETY
        return ScoreResult.NONE

    @property
    def next_play_kickoff(self) -> bool:
        return self.safety or self.two_point_conversion

    @property
    def next_play_extra_point(self) -> bool:
        return self.touchdown and not self.two_point_conversion

    def summary(self) -> str:
        if self.kneel:
            text = "QB kneels."
        else:
            text = f"Rush {self.yards_gained} yards."
        if self.fumble:
            text += f" FUMBLE recovered by the defense, returned {self.return_yards} yards."
        if self.two_point_conversion:
            good = self.touchdown and not self.fumble
            text += " Two point conversion is GOOD!" if good else " Two point conversion is no good."
        elif self.touchdown:
            text += " TOUCHDOWN!"
        elif self.safety:
            text += " SAFETY!"
        return text


class RunResultSimulator(ResultSimulator):
    """Designed run plays and QB kneels."""

    def big_play(self, norm_diff_rushing: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, np.exp(P_BP_INTR + P_BP_COEF * norm_diff_rushing))

    def big_play_touchdown(self, norm_diff_rushing: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, np.exp(P_BP_TD_INTR + P_BP_TD_COEF * norm_diff_rushing))

    def rushing_yards(self, norm_diff_rushing: float, big_play: bool, rng: np.random.Generator) -> int:
        x = norm_diff_rushing
        if big_play:
            mean = MEAN_BP_YARDS_INTR + MEAN_BP_YARDS_COEF * x
            std = STD_BP_YARDS_INTR + STD_BP_YARDS_COEF_1 * x + STD_BP_YARDS_COEF_2 * x ** 2
        else:
            mean = MEAN_YARDS_INTR + MEAN_YARDS_COEF * x
            std = STD_YARDS_INTR + STD_YARDS_COEF_1 * x + STD_YARDS_COEF_2 * x ** 2
        return rounded(normal(rng, mean, std))

    def fumble(self, norm_diff_turnovers: float, rng: np.random.Generator) -> bool:
        p = max(P_FUMBLE_MIN, clamp01(P_FUMBLE_INTR + P_FUMBLE_COEF * norm_diff_turnovers))
        return bernoulli(rng, p)

    def fumble_return_yards(self, rng: np.random.Generator) -> int:
        return rounded(exponential(rng))

    def play_duration(self, total_yards: int, rng: np.random.Generator) -> int:
        mean = MEAN_DURATION_INTR + MEAN_DURATION_COEF_1 * total_yards + MEAN_DURATION_COEF_2 * total_yards ** 2
        return min(MAX_PLAY_DURATION, max(0, rounded(normal(rng, mean, STD_DURATION))))

    def kneel(self, context: GameContext) -> RunResult:
        yards = max(context.yards_to_safety(), KNEEL_YARDS)
        safety = yards == context.yards_to_safety()
        return RunResult(yards_gained=yards, play_duration=KNEEL_DURATION, safety=safety, kneel=True)

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> RunResult:
        norm_diff_rushing = self.skill_diff(offense, "rushing", defense, "rush_defense", context)
        norm_diff_turnovers = self.skill_diff(offense, "turnovers", defense, "turnovers", context)
        td_yards = context.yards_to_touchdown()
        safety_yards = context.yards_to_safety()

        if self.big_play(norm_diff_rushing, rng):
            if self.big_play_touchdown(norm_diff_rushing, rng):
                yards_gained = td_yards
            else:
                yards_gained = max(safety_yards, min(td_yards, self.rushing_yards(norm_diff_rushing, True, rng)))
        else:
            yards_gained = max(safety_yards, min(td_yards, self.rushing_yards(norm_diff_rushing, False, rng)))

        touchdown = yards_gained == td_yards
        safety = yards_gained == safety_yards
        fumble = False if (touchdown or safety) else self.fumble(norm_diff_turnovers, rng)

        return_yards = 0
        if fumble:
            # defense recovers at the spot and can return it to the offense's goal
            return_yards = min(self.fumble_return_yards(rng), yards_gained - safety_yards)
            touchdown = yards_gained - return_yards == safety_yards

        two_point = context.next_play_extra_point
        if two_point:
            duration = 0
        else:
            duration = self.play_duration(abs(yards_gained) + abs(return_yards), rng)
        res = RunResult(
            yards_gained=yards_gained,
            play_duration=duration,
            fumble=fumble,
            return_yards=return_yards,
            touchdown=touchdown,
            safety=safety,
            two_point_conversion=two_point,
        )
        logger.debug("run: %s", res.summary())
        return res
