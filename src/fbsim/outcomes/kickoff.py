from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import MAX_PLAY_DURATION, MAX_YARDLINE, END_ZONE_DEPTH
from fbsim.outcomes.distributions import bernoulli, exponential, normal, rounded, skew_normal
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, normalized_skill_diff, require
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

P_TOUCHBACK_INTR = 0.2528877428268531
P_TOUCHBACK_COEF = 0.62457076
P_OOB_INTR = 0.013879833381776598
P_OOB_COEF = -0.01063523

# Landing spot regimes
P_KICKOFF_INSIDE_20 = 0.8
MEAN_KICKOFF_INSIDE_20_DIST = 64.3
STD_KICKOFF_INSIDE_20_DIST_INTR = 4.516109138481186
STD_KICKOFF_INSIDE_20_DIST_COEF = 1.97369663
SKEW_KICKOFF_INSIDE_20_DIST = -1.7
MEAN_KICKOFF_OUTSIDE_20_DIST_INTR = 59.31943845056676
MEAN_KICKOFF_OUTSIDE_20_DIST_COEF = -3.42944893
STD_KICKOFF_OUTSIDE_20_DIST_INTR = 11.602550109235546
STD_KICKOFF_OUTSIDE_20_DIST_COEF = 6.81862647
SKEW_KICKOFF_OUTSIDE_20_DIST = -2.0

# Returns
P_FAIR_CATCH_INTR = 0.02694588730554516
P_FAIR_CATCH_COEF = -0.03716183
MEAN_KICKOFF_RETURN_YARDS_INTR = -0.6236115656913945
MEAN_KICKOFF_RETURN_YARDS_COEF = 20.05077203
STD_KICKOFF_RETURN_YARDS_INTR = 6.421970424325094
STD_KICKOFF_RETURN_YARDS_COEF = 12.34550665
SKEW_KICKOFF_RETURN_YARDS_INTR = 3.62041405111988
SKEW_KICKOFF_RETURN_YARDS_COEF = -2.65709746
P_KICKOFF_RETURN_FUMBLE = 0.007

# Duration is the square root of a normal draw linear in total yards
KICKOFF_RETURN_PLAY_DURATION_INTR = 0.11217103
KICKOFF_RETURN_PLAY_DURATION_COEF = 1.20326252
STD_PLAY_DURATION = 2.0


@dataclass(frozen=True, slots=True)
class KickoffResult(PlayResultBase):
    kickoff_yards: int = 65
    kick_return_yards: int = 0
    play_duration: int = 0
    fumble_return_yards: int = 0
    touchback: bool = True
    out_of_bounds: bool = False
    fair_catch: bool = False
    fumble: bool = False
    touchdown: bool = False

    def __post_init__(self) -> None:
        require(abs(self.kickoff_yards) <= MAX_YARDLINE,
                f"Kickoff yards is out of range [-100, 100]: {self.kickoff_yards}")
        require(abs(self.kick_return_yards) <= MAX_YARDLINE + END_ZONE_DEPTH,
                f"Kick return yards is out of range [-110, 110]: {self.kick_return_yards}")
        require(0 <= self.play_duration <= MAX_PLAY_DURATION,
                f"Play duration is out of range [0, {MAX_PLAY_DURATION}]: {self.play_duration}")
        require(abs(self.fumble_return_yards) <= MAX_YARDLINE,
                f"Fumble return yards is out of range [-100, 100]: {self.fumble_return_yards}")
        require(self.fumble or self.fumble_return_yards == 0,
                "Fumble return yards must be zero without a fumble")
        terminal = (self.touchback, self.out_of_bounds, self.fair_catch)
        require(sum(terminal) <= 1, "Touchback, out of bounds and fair catch are mutually exclusive")
        require(not (self.touchdown and any(terminal)),
                "Cannot score a touchdown on a touchback, out of bounds kick or fair catch")

    @property
    def net_yards(self) -> int:
        return self.kickoff_yards - self.kick_return_yards + self.fumble_return_yards

    @property
    def turnover(self) -> bool:
        # change of possession; a fumble here means the kicking team kept the ball
        return not self.fumble

    @property
    def offense_score(self) -> ScoreResult:
        return ScoreResult.TOUCHDOWN if self.touchdown and self.fumble else ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        return ScoreResult.TOUCHDOWN if self.touchdown and not self.fumble else ScoreResult.NONE

    @property
    def kickoff(self) -> bool:
        return True

    @property
    def next_play_extra_point(self) -> bool:
        return self.touchdown

    def summary(self) -> str:
        text = f"Kickoff {self.kickoff_yards} yards"
        if self.touchback:
            return text + " for a touchback."
        if self.out_of_bounds:
            return text + " out of bounds."
        if self.fair_catch:
            return text + " for a fair catch."
        text += f" fielded. Returned {self.kick_return_yards} yards."
        if self.fumble:
            text += f" FUMBLED recovered by the kicking team, returned {self.fumble_return_yards} yards."
        if self.touchdown:
            text += " TOUCHDOWN!"
        return text


class KickoffResultSimulator(ResultSimulator):

    def touchback(self, norm_kicking: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_TOUCHBACK_INTR + P_TOUCHBACK_COEF * norm_kicking)

    def out_of_bounds(self, norm_kicking: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_OOB_INTR + P_OOB_COEF * norm_kicking)

    def inside_20(self, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_KICKOFF_INSIDE_20)

    def distance(self, norm_kicking: float, inside_20: bool, rng: np.random.Generator) -> int:
        if inside_20:
            mean = MEAN_KICKOFF_INSIDE_20_DIST
            std = STD_KICKOFF_INSIDE_20_DIST_INTR + STD_KICKOFF_INSIDE_20_DIST_COEF * norm_kicking
            skew = SKEW_KICKOFF_INSIDE_20_DIST
        else:
            mean = MEAN_KICKOFF_OUTSIDE_20_DIST_INTR + MEAN_KICKOFF_OUTSIDE_20_DIST_COEF * norm_kicking
            std = STD_KICKOFF_OUTSIDE_20_DIST_INTR + STD_KICKOFF_OUTSIDE_20_DIST_COEF * norm_kicking
            skew = SKEW_KICKOFF_OUTSIDE_20_DIST
        return rounded(skew_normal(rng, mean, std, skew))

    def fair_catch(self, norm_diff_returning: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_FAIR_CATCH_INTR + P_FAIR_CATCH_COEF * norm_diff_returning)

    def return_yards(self, norm_diff_returning: float, rng: np.random.Generator) -> int:
        x = norm_diff_returning
        return rounded(skew_normal(
            rng,
            MEAN_KICKOFF_RETURN_YARDS_INTR + MEAN_KICKOFF_RETURN_YARDS_COEF * x,
            STD_KICKOFF_RETURN_YARDS_INTR + STD_KICKOFF_RETURN_YARDS_COEF * x,
            SKEW_KICKOFF_RETURN_YARDS_INTR + SKEW_KICKOFF_RETURN_YARDS_COEF * x,
        ))

    def fumble(self, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_KICKOFF_RETURN_FUMBLE)

    def fumble_return_yards(self, rng: np.random.Generator) -> int:
        return rounded(exponential(rng))

    def play_duration(self, total_yards: int, rng: np.random.Generator) -> int:
        mean = KICKOFF_RETURN_PLAY_DURATION_INTR + KICKOFF_RETURN_PLAY_DURATION_COEF * total_yards
        draw = normal(rng, mean, STD_PLAY_DURATION)
        return min(MAX_PLAY_DURATION, rounded(math.sqrt(max(0.0, draw))))

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> KickoffResult:
        norm_kicking = offense.offense.kickoffs / 100
        norm_diff_returning = normalized_skill_diff(
            self.defense_rating(defense, "kick_returning", context),
            self.offense_rating(offense, "kick_return_defense", context),
        )
        td_yards = context.yards_to_touchdown()
        safety_yards = context.yards_to_safety()

        touchback = self.touchback(norm_kicking, rng)
        if touchback:
            return KickoffResult(kickoff_yards=td_yards, touchback=True)

        out_of_bounds = self.out_of_bounds(norm_kicking, rng)
        inside_20 = self.inside_20(rng)
        kickoff_yards = max(0, min(td_yards, self.distance(norm_kicking, inside_20, rng)))
        if out_of_bounds:
            return KickoffResult(kickoff_yards=kickoff_yards, touchback=False, out_of_bounds=True)

        fair_catch = self.fair_catch(norm_diff_returning, rng)
        return_yards = 0
        if not fair_catch:
            # a return can go no further than the kicking team's goal line
            return_yards = max(0, min(kickoff_yards - safety_yards, self.return_yards(norm_diff_returning, rng)))
        if kickoff_yards == td_yards and return_yards == 0:
            # downed or fair caught in the end zone
            return KickoffResult(kickoff_yards=kickoff_yards, touchback=True)
        if fair_catch:
            return KickoffResult(kickoff_yards=kickoff_yards, touchback=False, fair_catch=True)

        touchdown = kickoff_yards - return_yards == safety_yards
        fumble = not touchdown and self.fumble(rng)
        fumble_return_yards = 0
        if fumble:
            spot = kickoff_yards - return_yards
            fumble_return_yards = min(td_yards - spot, self.fumble_return_yards(rng))
            touchdown = fumble_return_yards > 0 and spot + fumble_return_yards == td_yards

        total = kickoff_yards + return_yards + fumble_return_yards
        res = KickoffResult(
            kickoff_yards=kickoff_yards,
            kick_return_yards=return_yards,
            play_duration=self.play_duration(total, rng),
            fumble_return_yards=fumble_return_yards,
            touchback=False,
            fumble=fumble,
            touchdown=touchdown,
        )
        logger.debug("kickoff: %s", res.summary())
        return res
