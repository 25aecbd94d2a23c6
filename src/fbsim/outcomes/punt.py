from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import MAX_PLAY_DURATION, MAX_YARDLINE, END_ZONE_DEPTH
from fbsim.outcomes.distributions import bernoulli, clamp01, exponential, normal, rounded, skew_normal
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, normalized_skill_diff, require
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

P_BLOCK_INTR = -0.0010160286505995551
P_BLOCK_COEF = 0.00703673

# Inside-20 landing regime: punter skill and field position
P_PUNT_INSIDE_20_SKILL_INTR = 0.21398823243670145
P_PUNT_INSIDE_20_SKILL_COEF = 0.32878206
P_PUNT_INSIDE_20_YARD_LINE_PARAM_1 = 0.783829627
P_PUNT_INSIDE_20_YARD_LINE_PARAM_2 = -0.200560110
P_PUNT_INSIDE_20_YARD_LINE_PARAM_3 = 0.651500015
P_PUNT_INSIDE_20_YARD_LINE_PARAM_4 = -0.00178251834

# Landing spot as a fraction of the yards to the end zone, by regime
PUNT_INSIDE_20_MEAN_REL_DIST_INTR = 0.20907739629135946
PUNT_INSIDE_20_MEAN_REL_DIST_COEF = -0.0001755
PUNT_INSIDE_20_STD_REL_DIST_INTR = 0.17519244654293623
PUNT_INSIDE_20_STD_REL_DIST_COEF = -0.0016178
PUNT_INSIDE_20_SKEW_REL_DIST_INTR = 3.691739354624472
PUNT_INSIDE_20_SKEW_REL_DIST_COEF_1 = -0.11961015
PUNT_INSIDE_20_SKEW_REL_DIST_COEF_2 = 0.00081621
PUNT_OUTSIDE_20_MEAN_REL_DIST_INTR = -0.24995460069957565
PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_1 = 0.0400507456
PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_2 = -0.000758718087
PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_3 = 0.00000442573043
PUNT_OUTSIDE_20_STD_REL_DIST_INTR = 0.2748076520973469
PUNT_OUTSIDE_20_STD_REL_DIST_COEF = -0.00196699
PUNT_OUTSIDE_20_SKEW_REL_DIST_INTR = -5.631745519232158
PUNT_OUTSIDE_20_SKEW_REL_DIST_COEF_1 = 0.19789058
PUNT_OUTSIDE_20_SKEW_REL_DIST_COEF_2 = -0.00134607
MIN_REL_DIST_STD = 0.01

P_PUNT_OOB_INTR = -0.0846243447082426
P_PUNT_OOB_COEF_1 = 0.00575805979
P_PUNT_OOB_COEF_2 = -0.0000428367831
P_FAIR_CATCH_INTR = 0.47613371173695526
P_FAIR_CATCH_COEF = -0.00141214
P_MUFFED_PUNT_INTR = 0.036855240326056096
P_MUFFED_PUNT_COEF = -0.02771741

# Return yards as a fraction of the field, on returner skill and punt length
MEAN_REL_RETURN_YARDS_INTR = -0.0570321871
MEAN_REL_RETURN_YARDS_COEF_1 = -0.02282631
MEAN_REL_RETURN_YARDS_COEF_2 = 0.28982747
STD_REL_RETURN_YARDS_INTR = 0.06751127059206394
STD_REL_RETURN_YARDS_COEF_1 = 0.01035858
STD_REL_RETURN_YARDS_COEF_2 = 0.26338509
SKEW_REL_RETURN_YARDS_INTR = -0.0167472281
SKEW_REL_RETURN_YARDS_COEF_1 = 7.06931813
SKEW_REL_RETURN_YARDS_COEF_2 = -6.94528823

P_FUMBLE_INTR = 0.0460047101408259
P_FUMBLE_COEF = -0.04389777

PUNT_PLAY_DURATION_INTR = 5.2792296
PUNT_PLAY_DURATION_COEF = 0.09291598
STD_PLAY_DURATION = 1.0


@dataclass(frozen=True, slots=True)
class PuntResult(PlayResultBase):
    fumble_return_yards: int = 0
    punt_yards: int = 0
    punt_return_yards: int = 0
    play_duration: int = 0
    blocked: bool = False
    touchback: bool = False
    out_of_bounds: bool = False
    fair_catch: bool = False
    muffed: bool = False
    fumble: bool = False
    touchdown: bool = False

    def __post_init__(self) -> None:
        require(0 <= self.play_duration <= MAX_PLAY_DURATION,
                f"Play duration is out of range [0, {MAX_PLAY_DURATION}]: {self.play_duration}")
        require(abs(self.punt_yards) <= MAX_YARDLINE,
                f"Punt yards is out of range [-100, 100]: {self.punt_yards}")
        require(abs(self.punt_return_yards) <= MAX_YARDLINE + END_ZONE_DEPTH,
                f"Punt return yards is out of range [-110, 110]: {self.punt_return_yards}")
        require(self.fumble or self.fumble_return_yards == 0,
                f"Fumble return yards must be zero without a fumble: {self.fumble_return_yards}")
        unreturnable = self.blocked or self.touchback or self.out_of_bounds or self.fair_catch or self.muffed
        require(not unreturnable or self.punt_return_yards == 0,
                f"Return yards must be zero when the punt was not returned: {self.punt_return_yards}")
        require(not self.muffed or self.fumble, "A muffed punt must be a fumble")
        dead = (self.blocked, self.touchback, self.out_of_bounds)
        require(sum(dead) <= 1, "Blocked, touchback and out of bounds are mutually exclusive")
        if any(dead):
            require(not (self.fair_catch or self.muffed or self.fumble or self.touchdown),
                    "A blocked, touchback or out of bounds punt cannot be caught, muffed or scored")
        require(not (self.fair_catch and (self.muffed or self.fumble or self.touchdown)),
                "A fair catch cannot be muffed, fumbled or scored")

    @property
    def net_yards(self) -> int:
        return self.punt_yards - self.punt_return_yards + self.fumble_return_yards

    @property
    def turnover(self) -> bool:
        # change of possession; a fumble here means the punting team got it back
        return not self.fumble

    @property
    def offense_score(self) -> ScoreResult:
        return ScoreResult.TOUCHDOWN if self.touchdown and self.fumble else ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        return ScoreResult.TOUCHDOWN if self.touchdown and not self.fumble else ScoreResult.NONE

    @property
    def punt(self) -> bool:
        return True

    @property
    def next_play_extra_point(self) -> bool:
        return self.touchdown

    def summary(self) -> str:
        if self.blocked:
            return "Punt BLOCKED!"
        text = f"Punt {self.punt_yards} yards"
        if self.touchback:
            return text + " for a touchback."
        if self.out_of_bounds:
            return text + " out of bounds."
        if self.fair_catch:
            return text + " for a fair catch."
        if self.muffed:
            text += f" MUFFED recovered by the punting team, returned {self.fumble_return_yards} yards."
        else:
            text += f" returned {self.punt_return_yards} yards."
            if self.fumble:
                text += f" FUMBLED recovered by the punting team, returned {self.fumble_return_yards} yards."
        if self.touchdown:
            text += " TOUCHDOWN!"
        return text


class PuntResultSimulator(ResultSimulator):
    """Punts: block, landing spot, then what the receiving team does with it.

    Field-position regressions are driven by the yards from the line of
    scrimmage to the end zone the punt is kicked toward.
    """

    def blocked(self, norm_diff_blocking: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_BLOCK_INTR + P_BLOCK_COEF * norm_diff_blocking)

    def inside_20(self, norm_punting: float, td_yards: int, rng: np.random.Generator) -> bool:
        p_skill = clamp01(P_PUNT_INSIDE_20_SKILL_INTR + P_PUNT_INSIDE_20_SKILL_COEF * norm_punting)
        # logistic in the yards to go, centred at PARAM_3 of the field
        center = P_PUNT_INSIDE_20_YARD_LINE_PARAM_3 * MAX_YARDLINE
        p_yard_line = clamp01(
            P_PUNT_INSIDE_20_YARD_LINE_PARAM_1
            / (1.0 + np.exp(P_PUNT_INSIDE_20_YARD_LINE_PARAM_2 * (center - td_yards)))
            + P_PUNT_INSIDE_20_YARD_LINE_PARAM_4 * td_yards
        )
        return bernoulli(rng, np.sqrt(p_skill * p_yard_line))

    def relative_distance(self, td_yards: int, inside_20: bool, rng: np.random.Generator) -> float:
        x = td_yards
        if inside_20:
            mean = PUNT_INSIDE_20_MEAN_REL_DIST_INTR + PUNT_INSIDE_20_MEAN_REL_DIST_COEF * x
            std = PUNT_INSIDE_20_STD_REL_DIST_INTR + PUNT_INSIDE_20_STD_REL_DIST_COEF * x
            skew = (PUNT_INSIDE_20_SKEW_REL_DIST_INTR + PUNT_INSIDE_20_SKEW_REL_DIST_COEF_1 * x
                    + PUNT_INSIDE_20_SKEW_REL_DIST_COEF_2 * x ** 2)
        else:
            mean = (PUNT_OUTSIDE_20_MEAN_REL_DIST_INTR + PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_1 * x
                    + PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_2 * x ** 2
                    + PUNT_OUTSIDE_20_MEAN_REL_DIST_COEF_3 * x ** 3)
            std = PUNT_OUTSIDE_20_STD_REL_DIST_INTR + PUNT_OUTSIDE_20_STD_REL_DIST_COEF * x
            skew = (PUNT_OUTSIDE_20_SKEW_REL_DIST_INTR + PUNT_OUTSIDE_20_SKEW_REL_DIST_COEF_1 * x
                    + PUNT_OUTSIDE_20_SKEW_REL_DIST_COEF_2 * x ** 2)
        return skew_normal(rng, mean, max(MIN_REL_DIST_STD, std), skew)

    def out_of_bounds(self, td_yards: int, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_PUNT_OOB_INTR + P_PUNT_OOB_COEF_1 * td_yards + P_PUNT_OOB_COEF_2 * td_yards ** 2)

    def fair_catch(self, td_yards: int, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_FAIR_CATCH_INTR + P_FAIR_CATCH_COEF * td_yards)

    def muffed(self, norm_diff_returning: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_MUFFED_PUNT_INTR + P_MUFFED_PUNT_COEF * norm_diff_returning)

    def return_yards(self, norm_diff_returning: float, punt_yards: int, rng: np.random.Generator) -> int:
        a = norm_diff_returning
        b = punt_yards / MAX_YARDLINE
        mean = MEAN_REL_RETURN_YARDS_INTR + MEAN_REL_RETURN_YARDS_COEF_1 * a + MEAN_REL_RETURN_YARDS_COEF_2 * b
        std = STD_REL_RETURN_YARDS_INTR + STD_REL_RETURN_YARDS_COEF_1 * a + STD_REL_RETURN_YARDS_COEF_2 * b
        skew = SKEW_REL_RETURN_YARDS_INTR + SKEW_REL_RETURN_YARDS_COEF_1 * a + SKEW_REL_RETURN_YARDS_COEF_2 * b
        return rounded(skew_normal(rng, mean, std, skew) * MAX_YARDLINE)

    def fumble(self, norm_diff_returning: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_FUMBLE_INTR + P_FUMBLE_COEF * norm_diff_returning)

    def fumble_return_yards(self, rng: np.random.Generator) -> int:
        return rounded(exponential(rng))

    def play_duration(self, total_yards: int, rng: np.random.Generator) -> int:
        mean = PUNT_PLAY_DURATION_INTR + PUNT_PLAY_DURATION_COEF * total_yards
        return min(MAX_PLAY_DURATION, max(0, rounded(normal(rng, mean, STD_PLAY_DURATION))))

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> PuntResult:
        norm_diff_blocking = normalized_skill_diff(
            self.defense_rating(defense, "blitzing", context),
            self.offense_rating(offense, "blocking", context),
        )
        norm_diff_returning = normalized_skill_diff(
            self.defense_rating(defense, "kick_returning", context),
            self.offense_rating(offense, "kick_return_defense", context),
        )
        norm_punting = offense.offense.punting / 100
        td_yards = context.yards_to_touchdown()
        safety_yards = context.yards_to_safety()

        if self.blocked(norm_diff_blocking, rng):
            res = PuntResult(blocked=True, play_duration=self.play_duration(0, rng))
            logger.debug("punt: %s", res.summary())
            return res

        inside_20 = self.inside_20(norm_punting, td_yards, rng)
        landing = rounded(self.relative_distance(td_yards, inside_20, rng) * td_yards)
        if landing <= 0:
            res = PuntResult(punt_yards=td_yards, touchback=True, play_duration=self.play_duration(td_yards, rng))
            logger.debug("punt: %s", res.summary())
            return res
        punt_yards = max(0, td_yards - landing)

        out_of_bounds = self.out_of_bounds(td_yards, rng)
        fair_catch = not out_of_bounds and self.fair_catch(td_yards, rng)
        muffed = not (out_of_bounds or fair_catch) and self.muffed(norm_diff_returning, rng)

        return_yards = 0
        fumble = muffed
        fumble_return_yards = 0
        touchdown = False
        if not (out_of_bounds or fair_catch or muffed):
            # a return can end no further than the punting team's goal line
            return_yards = max(punt_yards - td_yards,
                               min(punt_yards - safety_yards,
                                   self.return_yards(norm_diff_returning, punt_yards, rng)))
            touchdown = punt_yards - return_yards == safety_yards
            fumble = not touchdown and self.fumble(norm_diff_returning, rng)
        if fumble:
            spot = punt_yards - return_yards
            fumble_return_yards = min(td_yards - spot, self.fumble_return_yards(rng))
            touchdown = fumble_return_yards > 0 and spot + fumble_return_yards == td_yards

        total = punt_yards + abs(return_yards) + fumble_return_yards
        res = PuntResult(
            fumble_return_yards=fumble_return_yards,
            punt_yards=punt_yards,
            punt_return_yards=return_yards,
            play_duration=self.play_duration(total, rng),
            out_of_bounds=out_of_bounds,
            fair_catch=fair_catch,
            muffed=muffed,
            fumble=fumble,
            touchdown=touchdown,
        )
        logger.debug("punt: %s", res.summary())
        return res
