from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import END_ZONE_DEPTH, MAX_PLAY_DURATION, MAX_YARDLINE
from fbsim.outcomes.distributions import bernoulli, exponential, normal, rounded, skew_normal
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, require
from fbsim.score import ScoreResult
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

# Pass rush
P_PRESSURE_INTR = 0.271330308819705
P_PRESSURE_COEF = -0.21949841
P_SACK_INTR = 0.10898853099029118
P_SACK_COEF = -0.08144463
MEAN_SACK_YARDS = 6.703931
STD_SACK_YARDS = 3.640892

# Scrambles
P_SCRAMBLE_INTR = 0.004914770911025865
P_SCRAMBLE_COEF = 0.13433329
MEAN_SCRAMBLE_YARDS_INTR = 6.313938741503718
MEAN_SCRAMBLE_YARDS_COEF = 1.61219979
STD_SCRAMBLE_YARDS_INTR = 4.974662775900808
STD_SCRAMBLE_YARDS_COEF = 2.92020782
SKEW_SCRAMBLE_YARDS_INTR = 4.836766323216999
SKEW_SCRAMBLE_YARDS_COEF_1 = -12.22272275
SKEW_SCRAMBLE_YARDS_COEF_2 = 11.66478691

# Pass depth, cubic in yards to the goal line
P_SHORT_PASS = (0.8410555875020549, -0.0054862949, 0.000050472999)
MEAN_SHORT_PASS_DIST = (3.4999015440062564, 0.0604532760, -0.00118944537, 0.00000662934811)
STD_SHORT_PASS_DIST = (3.265933454906047, 0.130891269, -0.00237804912, 0.0000127875476)
MIN_SHORT_PASS_DIST = -2
MEAN_DEEP_PASS_DIST = (2.005519456054698, 1.23979494, -0.0204279438, 0.000106455687)
STD_DEEP_PASS_DIST = (-1.3385882641162565, 0.277596854, -0.00120030840, -0.00000553839342)
MIN_DEEP_PASS_STD = 1.0  # the cubic goes negative inside the 5

# Interceptions
P_INTERCEPTION_INTR = 0.04028420712097409
P_INTERCEPTION_COEF = -0.10021105
P_INTERCEPTION_BOUNDS = (0.005, 0.995)
P_INTERCEPTION_RETURN = 0.05
MEAN_INT_RETURN_YARDS = (11.952396063360451, 0.134680678, -0.00176264090, -0.00000170755614)
STD_INT_RETURN_YARDS = (27.359295307597726, -0.298495830, 0.00302760757, -0.0000206954185)
SKEW_INT_RETURN_YARDS = (2.4745876927563324, -0.00592938387, -0.000720407529, 0.00000700818986)

# Completions
P_COMPLETE_INTR = 0.6353317321473931
P_COMPLETE_COEF = 0.09651794
P_COMPLETE_DIST_INTR = 0.7706457923470589
P_COMPLETE_DIST_COEF = -0.00870494
P_COMPLETE_MAX = 0.8

# Yards after catch
P_ZERO_YAC_INTR = 0.4676126560122353
P_ZERO_YAC_COEF = -0.06038915
MEAN_YAC = (3.744998660966435, 2.21147177, 2.36122192)
STD_YAC = (5.404781207922575, 0.28690679, 5.88666152)
SKEW_YAC = (3.0784534230008083, -0.10326043)

# Fumbles after the catch or on a scramble
P_FUMBLE_INTR = 0.05
P_FUMBLE_COEF = -0.08
P_FUMBLE_MIN = 0.001

MEAN_PLAY_DURATION_INTR = 8.32135821
MEAN_PLAY_DURATION_COEF_1 = 0.11343699
MEAN_PLAY_DURATION_COEF_2 = -0.00056798
STD_PLAY_DURATION = 2.0


def _poly(coefs: tuple[float, ...], x: float) -> float:
    return sum(c * x ** i for i, c in enumerate(coefs))


def _log_or_floor(x: float) -> float:
    return math.log(x) if x > 0 else -math.inf


@dataclass(frozen=True, slots=True)
class PassResult(PlayResultBase):
    play_duration: int = 0
    sack_yards_lost: int = 0
    scramble_yards: int = 0
    pass_dist: int = 0
    return_yards: int = 0
    yards_after_catch: int = 0
    pressure: bool = False
    sack: bool = False
    scramble: bool = False
    interception: bool = False
    complete: bool = False
    fumble: bool = False
    touchdown: bool = False
    safety: bool = False
    two_point_conversion: bool = False

    def __post_init__(self) -> None:
        require(0 <= self.play_duration <= MAX_PLAY_DURATION,
                f"Play duration is out of range [0, {MAX_PLAY_DURATION}]: {self.play_duration}")
        for name in ("sack_yards_lost", "scramble_yards", "pass_dist", "return_yards", "yards_after_catch"):
            value = getattr(self, name)
            require(abs(value) <= MAX_YARDLINE, f"{name} is out of range [-100, 100]: {value}")
        require(self.sack or self.sack_yards_lost == 0, "Sack yards lost must be zero without a sack")
        require(self.scramble or self.scramble_yards == 0, "Scramble yards must be zero without a scramble")
        if self.sack or self.scramble:
            require(self.pass_dist == 0 and self.yards_after_catch == 0,
                    "Pass distance and yards after catch must be zero on a sack or scramble")
        require(self.fumble or self.interception or self.return_yards == 0,
                "Return yards must be zero without a fumble or interception")
        require(self.pressure or not self.sack, "Cannot have a sack without pressure")
        require(not (self.sack and (self.scramble or self.interception or self.complete)),
                "A sack excludes a scramble, interception or completion")
        require(not (self.scramble and (self.interception or self.complete)),
                "A scramble excludes an interception or completion")
        require(not (self.interception and (self.fumble or self.complete)),
                "An interception excludes a fumble or completion")
        require(not (self.touchdown and self.safety), "Cannot have both a touchdown and a safety")

    @property
    def net_yards(self) -> int:
        if self.complete:
            gained = self.pass_dist + self.yards_after_catch
        else:
            gained = self.scramble_yards
        return gained - (self.return_yards + self.sack_yards_lost)

    @property
    def turnover(self) -> bool:
        return self.fumble or self.interception

    @property
    def incomplete(self) -> bool:
        return not (self.complete or self.sack or self.scramble or self.interception)

    @property
    def offense_score(self) -> ScoreResult:
        if self.touchdown and not self.turnover:
            return ScoreResult.TWO_POINT_CONVERSION if self.two_point_conversion else ScoreResult.TOUCHDOWN
        return ScoreResult.NONE

    @property
    def defense_score(self) -> ScoreResult:
        if self.touchdown and self.turnover:
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
        parts = []
        if self.sack:
            parts.append(f"Defense brings pressure, QB SACKED for loss of {self.sack_yards_lost} yards.")
        elif self.scramble:
            parts.append(f"QB scrambles for {self.scramble_yards} yards.")
        elif self.interception:
            parts.append(f"Pass {self.pass_dist} yards INTERCEPTED, returned {self.return_yards} yards.")
        elif self.complete:
            parts.append(f"Pass {self.pass_dist} yards complete for gain of "
                         f"{self.pass_dist + self.yards_after_catch}.")
        else:
            parts.append(f"Pass {self.pass_dist} yards incomplete.")
        if self.fumble:
            parts.append(f"FUMBLE recovered by the defense, returned {self.return_yards} yards.")
        if self.two_point_conversion:
            good = self.touchdown and not self.turnover
            parts.append("Two point conversion is GOOD!" if good else "Two point conversion is no good.")
        elif self.touchdown:
            parts.append("TOUCHDOWN!")
        elif self.safety:
            parts.append("SAFETY!")
        return " ".join(parts)


class PassResultSimulator(ResultSimulator):
    """Dropbacks: pressure, sacks, scrambles, interceptions, completions and YAC."""

    def pressure(self, norm_diff_blocking: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_PRESSURE_INTR + P_PRESSURE_COEF * norm_diff_blocking)

    def sack(self, norm_diff_blocking: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_SACK_INTR + P_SACK_COEF * norm_diff_blocking)

    def sack_yards_lost(self, rng: np.random.Generator) -> int:
        return rounded(normal(rng, MEAN_SACK_YARDS, STD_SACK_YARDS))

    def scramble(self, norm_scrambling: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_SCRAMBLE_INTR + P_SCRAMBLE_COEF * norm_scrambling)

    def scramble_yards(self, norm_diff_scrambling: float, rng: np.random.Generator) -> int:
        x = norm_diff_scrambling
        mean = MEAN_SCRAMBLE_YARDS_INTR + MEAN_SCRAMBLE_YARDS_COEF * x
        std = STD_SCRAMBLE_YARDS_INTR + STD_SCRAMBLE_YARDS_COEF * x
        skew = SKEW_SCRAMBLE_YARDS_INTR + SKEW_SCRAMBLE_YARDS_COEF_1 * x + SKEW_SCRAMBLE_YARDS_COEF_2 * x ** 2
        return rounded(skew_normal(rng, mean, std, skew))

    def short_pass(self, yard_line: int, rng: np.random.Generator) -> bool:
        return bernoulli(rng, _poly(P_SHORT_PASS, yard_line))

    def short_pass_distance(self, yard_line: int, rng: np.random.Generator) -> int:
        dist = normal(rng, _poly(MEAN_SHORT_PASS_DIST, yard_line), _poly(STD_SHORT_PASS_DIST, yard_line))
        return max(MIN_SHORT_PASS_DIST, rounded(dist))

    def deep_pass_distance(self, yard_line: int, rng: np.random.Generator) -> int:
        std = max(MIN_DEEP_PASS_STD, _poly(STD_DEEP_PASS_DIST, yard_line))
        return rounded(normal(rng, _poly(MEAN_DEEP_PASS_DIST, yard_line), std))

    def interception(self, norm_diff_turnovers: float, rng: np.random.Generator) -> bool:
        lo, hi = P_INTERCEPTION_BOUNDS
        p = min(hi, max(lo, P_INTERCEPTION_INTR + P_INTERCEPTION_COEF * norm_diff_turnovers))
        return bernoulli(rng, p)

    def interception_return_yards(self, yard_line: int, rng: np.random.Generator) -> int:
        if not bernoulli(rng, P_INTERCEPTION_RETURN):
            return 0
        return rounded(skew_normal(
            rng,
            _poly(MEAN_INT_RETURN_YARDS, yard_line),
            _poly(STD_INT_RETURN_YARDS, yard_line),
            _poly(SKEW_INT_RETURN_YARDS, yard_line),
        ))

    def complete(self, norm_diff_passing: float, pass_dist: int, rng: np.random.Generator) -> bool:
        p_skill = P_COMPLETE_INTR + P_COMPLETE_COEF * norm_diff_passing
        p_dist = P_COMPLETE_DIST_INTR + P_COMPLETE_DIST_COEF * pass_dist
        blended = _log_or_floor(0.3 * p_dist + 0.7 * p_skill) + 1.0
        damped = math.log(max(0.01, blended)) + 1.0
        p = min(P_COMPLETE_MAX, max(0.01, math.log(max(0.01, damped)) + 1.23))
        return bernoulli(rng, p)

    def zero_yards_after_catch(self, norm_diff_receiving: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, P_ZERO_YAC_INTR + P_ZERO_YAC_COEF * norm_diff_receiving)

    def yards_after_catch(self, norm_diff_receiving: float, rng: np.random.Generator) -> int:
        x = norm_diff_receiving
        return rounded(skew_normal(rng, _poly(MEAN_YAC, x), _poly(STD_YAC, x), _poly(SKEW_YAC, x)))

    def fumble(self, norm_diff_turnovers: float, rng: np.random.Generator) -> bool:
        return bernoulli(rng, max(P_FUMBLE_MIN, P_FUMBLE_INTR + P_FUMBLE_COEF * norm_diff_turnovers))

    def fumble_return_yards(self, rng: np.random.Generator) -> int:
        return rounded(exponential(rng))

    def play_duration(self, total_yards: int, rng: np.random.Generator) -> int:
        mean = (MEAN_PLAY_DURATION_INTR + MEAN_PLAY_DURATION_COEF_1 * total_yards
                + MEAN_PLAY_DURATION_COEF_2 * total_yards ** 2)
        return min(MAX_PLAY_DURATION, max(0, rounded(normal(rng, mean, STD_PLAY_DURATION))))

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> PassResult:
        norm_diff_blocking = self.skill_diff(offense, "blocking", defense, "blitzing", context)
        norm_diff_passing = self.skill_diff(offense, "passing", defense, "pass_defense", context)
        norm_diff_receiving = self.skill_diff(offense, "receiving", defense, "coverage", context)
        norm_diff_turnovers = self.skill_diff(offense, "turnovers", defense, "turnovers", context)
        norm_diff_scrambling = self.skill_diff(offense, "scrambling", defense, "rush_defense", context)
        norm_scrambling = offense.offense.scrambling / 100

        td_yards = context.yards_to_touchdown()
        safety_yards = context.yards_to_safety()
        end_line = td_yards + END_ZONE_DEPTH
        touchdown = safety = False

        pressure = self.pressure(norm_diff_blocking, rng)
        sack = pressure and self.sack(norm_diff_blocking, rng)
        sack_yards_lost = 0
        if sack:
            sack_yards_lost = min(-safety_yards, max(0, self.sack_yards_lost(rng)))
            safety = -sack_yards_lost == safety_yards

        scramble = pressure and not sack and self.scramble(norm_scrambling, rng)
        scramble_yards = 0
        if scramble:
            scramble_yards = max(safety_yards, min(td_yards, self.scramble_yards(norm_diff_scrambling, rng)))
            touchdown = scramble_yards == td_yards
            safety = scramble_yards == safety_yards

        thrown = not (sack or scramble)
        pass_dist = 0
        interception = complete = False
        return_yards = yards_after_catch = 0
        if thrown:
            if self.short_pass(td_yards, rng):
                pass_dist = self.short_pass_distance(td_yards, rng)
            else:
                pass_dist = self.deep_pass_distance(td_yards, rng)
            pass_dist = min(end_line, MAX_YARDLINE, max(safety_yards, pass_dist))

            interception = self.interception(norm_diff_turnovers, rng)
            if interception:
                # intercepting side runs back toward the offense's goal line
                return_yards = min(-safety_yards, max(0, self.interception_return_yards(td_yards, rng)))
                touchdown = return_yards > 0 and return_yards == -safety_yards
            else:
                # a ball caught beyond the end line is incomplete
                complete = pass_dist < end_line and self.complete(norm_diff_passing, pass_dist, rng)

        if complete:
            pass_dist = min(td_yards, pass_dist)
            touchdown = pass_dist == td_yards
            zero_yac = self.zero_yards_after_catch(norm_diff_receiving, rng)
            if not (touchdown or zero_yac):
                yac = self.yards_after_catch(norm_diff_receiving, rng)
                yards_after_catch = max(safety_yards - pass_dist, min(td_yards - pass_dist, yac))
            gained = pass_dist + yards_after_catch
            touchdown = gained == td_yards
            safety = gained == safety_yards

        fumble = False
        if (scramble or complete) and not (touchdown or safety):
            fumble = self.fumble(norm_diff_turnovers, rng)
        if fumble:
            spot = scramble_yards if scramble else pass_dist + yards_after_catch
            return_yards = min(spot - safety_yards, self.fumble_return_yards(rng))
            touchdown = return_yards > 0 and spot - return_yards == safety_yards

        two_point = context.next_play_extra_point
        if two_point:
            duration = 0
        else:
            total = (sack_yards_lost + abs(pass_dist) + abs(scramble_yards) + abs(return_yards)
                     + abs(yards_after_catch))
            duration = self.play_duration(total, rng)
        res = PassResult(
            play_duration=duration,
            sack_yards_lost=sack_yards_lost,
            scramble_yards=scramble_yards,
            pass_dist=pass_dist,
            return_yards=return_yards,
            yards_after_catch=yards_after_catch,
            pressure=pressure,
            sack=sack,
            scramble=scramble,
            interception=interception,
            complete=complete,
            fumble=fumble,
            touchdown=touchdown,
            safety=safety,
            two_point_conversion=two_point,
        )
        logger.debug("pass: %s", res.summary())
        return res
