from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from fbsim.constants import DRAIN_CLOCK_DURATION, MAX_DOWN, MAX_PLAY_DURATION
from fbsim.outcomes.distributions import bernoulli, normal, rounded, skew_normal
from fbsim.outcomes.result import PlayResultBase, ResultSimulator, require
from fbsim.play_context import PlayContext
from fbsim.team import Team

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

P_UP_TEMPO_INTR = -4.539512521135468
P_UP_TEMPO_COEF = 3.03267023

MEAN_BETWEEN_PLAY_DURATION = 38.0
STD_BETWEEN_PLAY_DURATION = 5.0
SKEW_BETWEEN_PLAY_DURATION = -7.0
MEAN_UP_TEMPO_BETWEEN_PLAY_DURATION = 6.0
STD_UP_TEMPO_BETWEEN_PLAY_DURATION = 2.0
STD_DRAIN_CLOCK_DURATION = 1.0

P_DEFENSE_NOT_SET_CLOCK_STOPPED = 0.001
P_DEFENSE_NOT_SET = 0.08
P_DEFENSE_NOT_SET_UP_TEMPO = 0.3

# timeout to get set, either caught unset or facing a critical down
P_GET_SET_TIMEOUT_INTR = 0.2
P_GET_SET_TIMEOUT_COEF = 0.4
GET_SET_TIMEOUT_MAX_QUARTER = 2


@dataclass(frozen=True, slots=True)
class BetweenPlayResult(PlayResultBase):
    """Clock runoff and timeouts between two snaps."""
    duration: int = 0
    offense_timeout: bool = False
    defense_timeout: bool = False
    up_tempo: bool = False
    defense_not_set: bool = False
    critical_down: bool = False

    def __post_init__(self) -> None:
        require(not (self.offense_timeout and self.defense_timeout),
                "Offense and defense cannot both call timeout")
        require(0 <= self.duration <= MAX_PLAY_DURATION,
                f"Duration is out of range [0, {MAX_PLAY_DURATION}]: {self.duration}")

    @property
    def play_duration(self) -> int:
        return self.duration

    def summary(self) -> str:
        parts = []
        if self.up_tempo:
            parts.append("Offense rushes to the line.")
        if self.offense_timeout:
            parts.append("Offense calls timeout after the play.")
        elif self.defense_timeout:
            if self.defense_not_set:
                parts.append("Defense slow to get set, calls timeout to get set.")
            elif self.critical_down:
                parts.append("Defense calls timeout to make a playcall.")
            else:
                parts.append("Defense calls timeout.")
        return " ".join(parts)


class BetweenPlayResultSimulator(ResultSimulator):

    def up_tempo(self, context: PlayContext, norm_up_tempo: float, rng: np.random.Generator) -> bool:
        if context.up_tempo():
            return True
        return bernoulli(rng, np.exp(P_UP_TEMPO_INTR + P_UP_TEMPO_COEF * norm_up_tempo))

    def defense_not_set(self, up_tempo: bool, clock_running: bool, rng: np.random.Generator) -> bool:
        if not clock_running:
            p = P_DEFENSE_NOT_SET_CLOCK_STOPPED
        elif up_tempo:
            p = P_DEFENSE_NOT_SET_UP_TEMPO
        else:
            p = P_DEFENSE_NOT_SET
        return bernoulli(rng, p)

    def defense_get_set_timeout(self, context: PlayContext, norm_risk_taking: float,
                                rng: np.random.Generator) -> bool:
        if context.def_timeouts == 0 or context.quarter > GET_SET_TIMEOUT_MAX_QUARTER:
            return False
        return bernoulli(rng, P_GET_SET_TIMEOUT_INTR + P_GET_SET_TIMEOUT_COEF * norm_risk_taking)

    def offense_conserve_clock_timeout(self, context: PlayContext) -> bool:
        if not context.clock_running or context.off_timeouts == 0:
            return False
        return context.offense_conserve_clock()

    def defense_conserve_clock_timeout(self, context: PlayContext) -> bool:
        if not context.clock_running or context.def_timeouts == 0:
            return False
        return context.defense_conserve_clock()

    def duration(self, context: PlayContext, up_tempo: bool, rng: np.random.Generator) -> int:
        if context.drain_clock():
            # run the play clock all the way down, less a little slack
            noise = abs(normal(rng, 0.0, STD_DRAIN_CLOCK_DURATION))
            return max(0, rounded(DRAIN_CLOCK_DURATION - noise))
        if up_tempo:
            draw = normal(rng, MEAN_UP_TEMPO_BETWEEN_PLAY_DURATION, STD_UP_TEMPO_BETWEEN_PLAY_DURATION)
        else:
            draw = skew_normal(rng, MEAN_BETWEEN_PLAY_DURATION, STD_BETWEEN_PLAY_DURATION,
                               SKEW_BETWEEN_PLAY_DURATION)
        return min(MAX_PLAY_DURATION, max(0, rounded(draw)))

    def sim(self, offense: Team, defense: Team, context: GameContext,
            rng: np.random.Generator) -> BetweenPlayResult:
        norm_defense_risk_taking = defense.coach.risk_taking / 100
        norm_offense_up_tempo = offense.coach.up_tempo / 100
        clock_running = context.clock_running()
        turnover = context.last_play_turnover
        play_context = PlayContext.from_game_context(context)

        up_tempo = (clock_running and not turnover and play_context.down != MAX_DOWN
                    and self.up_tempo(play_context, norm_offense_up_tempo, rng))
        defense_not_set = not turnover and self.defense_not_set(up_tempo, clock_running, rng)
        critical_down = play_context.critical_down()

        defense_timeout = False
        if not (turnover or context.last_play_kickoff):
            if defense_not_set or critical_down:
                defense_timeout = self.defense_get_set_timeout(play_context, norm_defense_risk_taking, rng)
            else:
                defense_timeout = self.defense_conserve_clock_timeout(play_context)
        offense_timeout = not (turnover or defense_timeout) and self.offense_conserve_clock_timeout(play_context)

        duration = 0
        if clock_running and not (offense_timeout or defense_timeout):
            duration = self.duration(play_context, up_tempo, rng)
        res = BetweenPlayResult(
            duration=duration,
            offense_timeout=offense_timeout,
            defense_timeout=defense_timeout,
            up_tempo=up_tempo,
            defense_not_set=defense_not_set,
            critical_down=critical_down,
        )
        logger.debug("between play: %ds %s", res.duration, res.summary())
        return res
