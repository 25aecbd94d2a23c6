from __future__ import annotations
import logging
from typing import TYPE_CHECKING

import numpy as np

from fbsim.calling.knobs import scale_fourth_down, shift_run
from fbsim.constants import FOURTH_DOWN_NORMAL_CALL_YARD, MAX_DOWN, MAX_YARDLINE
from fbsim.outcomes.distributions import bernoulli, clamp01
from fbsim.play_context import PlayContext
from fbsim.team import Coach
from fbsim.vocab import PlayCall

if TYPE_CHECKING:
    from fbsim.state import GameContext

logger = logging.getLogger(__name__)

# Run probability when managing the clock on 1st-3rd down
P_RUN_CLOCK_MANAGEMENT = 0.15
P_RUN_CLOCK_MANAGEMENT_NO_TIMEOUTS = 0.001

# Run probability by down, on the coach's run/pass tendency
P_RUN_BY_DOWN = {
    1: (0.41649529080915104, 0.2035597),
    2: (0.3250691394699521, 0.19162143),
    3: (0.1340492470213823, 0.22902729),
    4: (0.040592196833718536, 0.05793641),
}
P_RUN_DIST_INTR = 0.30634251685198927
P_RUN_DIST_COEF = -0.00318081
P_RUN_DOWN_WEIGHT = 0.7

# Fourth down
P_FIELD_GOAL_RISK_INTR = 0.7886141537295228
P_FIELD_GOAL_RISK_COEF = -0.26532936
P_FIELD_GOAL_YARD_LINE_INTR = 0.24354785898372522
P_FIELD_GOAL_YARD_LINE_COEF_1 = 0.05165115
P_FIELD_GOAL_YARD_LINE_COEF_2 = -0.00112775
P_FIELD_GOAL_RISK_WEIGHT = 0.7
P_GO_FOR_IT_INTR = 0.19565011246401598
P_GO_FOR_IT_COEF = 0.51602604

# Bonus toward a field goal when one is all that is needed on the last play
P_LAST_PLAY_FIELD_GOAL_BONUS = 0.2


def p_field_goal_yard_line(yards_to_goal: int) -> float:
    return (P_FIELD_GOAL_YARD_LINE_INTR + P_FIELD_GOAL_YARD_LINE_COEF_1 * yards_to_goal
            + P_FIELD_GOAL_YARD_LINE_COEF_2 * yards_to_goal ** 2)


class PlayCallSimulator:
    """Stateless decision tree choosing the offense's next play call."""

    def __init__(self, run_shift: float = 0.0, fourth_down_aggr: float = 1.0):
        self.run_shift = run_shift
        self.fourth_down_aggr = fourth_down_aggr

    def last_play_call(self, context: PlayContext, rng: np.random.Generator) -> PlayCall:
        if context.last_play_need_td():
            return PlayCall.PASS
        yards_to_goal = MAX_YARDLINE - context.yard_line
        p = P_LAST_PLAY_FIELD_GOAL_BONUS + p_field_goal_yard_line(yards_to_goal)
        if bernoulli(rng, p):
            return PlayCall.FIELD_GOAL
        return PlayCall.PASS

    def conserve_clock_call(self, context: PlayContext, rng: np.random.Generator) -> PlayCall:
        p_run = P_RUN_CLOCK_MANAGEMENT if context.off_timeouts > 0 else P_RUN_CLOCK_MANAGEMENT_NO_TIMEOUTS
        return PlayCall.RUN if bernoulli(rng, shift_run(p_run, self.run_shift)) else PlayCall.PASS

    def normal_call(self, context: PlayContext, run_pass: float, rng: np.random.Generator) -> PlayCall:
        intr, coef = P_RUN_BY_DOWN.get(context.down, P_RUN_BY_DOWN[2])
        p_run_down = intr + coef * run_pass
        p_run_dist = P_RUN_DIST_INTR + P_RUN_DIST_COEF * context.distance
        p_run = clamp01(p_run_dist * (1 - P_RUN_DOWN_WEIGHT) + p_run_down * P_RUN_DOWN_WEIGHT)
        return PlayCall.RUN if bernoulli(rng, shift_run(p_run, self.run_shift)) else PlayCall.PASS

    def fourth_down_call(self, context: PlayContext, risk_taking: float, run_pass: float,
                         rng: np.random.Generator) -> PlayCall:
        in_range = context.in_field_goal_range()
        go_for_it = context.can_go_for_it()
        if not (in_range or go_for_it):
            return PlayCall.PUNT

        yards_to_goal = MAX_YARDLINE - context.yard_line
        p_go = scale_fourth_down(P_GO_FOR_IT_INTR + P_GO_FOR_IT_COEF * risk_taking, self.fourth_down_aggr)
        p_fg_risk = P_FIELD_GOAL_RISK_INTR + P_FIELD_GOAL_RISK_COEF * risk_taking
        blend = (p_fg_risk * P_FIELD_GOAL_RISK_WEIGHT
                 + p_field_goal_yard_line(yards_to_goal) * (1 - P_FIELD_GOAL_RISK_WEIGHT))
        p_fg = min(0.9999, max(0.0, np.log(max(blend, 0.0001)) * 0.8) * 1.6 + 0.0001)

        if go_for_it:
            if bernoulli(rng, p_fg) and in_range:
                return PlayCall.FIELD_GOAL
            if yards_to_goal <= FOURTH_DOWN_NORMAL_CALL_YARD or bernoulli(rng, p_go):
                return self.normal_call(context, run_pass, rng)
        return PlayCall.FIELD_GOAL if in_range else PlayCall.PUNT

    def sim(self, context: GameContext, coach: Coach, rng: np.random.Generator) -> PlayCall:
        if context.next_play_kickoff:
            return PlayCall.KICKOFF
        risk_taking = coach.risk_taking / 100
        run_pass = coach.run_pass / 100
        play_context = PlayContext.from_game_context(context)

        if play_context.next_play_extra_point:
            if play_context.two_point_conversion():
                call = self.normal_call(play_context, run_pass, rng)
            else:
                call = PlayCall.EXTRA_POINT
        elif play_context.quarter >= 4 and play_context.score_diff > 0 and play_context.can_kneel():
            # victory formation
            call = PlayCall.QB_KNEEL
        elif play_context.down == MAX_DOWN:
            if play_context.must_score():
                call = self.last_play_call(play_context, rng)
            else:
                call = self.fourth_down_call(play_context, risk_taking, run_pass, rng)
        elif play_context.offense_conserve_clock():
            if play_context.last_play():
                call = self.last_play_call(play_context, rng)
            else:
                call = self.conserve_clock_call(play_context, rng)
        else:
            call = self.normal_call(play_context, run_pass, rng)
        logger.debug("play call %s at %s", call.value, play_context)
        return call
