from __future__ import annotations
import numpy as np
from typing import TYPE_CHECKING

from fbsim.state import GameContext
from fbsim.vocab import PLAY_CALLS, PlayCall

if TYPE_CHECKING:
    from fbsim.outcomes.result import PlayResult

RUN, PASS, FIELD_GOAL, PUNT, KICKOFF, EXTRA_POINT, QB_KNEEL = (PLAY_CALLS.index(c) for c in PlayCall)


class IllegalPlayCallError(ValueError):
    """A play call that the current game situation does not allow."""


class RulesFSM:
    def legal_play_calls(self, ctx: GameContext) -> dict[str, np.ndarray]:
        mask = np.zeros(len(PLAY_CALLS), dtype=bool)
        if ctx.game_over:
            return {"play_call": mask}
        if ctx.next_play_kickoff:
            mask[KICKOFF] = True
        elif ctx.next_play_extra_point:
            mask[[RUN, PASS, EXTRA_POINT]] = True  # kick or go for two
        else:
            mask[[RUN, PASS, FIELD_GOAL, PUNT, QB_KNEEL]] = True
        return {"play_call": mask}

    def is_legal(self, ctx: GameContext, call: PlayCall) -> bool:
        return bool(self.legal_play_calls(ctx)["play_call"][PLAY_CALLS.index(call)])

    def check(self, ctx: GameContext, call: PlayCall) -> None:
        if not self.is_legal(ctx, call):
            raise IllegalPlayCallError(f"{call.value} is not a legal play call at {ctx}")

    def apply_result(self, ctx: GameContext, result: PlayResult) -> GameContext:
        ns = ctx.next(result)
        if ns.half_seconds > ctx.half_seconds and not (ns.end_of_half or ns.quarter != ctx.quarter):
            raise ValueError("Clock went backwards")
        return ns
