import pytest

from fbsim.outcomes.run import RunResult
from fbsim.rules.fsm import IllegalPlayCallError, RulesFSM
from fbsim.state import GameContext
from fbsim.vocab import PLAY_CALLS, PlayCall


def allowed(ctx):
    mask = RulesFSM().legal_play_calls(ctx)["play_call"]
    return {PLAY_CALLS[i] for i, ok in enumerate(mask) if ok}


def test_kickoff_is_the_only_legal_call_before_a_kickoff():
    assert allowed(GameContext()) == {PlayCall.KICKOFF}


def test_try_after_touchdown():
    ctx = GameContext(down=0, distance=2, yard_line=98, next_play_extra_point=True, next_play_kickoff=False)
    assert allowed(ctx) == {PlayCall.EXTRA_POINT, PlayCall.RUN, PlayCall.PASS}


def test_4th_down_allows_specials():
    ctx = GameContext(down=4, distance=3, yard_line=60, next_play_kickoff=False)
    assert {PlayCall.PUNT, PlayCall.FIELD_GOAL} <= allowed(ctx)
    assert PlayCall.KICKOFF not in allowed(ctx)


def test_nothing_is_legal_after_the_game():
    ctx = GameContext(quarter=4, half_seconds=0, home_score=7, game_over=True)
    assert allowed(ctx) == set()


def test_check_raises_on_illegal_call():
    fsm = RulesFSM()
    with pytest.raises(IllegalPlayCallError):
        fsm.check(GameContext(), PlayCall.RUN)
    fsm.check(GameContext(), PlayCall.KICKOFF)


def test_clock_never_negative():
    ctx = GameContext(quarter=2, half_seconds=5, down=1, distance=10, yard_line=50, next_play_kickoff=False)
    ns = RulesFSM().apply_result(ctx, RunResult(yards_gained=0, play_duration=9))
    assert ns.half_seconds == 0
