import numpy as np

from fbsim.calling.knobs import scale_fourth_down, shift_run
from fbsim.calling.playcall import PlayCallSimulator
from fbsim.play_context import PlayContext
from fbsim.state import GameContext
from fbsim.team import Coach
from fbsim.vocab import PlayCall

COACH = Coach()


def pc(**kw):
    base = dict(quarter=1, half_seconds=1500, down=1, distance=10, yard_line=25, score_diff=0,
                off_timeouts=3, def_timeouts=3, clock_running=True)
    base.update(kw)
    return PlayContext(**base)


def calls(ctx, n=300, seed=0, **kw):
    rng = np.random.default_rng(seed)
    sim = PlayCallSimulator(**kw)
    return [sim.sim(ctx, COACH, rng) for _ in range(n)]


def test_knobs_clamp():
    assert shift_run(0.9, 0.3) == 1.0
    assert shift_run(0.2, -0.5) == 0.0
    assert scale_fourth_down(0.4, 2.0) == 0.8
    assert scale_fourth_down(0.4, 0.0) < 1e-6


def test_play_context_is_offense_relative():
    ctx = GameContext(down=1, distance=10, yard_line=30, next_play_kickoff=False, home_possession=False,
                      home_score=10, away_score=3)
    p = PlayContext.from_game_context(ctx)
    assert p.yard_line == 70
    assert p.score_diff == -7
    assert str(p) == "[15:00 1Q] 1st & 10 at OPP 30"


def test_play_context_display():
    assert str(pc(half_seconds=125, quarter=2, down=3, distance=4, yard_line=50)) == "[2:05 2Q] 3rd & 4 at OPP 50"
    assert str(pc(down=1, distance=5, yard_line=95)) == "[10:00 1Q] 1st & goal at OPP 5"
    assert str(pc(quarter=5, half_seconds=600)) == "[10:00 1OT] 1st & 10 at OWN 25"


def test_play_context_predicates():
    assert pc(down=4, distance=2, yard_line=85).can_go_for_it()
    assert not pc(down=4, distance=5, yard_line=85).can_go_for_it()
    assert pc(down=4, distance=4, yard_line=40).can_go_for_it()
    assert not pc(down=4, distance=2, yard_line=30).can_go_for_it()
    assert pc(yard_line=45).in_field_goal_range() and not pc(yard_line=44).in_field_goal_range()
    assert pc(quarter=4, half_seconds=60, score_diff=-17).must_score()
    assert not pc(quarter=4, half_seconds=600, score_diff=-3).must_score()
    assert not pc(quarter=4, half_seconds=60, score_diff=3).must_score()
    assert pc(half_seconds=5).last_play()
    assert pc(quarter=4, half_seconds=80, score_diff=7, down=1, def_timeouts=0).can_kneel()
    assert pc(next_play_extra_point=True, quarter=4, half_seconds=300, score_diff=-2).two_point_conversion()
    assert not pc(next_play_extra_point=True, quarter=2, half_seconds=300, score_diff=-2).two_point_conversion()


def test_must_score_rounds_half_possessions_up():
    # 20 points is two and a half possessions, so three scores with three drives left
    assert pc(quarter=4, half_seconds=200, down=4, distance=5, yard_line=60, score_diff=-20).must_score()
    assert not pc(quarter=4, half_seconds=200, down=4, distance=5, yard_line=60, score_diff=-19).must_score()


def test_kickoff_and_extra_point():
    assert set(calls(GameContext(), n=20)) == {PlayCall.KICKOFF}
    xp = GameContext(down=0, distance=2, yard_line=98, next_play_extra_point=True, next_play_kickoff=False)
    assert set(calls(xp, n=50)) == {PlayCall.EXTRA_POINT}


def test_late_deficit_goes_for_two():
    ctx = GameContext(quarter=4, half_seconds=120, down=0, distance=2, yard_line=98, home_score=20,
                      away_score=22, next_play_extra_point=True, next_play_kickoff=False)
    assert set(calls(ctx, n=50)) <= {PlayCall.RUN, PlayCall.PASS}


def test_first_down_mixes_run_and_pass():
    ctx = GameContext(down=1, distance=10, yard_line=25, next_play_kickoff=False)
    got = calls(ctx)
    assert set(got) == {PlayCall.RUN, PlayCall.PASS}


def test_run_shift_moves_the_mix():
    ctx = GameContext(down=1, distance=10, yard_line=25, next_play_kickoff=False)
    assert set(calls(ctx, n=50, run_shift=1.0)) == {PlayCall.RUN}
    assert set(calls(ctx, n=50, run_shift=-1.0)) == {PlayCall.PASS}


def test_fourth_down_deep_in_own_territory_punts():
    ctx = GameContext(down=4, distance=8, yard_line=20, next_play_kickoff=False)
    assert set(calls(ctx, n=50)) == {PlayCall.PUNT}


def test_fourth_down_in_range_kicks_or_goes():
    ctx = GameContext(down=4, distance=8, yard_line=70, next_play_kickoff=False)
    assert set(calls(ctx, n=50)) == {PlayCall.FIELD_GOAL}
    short = GameContext(down=4, distance=1, yard_line=90, next_play_kickoff=False)
    assert set(calls(short)) <= {PlayCall.FIELD_GOAL, PlayCall.RUN, PlayCall.PASS}


def test_victory_formation():
    ctx = GameContext(quarter=4, half_seconds=70, down=1, distance=10, yard_line=50, home_score=24,
                      away_score=17, away_timeouts=0, next_play_kickoff=False)
    assert set(calls(ctx, n=20)) == {PlayCall.QB_KNEEL}


def test_trailing_last_play_needs_touchdown():
    ctx = GameContext(quarter=4, half_seconds=4, down=2, distance=10, yard_line=70, home_score=10,
                      away_score=17, next_play_kickoff=False)
    assert set(calls(ctx, n=20)) == {PlayCall.PASS}
