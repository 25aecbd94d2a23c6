import pytest

from fbsim.outcomes.betweenplay import BetweenPlayResult
from fbsim.outcomes.fieldgoal import FieldGoalResult
from fbsim.outcomes.kickoff import KickoffResult
from fbsim.outcomes.passing import PassResult
from fbsim.outcomes.run import RunResult
from fbsim.score import ScoreResult
from fbsim.state import ContextValidationError, GameContext, UpdateOptions


def scrimmage(**kw):
    base = dict(down=1, distance=10, yard_line=25, next_play_kickoff=False)
    base.update(kw)
    return GameContext(**base)


def test_defaults():
    c = GameContext()
    assert (c.quarter, c.half_seconds, c.down, c.distance, c.yard_line) == (1, 1800, 0, 10, 35)
    assert c.next_play_kickoff and c.home_possession and not c.game_over
    assert not c.started()
    assert str(c) == "[15:00 1Q] Kickoff at OWN 35 (*HOME 0 - AWAY 0)"


def test_long_kickoff_return_fumble():
    res = KickoffResult(kickoff_yards=49, kick_return_yards=67, play_duration=10, fumble_return_yards=3,
                        touchback=False, fumble=True)
    nxt = GameContext().next_context(res)
    assert nxt.distance == 10
    assert nxt.home_possession


def test_short_kickoff_return_fumble():
    res = KickoffResult(kickoff_yards=60, kick_return_yards=3, play_duration=6, fumble_return_yards=1,
                        touchback=False, fumble=True)
    nxt = GameContext().next_context(res)
    assert nxt.distance == 7
    assert nxt.home_possession


def test_end_of_game_between_play_away_ball():
    c = GameContext(home_score=52, away_score=34, half_seconds=28, quarter=4, down=3, distance=6,
                    yard_line=4, home_possession=False, home_positive_direction=False,
                    home_opening_kickoff=True, next_play_kickoff=False)
    nxt = c.next(BetweenPlayResult(duration=30))
    assert nxt.home_possession
    assert nxt.home_positive_direction
    assert nxt.end_of_half
    assert nxt.game_over
    assert nxt.yard_line == 35


def test_end_of_game_between_play_home_ball():
    c = GameContext(home_score=52, away_score=34, half_seconds=23, quarter=4, down=4, distance=2,
                    yard_line=96, home_possession=True, home_positive_direction=True,
                    home_opening_kickoff=True, next_play_kickoff=False)
    nxt = c.next(BetweenPlayResult(duration=30))
    assert nxt.down == 0
    assert nxt.home_possession
    assert not nxt.home_positive_direction
    assert nxt.end_of_half
    assert nxt.yard_line == 65


@pytest.mark.parametrize("kw", [
    dict(down=5),
    dict(quarter=2, half_seconds=1000),
    dict(quarter=1, half_seconds=800),
    dict(half_seconds=2000),
    dict(home_team_short="TOOLONG"),
    dict(next_play_extra_point=True),
    dict(last_play_incomplete=True, last_play_out_of_bounds=True),
    dict(game_over=True),
    dict(home_timeouts=4),
])
def test_invalid_contexts(kw):
    with pytest.raises(ContextValidationError):
        GameContext(**kw)


def test_distance_cannot_exceed_goal_line():
    with pytest.raises(ValueError):
        scrimmage(yard_line=95, distance=10)


def test_yards_to_goal_follow_direction():
    c = scrimmage(yard_line=30)
    assert c.yards_to_touchdown() == 70 and c.yards_to_safety() == -30
    flipped = scrimmage(yard_line=30, home_possession=False)
    assert flipped.yards_to_touchdown() == 30 and flipped.yards_to_safety() == -70


def test_touchdown_then_extra_point():
    c = scrimmage(yard_line=90)
    after_td = c.next(RunResult(yards_gained=10, play_duration=5, touchdown=True))
    assert after_td.home_score == 6
    assert after_td.next_play_extra_point and not after_td.next_play_kickoff
    assert after_td.down == 0 and after_td.distance == 2
    assert after_td.yards_to_touchdown() == 2
    assert after_td.home_possession

    # a pending try does not move the clock between plays
    assert after_td.next(BetweenPlayResult(duration=30)) is after_td

    after_xp = after_td.next(FieldGoalResult(field_goal_distance=19, extra_point=True))
    assert after_xp.home_score == 7
    assert after_xp.next_play_kickoff and not after_xp.next_play_extra_point
    assert after_xp.yard_line == 35 and after_xp.home_possession


def test_safety_scores_for_defense():
    c = scrimmage(yard_line=5)
    nxt = c.next(RunResult(yards_gained=-5, play_duration=4, safety=True))
    assert nxt.away_score == 2
    assert nxt.next_play_kickoff
    assert nxt.home_possession
    assert nxt.yard_line == 35


def test_quarter_change_mirrors_the_field():
    c = scrimmage(half_seconds=905, yard_line=40)
    nxt = c.next(RunResult(yards_gained=3, play_duration=10))
    assert nxt.quarter == 2 and nxt.half_seconds == 900
    assert not nxt.home_positive_direction
    assert nxt.yard_line == 57
    assert nxt.yards_to_touchdown() == 57
    assert nxt.down == 2 and nxt.distance == 7


def test_turnover_on_downs():
    c = scrimmage(down=4, distance=5, yard_line=50)
    nxt = c.next(RunResult(yards_gained=2, play_duration=5))
    assert not nxt.home_possession
    assert nxt.down == 1 and nxt.distance == 10
    assert nxt.yards_to_touchdown() == 52


def test_first_down_resets_distance():
    nxt = scrimmage().next(RunResult(yards_gained=12, play_duration=5))
    assert nxt.down == 1 and nxt.distance == 10 and nxt.yard_line == 37


def test_clock_saturates_at_zero():
    c = scrimmage(quarter=2, half_seconds=3)
    nxt = c.next(RunResult(yards_gained=2, play_duration=8))
    assert nxt.half_seconds == 0
    assert nxt.end_of_half and nxt.next_play_kickoff


def test_timeouts_charged_to_the_caller():
    c = scrimmage(home_possession=False, yard_line=60)
    nxt = c.next(BetweenPlayResult(offense_timeout=True))
    assert nxt.away_timeouts == 2 and nxt.home_timeouts == 3
    nxt = c.next(BetweenPlayResult(defense_timeout=True))
    assert nxt.home_timeouts == 2 and nxt.away_timeouts == 3


def test_clock_running_flags():
    assert scrimmage().clock_running()
    assert not scrimmage(last_play_incomplete=True).clock_running()
    assert not GameContext().clock_running()


def test_finished_game_display():
    c = GameContext(quarter=4, half_seconds=0, home_score=7, game_over=True, next_play_kickoff=True)
    assert str(c) == "[FINAL 4Q] (HOME 7 - AWAY 0)"
    assert str(GameContext(quarter=5, half_seconds=0, away_score=3, game_over=True)) == "[FINAL 1OT] (HOME 0 - AWAY 3)"


def test_next_rejects_non_results():
    with pytest.raises(TypeError):
        GameContext().next("run")


def test_next_half_seconds_runs_the_clock():
    assert GameContext().next_half_seconds(UpdateOptions(duration=10)) == 1790
    assert scrimmage(half_seconds=905).next_half_seconds(UpdateOptions(duration=10)) == 900


def test_next_scores_credit_the_right_side():
    c = scrimmage(yard_line=80)
    td = UpdateOptions(off_score=ScoreResult.TOUCHDOWN)
    assert c.next_home_score(td) == 6 and c.next_away_score(td) == 0

    safety = UpdateOptions(def_score=ScoreResult.SAFETY)
    assert scrimmage(yard_line=2).next_away_score(safety) == 2
    assert scrimmage(yard_line=2).next_home_score(safety) == 0


def test_next_down_and_possession():
    c = scrimmage(down=2, distance=5, yard_line=40)
    assert c.next_down(UpdateOptions(net_yards=6)) == 1
    assert c.next_down(UpdateOptions(net_yards=2)) == 3
    assert c.next_home_possession(UpdateOptions(net_yards=2))

    fourth = scrimmage(down=4, distance=5, yard_line=40)
    assert fourth.next_down(UpdateOptions(net_yards=2)) == 1
    assert not fourth.next_home_possession(UpdateOptions(net_yards=2))


def test_same_result_folds_to_the_same_context():
    c = scrimmage(down=3, distance=7, yard_line=48, home_score=10, away_score=3)
    res = PassResult(play_duration=6, pass_dist=10, yards_after_catch=4, complete=True)
    a, b = c.next(res), c.next(res)
    assert a == b
    assert a.next(BetweenPlayResult(duration=30)) == b.next(BetweenPlayResult(duration=30))
