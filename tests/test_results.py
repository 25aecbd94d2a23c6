import pytest

from fbsim.outcomes.betweenplay import BetweenPlayResult
from fbsim.outcomes.fieldgoal import FieldGoalResult
from fbsim.outcomes.kickoff import KickoffResult
from fbsim.outcomes.passing import PassResult
from fbsim.outcomes.punt import PuntResult
from fbsim.outcomes.result import ValidationError, normalized_skill_diff
from fbsim.outcomes.run import RunResult
from fbsim.score import ScoreResult


def test_score_points():
    assert [s.points() for s in ScoreResult] == [0, 1, 2, 2, 3, 6]
    assert str(ScoreResult.TWO_POINT_CONVERSION) == "Two Point Conversion"


def test_normalized_skill_diff():
    assert normalized_skill_diff(50, 50) == 0.5
    assert normalized_skill_diff(100, 0) == 1.0
    assert normalized_skill_diff(0, 100) == 0.0
    with pytest.raises(ValidationError):
        normalized_skill_diff(150, 0)


def test_validation_error_is_value_error():
    assert issubclass(ValidationError, ValueError)


@pytest.mark.parametrize("build", [
    lambda: RunResult(return_yards=3),
    lambda: RunResult(touchdown=True, safety=True),
    lambda: RunResult(fumble=True, safety=True),
    lambda: RunResult(out_of_bounds=True, touchdown=True),
    lambda: RunResult(play_duration=101),
    lambda: PassResult(sack=True),
    lambda: PassResult(pressure=True, sack=True, complete=True),
    lambda: PassResult(scramble_yards=4),
    lambda: PassResult(interception=True, complete=True),
    lambda: PuntResult(blocked=True, out_of_bounds=True),
    lambda: PuntResult(touchback=True, fair_catch=True),
    lambda: PuntResult(muffed=True),
    lambda: PuntResult(fair_catch=True, punt_return_yards=5),
    lambda: PuntResult(fumble_return_yards=3),
    lambda: KickoffResult(touchback=True, fair_catch=True),
    lambda: KickoffResult(touchback=True, touchdown=True),
    lambda: KickoffResult(kick_return_yards=111),
    lambda: FieldGoalResult(made=True, blocked=True),
    lambda: FieldGoalResult(made=False, return_yards=4),
    lambda: BetweenPlayResult(offense_timeout=True, defense_timeout=True),
    lambda: BetweenPlayResult(duration=-1),
])
def test_invalid_results(build):
    with pytest.raises(ValidationError):
        build()


def test_run_fumble_returned_for_touchdown():
    r = RunResult(yards_gained=4, play_duration=6, fumble=True, return_yards=34, touchdown=True)
    assert r.net_yards == -30
    assert r.turnover
    assert r.offense_score == ScoreResult.NONE
    assert r.defense_score == ScoreResult.TOUCHDOWN
    assert r.next_play_extra_point


def test_two_point_conversion_run():
    r = RunResult(yards_gained=2, touchdown=True, two_point_conversion=True)
    assert r.offense_score == ScoreResult.TWO_POINT_CONVERSION
    assert r.next_play_kickoff and not r.next_play_extra_point
    assert r.summary() == "Rush 2 yards. Two point conversion is GOOD!"


def test_pass_net_yards_and_flags():
    c = PassResult(play_duration=6, pass_dist=12, yards_after_catch=5, complete=True)
    assert c.net_yards == 17 and not c.incomplete
    i = PassResult(play_duration=6, pass_dist=20)
    assert i.incomplete and i.net_yards == 0
    s = PassResult(play_duration=5, pressure=True, sack=True, sack_yards_lost=7)
    assert s.net_yards == -7 and not s.incomplete
    pick = PassResult(play_duration=7, pass_dist=15, interception=True, return_yards=10)
    assert pick.turnover and pick.net_yards == -10


def test_punt_net_and_possession():
    p = PuntResult(punt_yards=45, punt_return_yards=8, play_duration=9)
    assert p.net_yards == 37
    assert p.turnover and p.punt
    muff = PuntResult(punt_yards=40, muffed=True, fumble=True, fumble_return_yards=2, play_duration=7)
    assert muff.net_yards == 42
    assert not muff.turnover
    assert PuntResult(blocked=True).summary() == "Punt BLOCKED!"


def test_punt_return_touchdown_scores_for_receiving_team():
    p = PuntResult(punt_yards=50, punt_return_yards=80, touchdown=True, play_duration=12)
    assert p.defense_score == ScoreResult.TOUCHDOWN
    assert p.offense_score == ScoreResult.NONE
    assert p.next_play_extra_point


def test_kickoff_defaults_to_touchback():
    k = KickoffResult()
    assert k.touchback and k.kickoff and k.turnover
    assert k.net_yards == 65
    assert k.summary() == "Kickoff 65 yards for a touchback."
    assert str(KickoffResult(kickoff_yards=60, touchback=False, fair_catch=True)) == \
        "Kickoff 60 yards for a fair catch."


def test_field_goal_outcomes():
    good = FieldGoalResult(field_goal_distance=40, play_duration=5)
    assert good.offense_score == ScoreResult.FIELD_GOAL and good.next_play_kickoff
    assert str(good) == "40 yard field goal is good."

    miss = FieldGoalResult(field_goal_distance=45, play_duration=5, made=False)
    assert miss.missed and miss.turnover and not miss.next_play_kickoff
    assert str(miss) == "45 yard field goal NO GOOD."

    block = FieldGoalResult(field_goal_distance=30, made=False, blocked=True, return_yards=87,
                            touchdown=True, play_duration=14)
    assert block.defense_score == ScoreResult.TOUCHDOWN
    assert block.next_play_extra_point
    assert block.net_yards == -87
    assert str(block) == "30 yard field goal BLOCKED. Returned 87 yards, TOUCHDOWN!"


def test_extra_point_miss_is_not_a_turnover():
    xp = FieldGoalResult(field_goal_distance=19, made=False, extra_point=True)
    assert not xp.turnover and xp.next_play_kickoff
    assert str(xp) == "19 yard extra point NO GOOD."


def test_between_play_summary():
    assert BetweenPlayResult(duration=38).summary() == ""
    assert BetweenPlayResult(defense_timeout=True, critical_down=True).summary() == \
        "Defense calls timeout to make a playcall."
    assert BetweenPlayResult(duration=7, up_tempo=True).summary() == "Offense rushes to the line."
