import numpy as np
import pandas as pd

from fbsim.eval.report import (DRIVE_RESULT_ORDER, drive_frame, drive_result_share, play_log_frame, play_type_share,
                               plot_margin_hist, situational_pass_rates, stats, summarize_games, write_report)
from fbsim.eval.stats import (KickingStats, PassingStats, PuntingStats, RushingStats, kicking_stats, offensive_stats,
                              passing_stats, punting_stats, rushing_stats)
from fbsim.outcomes.fieldgoal import FieldGoalResult
from fbsim.outcomes.passing import PassResult
from fbsim.outcomes.punt import PuntResult
from fbsim.outcomes.run import RunResult
from fbsim.simulate import GameSimulator, kickoff_context
from fbsim.team import Team

HOME = Team.from_overalls("Home", "HOME", 50, 50)
AWAY = Team.from_overalls("Away", "AWAY", 50, 50)


def test_stat_tallies():
    results = [
        RunResult(yards_gained=5, play_duration=5),
        RunResult(yards_gained=20, play_duration=7, touchdown=True),
        RunResult(yards_gained=2, touchdown=True, two_point_conversion=True),
        RunResult(yards_gained=-1, play_duration=2, kneel=True),
        PassResult(play_duration=6, pass_dist=10, yards_after_catch=4, complete=True),
        PassResult(play_duration=5, pass_dist=22),
        PassResult(play_duration=5, pressure=True, sack=True, sack_yards_lost=6),
        PassResult(play_duration=6, pressure=True, scramble=True, scramble_yards=8),
        PassResult(play_duration=6, pass_dist=30, interception=True),
    ]
    rush = rushing_stats(results)
    assert (rush.rushes, rush.yards, rush.touchdowns) == (3, 33, 1)
    assert str(rush) == "3 rush, 33 yards, 1 TD"

    passing = passing_stats(results)
    assert (passing.attempts, passing.completions, passing.yards, passing.interceptions) == (3, 1, 8, 1)
    assert str(passing) == "1/3, 8 yards, 1 INT"

    off = offensive_stats(results)
    assert off.receiving.targets == 3 and off.receiving.receptions == 1 and off.receiving.yards == 14
    assert str(off).startswith("Passing: 1/3")


def test_special_teams_tallies():
    results = [
        FieldGoalResult(field_goal_distance=42, play_duration=5),
        FieldGoalResult(field_goal_distance=50, made=False, play_duration=5),
        FieldGoalResult(field_goal_distance=19, extra_point=True),
        FieldGoalResult(field_goal_distance=19, extra_point=True, made=False, blocked=True),
        PuntResult(punt_yards=45, punt_return_yards=8, play_duration=8),
        PuntResult(punt_yards=30, touchback=True, play_duration=6),
        PuntResult(blocked=True, play_duration=3),
        RunResult(yards_gained=4, play_duration=5),
    ]
    kicking = kicking_stats(results)
    assert (kicking.field_goals, kicking.field_goals_made, kicking.long) == (2, 1, 42)
    assert (kicking.extra_points, kicking.extra_points_made, kicking.blocked) == (2, 1, 1)
    assert str(kicking) == "FG 1/2 (long 42), XP 1/2, 1 BLK"

    punting = punting_stats(results)
    assert (punting.punts, punting.yards, punting.touchbacks, punting.blocked) == (3, 75, 1, 1)
    # the touchback is charged back to the 25
    assert punting.net_yards == 42
    assert str(punting) == "3 punts, 75 yards (25.0 avg, 14.0 net), 1 TB, 1 BLK"


def test_empty_stats_display():
    assert str(RushingStats()) == "0 rush, 0 yards"
    assert str(PassingStats()) == "0/0, 0 yards"
    assert str(KickingStats()) == "FG 0/0, XP 0/0"
    assert str(PuntingStats()) == "0 punts, 0 yards"


def test_report_frames(tmp_path):
    rng = np.random.default_rng(11)
    sim = GameSimulator()
    frames, finals = [], []
    for g in range(3):
        game, final = sim.sim(HOME, AWAY, kickoff_context(HOME, AWAY), rng)
        frames.append(play_log_frame(game, game_id=g))
        finals.append(final)

    plays = frames[0]
    assert {"qtr", "down", "ydstogo", "yardline_100", "play_type", "summary"} <= set(plays.columns)
    assert plays["play_type"].iloc[0] == "kickoff"
    assert plays["yardline_100"].between(0, 100).all()

    share = play_type_share(plays)
    assert abs(share.sum() - 1.0) < 0.01

    summary = summarize_games(finals)
    assert len(summary) == 3
    assert (summary["total"] == summary["score_home"] + summary["score_away"]).all()
    assert (summary["winner"] != "TIE").all()
    assert stats(summary["total"])["n"] == 3

    png = plot_margin_hist(summary, tmp_path / "margin.png")
    assert png.exists()


def test_summarize_no_games():
    assert len(summarize_games([])) == 0


def test_drive_frame_and_markdown_report(tmp_path):
    rng = np.random.default_rng(23)
    sim = GameSimulator()
    plays, drives, finals = [], [], []
    for g in range(3):
        game, final = sim.sim(HOME, AWAY, kickoff_context(HOME, AWAY), rng)
        plays.append(play_log_frame(game, game_id=g))
        drives.append(drive_frame(game, game_id=g))
        finals.append(final)

        d = drives[-1]
        assert len(d) == len(game.drives)
        assert d["points_home"].sum() == final.home_score and d["points_away"].sum() == final.away_score
        assert set(d["offense"]) <= {"HOME", "AWAY"}
        assert (d["snaps"] >= 0).all() and (d["seconds"] >= 0).all()
        assert game.kicking_stats(True).extra_points + game.kicking_stats(False).extra_points <= len(d)

    plays = pd.concat(plays, ignore_index=True)
    drives = pd.concat(drives, ignore_index=True)
    summary = summarize_games(finals)

    share = drive_result_share(drives)
    assert list(share.index) == DRIVE_RESULT_ORDER
    assert 0.9 <= share.sum() <= 1.01

    rates = situational_pass_rates(plays)
    assert list(rates["situation"]) == ["1st & 10", "2nd & 7+", "3rd & 1-3", "3rd & 7+"]
    assert rates["pass_rate"].dropna().between(0, 1).all()
    assert rates.loc[0, "plays"] > 0

    md = write_report(tmp_path / "report.md", plays, drives, summary)
    text = md.read_text()
    assert text.startswith("# Simulation Report")
    assert "## Drive results" in text and "## Situational pass rates" in text
    assert (tmp_path / "yards_hist.png").exists() and (tmp_path / "margin_hist.png").exists()
