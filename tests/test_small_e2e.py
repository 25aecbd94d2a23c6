import numpy as np
import pytest

from fbsim.config import FullConfig
from fbsim.outcomes.betweenplay import BetweenPlayResult
from fbsim.outcomes.kickoff import KickoffResult
from fbsim.outcomes.run import RunResult
from fbsim.simulate import (Drive, DriveAlreadyCompleteError, DriveSimulator, GameOverError, GameSimulator,
                            Play, kickoff_context)
from fbsim.state import GameContext
from fbsim.team import Team
from fbsim.vocab import DriveResult, PlayCall

HOME = Team.from_overalls("Home", "HOME", 55, 50)
AWAY = Team.from_overalls("Away", "AWAY", 50, 55)


def play_game(seed):
    rng = np.random.default_rng(seed)
    sim = GameSimulator.from_config(FullConfig())
    return sim.sim(HOME, AWAY, kickoff_context(HOME, AWAY), rng)


def test_opening_kickoff_context():
    ctx = kickoff_context(HOME, AWAY)
    assert not ctx.home_possession and ctx.yard_line == 65
    assert ctx.yards_to_touchdown() == 65
    away_receives = kickoff_context(HOME, AWAY, home_opening_kickoff=False)
    assert away_receives.home_possession and away_receives.yard_line == 35


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_full_game_invariants(seed):
    game, final = play_game(seed)
    assert game.complete and final.game_over
    assert final.quarter >= 4 and final.half_seconds == 0
    assert final.home_score != final.away_score

    plays = list(game.plays())
    assert plays[0].call == PlayCall.KICKOFF
    assert all(d.complete for d in game.drives)
    assert all(d.result != DriveResult.NONE for d in game.drives[:-1])

    # scores only ever move forward and are explained by the plays
    home = away = 0
    for p in plays:
        assert p.context.home_score >= home and p.context.away_score >= away
        home, away = p.context.home_score, p.context.away_score
        for res in (p.result, p.post_play):
            pts_off, pts_def = res.offense_score.points(), res.defense_score.points()
            if p.context.home_possession:
                home, away = home + pts_off, away + pts_def
            else:
                home, away = home + pts_def, away + pts_off
    assert (home, away) == (final.home_score, final.away_score)

    # the clock never runs backwards within a half
    for a, b in zip(plays, plays[1:]):
        if a.context.quarter == b.context.quarter and not a.context.end_of_half:
            assert b.context.half_seconds <= a.context.half_seconds

    # the log replays snap and between-play folds back into the same game
    log = game.log()
    assert len(log) == 2 * len(plays)
    assert isinstance(log[0][0], GameContext) and isinstance(log[1][1], BetweenPlayResult)
    for (ctx, res), (nxt, _) in zip(log, log[1:]):
        assert ctx.next(res) == nxt
    last_ctx, last_res = log[-1]
    assert last_ctx.next(last_res) == final

    assert str(final).startswith("[FINAL ")
    assert "Kickoff" not in str(final)


def test_same_seed_same_game():
    _, a = play_game(7)
    _, b = play_game(7)
    assert (a.home_score, a.away_score, a.quarter) == (b.home_score, b.away_score, b.quarter)


def test_stats_are_split_by_side():
    game, _ = play_game(3)
    home, away = game.home_stats(), game.away_stats()
    assert home.passing.attempts > 0 and away.passing.attempts > 0
    assert home.rushing.rushes > 0 and away.rushing.rushes > 0
    assert game.rushing_stats(True).rushes == home.rushing.rushes
    assert "Passing:" in str(home)


def test_simulating_past_the_end_raises():
    game, final = play_game(4)
    sim = GameSimulator()
    with pytest.raises(GameOverError):
        sim.sim_play(HOME, AWAY, final, game, np.random.default_rng(0))
    with pytest.raises(GameOverError):
        sim.sim_drive(HOME, AWAY, final, game, np.random.default_rng(0))
    with pytest.raises(GameOverError):
        sim.sim_game(HOME, AWAY, final, game, np.random.default_rng(0))


def test_play_budget():
    sim = GameSimulator(max_plays=5)
    with pytest.raises(RuntimeError):
        sim.sim(HOME, AWAY, kickoff_context(HOME, AWAY), np.random.default_rng(0))


def test_complete_drive_rejects_more_plays():
    drive = Drive(result=DriveResult.PUNT, complete=True)
    with pytest.raises(DriveAlreadyCompleteError):
        DriveSimulator().sim_play(HOME, AWAY, GameContext(), drive, np.random.default_rng(0))


def test_drive_ends_on_a_punt_or_score():
    rng = np.random.default_rng(5)
    ctx = GameContext(down=1, distance=10, yard_line=25, next_play_kickoff=False)
    drive, _ = DriveSimulator().sim(HOME, AWAY, ctx, rng)
    assert drive.complete
    assert drive.result != DriveResult.NONE
    assert str(drive).startswith(f"{len(drive.plays)} plays")


def test_classify_end_of_half():
    ctx = GameContext(quarter=2, half_seconds=3, down=1, distance=10, yard_line=50, next_play_kickoff=False)
    after = GameContext(quarter=3, down=0, yard_line=65, home_positive_direction=False)
    play = Play(context=ctx, call=PlayCall.RUN, result=RunResult(yards_gained=2, play_duration=6),
                post_play=BetweenPlayResult())
    assert DriveSimulator.classify(play, after) == (DriveResult.END_OF_HALF, True)


def test_classify_touchdown_waits_for_the_try():
    ctx = GameContext()
    play = Play(context=ctx, call=PlayCall.KICKOFF,
                result=KickoffResult(kickoff_yards=65, kick_return_yards=100, play_duration=12,
                                     touchback=False, touchdown=True),
                post_play=BetweenPlayResult())
    after = ctx.next(play.result)
    assert DriveSimulator.classify(play, after) == (DriveResult.TOUCHDOWN, False)
