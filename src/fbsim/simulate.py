from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from fbsim.calling.playcall import PlayCallSimulator
from fbsim.config import FullConfig
from fbsim.constants import HOME_FIELD_BONUS, KICKOFF_YARD_LINE, MAX_DOWN, MAX_YARDLINE
from fbsim.eval.stats import (KickingStats, OffensiveStats, PassingStats, PuntingStats, ReceivingStats, RushingStats,
                              kicking_stats, offensive_stats, passing_stats, punting_stats, receiving_stats,
                              rushing_stats)
from fbsim.outcomes.betweenplay import BetweenPlayResult, BetweenPlayResultSimulator
from fbsim.outcomes.fieldgoal import FieldGoalResult, FieldGoalResultSimulator
from fbsim.outcomes.kickoff import KickoffResultSimulator
from fbsim.outcomes.passing import PassResult, PassResultSimulator
from fbsim.outcomes.punt import PuntResult, PuntResultSimulator
from fbsim.outcomes.result import PlayResult
from fbsim.outcomes.run import RunResult, RunResultSimulator
from fbsim.rules.fsm import RulesFSM
from fbsim.score import ScoreResult
from fbsim.state import GameContext
from fbsim.team import Team
from fbsim.vocab import DriveResult, PlayCall

logger = logging.getLogger(__name__)

_TOUCHDOWN_RESULTS = (DriveResult.TOUCHDOWN, DriveResult.PICK_SIX, DriveResult.SCOOP_AND_SCORE)


class GameOverError(RuntimeError):
    """Raised when asked to simulate past the end of a game."""


class DriveAlreadyCompleteError(RuntimeError):
    """Raised when asked to add a play to a finished drive."""


def kickoff_context(home: Team, away: Team, *, home_opening_kickoff: bool = True,
                    neutral_site: bool = False) -> GameContext:
    """Context for the opening kickoff.

    `home_opening_kickoff` means the home team receives the opening kickoff
    and so kicks off the second half; the away team kicks first.
    """
    home_possession = not home_opening_kickoff
    return GameContext(
        home_team_short=home.short_name,
        away_team_short=away.short_name,
        # home moves toward 100, so the away kicker's 35 is the 65
        yard_line=KICKOFF_YARD_LINE if home_possession else MAX_YARDLINE - KICKOFF_YARD_LINE,
        home_positive_direction=True,
        home_opening_kickoff=home_opening_kickoff,
        home_possession=home_possession,
        neutral_site=neutral_site,
    )


@dataclass(frozen=True, slots=True)
class Play:
    context: GameContext          # before the snap
    call: PlayCall
    result: PlayResult
    post_play: BetweenPlayResult

    def __str__(self) -> str:
        return f"{self.context} {self.result} {self.post_play}".strip()


@dataclass(slots=True)
class Drive:
    plays: list[Play] = field(default_factory=list)
    result: DriveResult = DriveResult.NONE
    complete: bool = False

    def results(self) -> list[PlayResult]:
        return [p.result for p in self.plays]

    def rushing_stats(self) -> RushingStats:
        return rushing_stats(self.results())

    def passing_stats(self) -> PassingStats:
        return passing_stats(self.results())

    def total_yards(self) -> int:
        return sum(r.net_yards for r in self.results() if isinstance(r, (RunResult, PassResult)))

    def __str__(self) -> str:
        lines = [f"{len(self.plays)} plays, {self.total_yards()} yards | Result: {self.result} | "
                 f"Passing: {self.passing_stats()} | Rushing: {self.rushing_stats()}"]
        lines.extend(str(p) for p in self.plays)
        return "\n".join(lines)


@dataclass(slots=True)
class Game:
    drives: list[Drive] = field(default_factory=list)
    complete: bool = False

    def plays(self) -> Iterator[Play]:
        for drive in self.drives:
            yield from drive.plays

    def log(self) -> list[tuple[GameContext, PlayResult]]:
        """Every fold of the game in order, the snap and then its between-play result.

        Each entry is the context the result was applied to, so replaying the
        log with `GameContext.next` reproduces the game.
        """
        entries = []
        for p in self.plays():
            entries.append((p.context, p.result))
            entries.append((p.context.next(p.result), p.post_play))
        return entries

    def _results(self, home: bool) -> list[PlayResult]:
        return [p.result for p in self.plays() if p.context.home_possession == home]

    def rushing_stats(self, home: bool) -> RushingStats:
        return rushing_stats(self._results(home))

    def passing_stats(self, home: bool) -> PassingStats:
        return passing_stats(self._results(home))

    def receiving_stats(self, home: bool) -> ReceivingStats:
        return receiving_stats(self._results(home))

    def kicking_stats(self, home: bool) -> KickingStats:
        return kicking_stats(self._results(home))

    def punting_stats(self, home: bool) -> PuntingStats:
        return punting_stats(self._results(home))

    def home_stats(self) -> OffensiveStats:
        return offensive_stats(self._results(True))

    def away_stats(self) -> OffensiveStats:
        return offensive_stats(self._results(False))

    def __str__(self) -> str:
        return "\n\n".join(str(d) for d in self.drives)


class PlaySimulator:
    def __init__(self, home_field_bonus: int = HOME_FIELD_BONUS, run_shift: float = 0.0,
                 fourth_down_aggr: float = 1.0, rules: RulesFSM | None = None):
        self.betweenplay = BetweenPlayResultSimulator(home_field_bonus)
        self.fieldgoal = FieldGoalResultSimulator(home_field_bonus)
        self.kickoff = KickoffResultSimulator(home_field_bonus)
        self.passing = PassResultSimulator(home_field_bonus)
        self.punt = PuntResultSimulator(home_field_bonus)
        self.run = RunResultSimulator(home_field_bonus)
        self.playcall = PlayCallSimulator(run_shift=run_shift, fourth_down_aggr=fourth_down_aggr)
        self.rules = rules or RulesFSM()

    @classmethod
    def from_config(cls, cfg: FullConfig) -> PlaySimulator:
        bonus = 0 if cfg.sim.neutral_site else cfg.sim.home_field_bonus
        return cls(home_field_bonus=bonus, run_shift=cfg.playcall.run_shift,
                   fourth_down_aggr=cfg.playcall.fourth_down_aggr)

    def result(self, call: PlayCall, offense: Team, defense: Team, context: GameContext,
               rng: np.random.Generator) -> PlayResult:
        match call:
            case PlayCall.RUN:
                return self.run.sim(offense, defense, context, rng)
            case PlayCall.PASS:
                return self.passing.sim(offense, defense, context, rng)
            case PlayCall.FIELD_GOAL | PlayCall.EXTRA_POINT:
                return self.fieldgoal.sim(offense, defense, context, rng)
            case PlayCall.PUNT:
                return self.punt.sim(offense, defense, context, rng)
            case PlayCall.KICKOFF:
                return self.kickoff.sim(offense, defense, context, rng)
            case PlayCall.QB_KNEEL:
                return self.run.kneel(context)
        raise ValueError(f"Unknown play call: {call}")

    def sim(self, home: Team, away: Team, context: GameContext,
            rng: np.random.Generator) -> tuple[Play, GameContext]:
        offense, defense = (home, away) if context.home_possession else (away, home)
        call = PlayCall.KICKOFF if context.next_play_kickoff else self.playcall.sim(context, offense.coach, rng)
        self.rules.check(context, call)

        result = self.result(call, offense, defense, context, rng)
        after_play = self.rules.apply_result(context, result)
        post_play = self.betweenplay.sim(offense, defense, after_play, rng)
        next_context = self.rules.apply_result(after_play, post_play)
        play = Play(context=context, call=call, result=result, post_play=post_play)
        logger.debug("%s", play)
        return play, next_context


class DriveSimulator:
    def __init__(self, play: PlaySimulator | None = None):
        self.play = play or PlaySimulator()

    @staticmethod
    def classify(play: Play, next_context: GameContext) -> tuple[DriveResult, bool]:
        """Drive result and completion after a play on a drive still in progress."""
        res = play.result
        prev = play.context
        result, complete = DriveResult.NONE, False

        if isinstance(res, FieldGoalResult) and not res.extra_point:
            if res.made:
                result, complete = DriveResult.FIELD_GOAL, True
            elif res.missed:
                result, complete = DriveResult.FIELD_GOAL_MISSED, True
        if isinstance(res, PuntResult):
            result, complete = DriveResult.PUNT, True

        touchdown = ScoreResult.TOUCHDOWN in (res.offense_score, res.defense_score)
        if touchdown:
            result, complete = DriveResult.TOUCHDOWN, False
        if res.defense_score == ScoreResult.SAFETY:
            result, complete = DriveResult.SAFETY, True

        if res.turnover:
            if isinstance(res, PassResult) and res.interception:
                result, complete = (DriveResult.PICK_SIX, False) if touchdown else (DriveResult.INTERCEPTION, True)
            fumble = ((isinstance(res, (RunResult, PassResult)) and res.fumble)
                      or (isinstance(res, FieldGoalResult) and res.blocked))
            if fumble:
                result, complete = (DriveResult.SCOOP_AND_SCORE, False) if touchdown else (DriveResult.FUMBLE, True)

        downs = (prev.down == MAX_DOWN and next_context.down == 1 and not res.turnover
                 and prev.home_possession != next_context.home_possession
                 and res.net_yards < prev.distance)
        if downs:
            result, complete = DriveResult.DOWNS, True

        half_over = ((prev.quarter == 2 or prev.quarter >= 4) and prev.quarter != next_context.quarter)
        if result == DriveResult.NONE and (half_over or next_context.game_over):
            result, complete = DriveResult.END_OF_HALF, True
        if next_context.game_over:
            complete = True
        return result, complete

    def sim_play(self, home: Team, away: Team, context: GameContext, drive: Drive,
                 rng: np.random.Generator) -> GameContext:
        if drive.complete:
            raise DriveAlreadyCompleteError(f"Drive is already complete: {drive.result}")
        if drive.result not in (DriveResult.NONE, *_TOUCHDOWN_RESULTS):
            raise DriveAlreadyCompleteError(f"Drive result is already {drive.result}")

        play, next_context = self.play.sim(home, away, context, rng)
        if drive.result in _TOUCHDOWN_RESULTS:
            # this was the try after the touchdown
            result, complete = drive.result, True
        else:
            result, complete = self.classify(play, next_context)
        drive.plays.append(play)
        drive.result = result
        drive.complete = complete
        if complete:
            logger.info("drive over: %s (%d plays)", result, len(drive.plays))
        return next_context

    def sim_drive(self, home: Team, away: Team, context: GameContext, drive: Drive,
                  rng: np.random.Generator) -> GameContext:
        if drive.complete:
            raise DriveAlreadyCompleteError(f"Drive is already complete: {drive.result}")
        while not (drive.complete or context.game_over):
            context = self.sim_play(home, away, context, drive, rng)
        return context

    def sim(self, home: Team, away: Team, context: GameContext,
            rng: np.random.Generator) -> tuple[Drive, GameContext]:
        drive = Drive()
        return drive, self.sim_drive(home, away, context, drive, rng)


class GameSimulator:
    """Drives the play loop until the game is over."""

    def __init__(self, drive: DriveSimulator | None = None, max_plays: int = 1_000):
        self.drive = drive or DriveSimulator()
        self.max_plays = max_plays

    @classmethod
    def from_config(cls, cfg: FullConfig) -> GameSimulator:
        return cls(DriveSimulator(PlaySimulator.from_config(cfg)), max_plays=cfg.sim.max_plays)

    @staticmethod
    def _current_drive(game: Game) -> Drive:
        if not game.drives or game.drives[-1].complete:
            game.drives.append(Drive())
        return game.drives[-1]

    def _check_budget(self, game: Game) -> None:
        n = sum(len(d.plays) for d in game.drives)
        if n >= self.max_plays:
            raise RuntimeError(f"Game exceeded {self.max_plays} plays without ending")

    def _finish(self, game: Game, context: GameContext) -> GameContext:
        if context.game_over:
            game.complete = True
            logger.info("final: %s %d - %s %d", context.home_team_short, context.home_score,
                        context.away_team_short, context.away_score)
        return context

    def sim_play(self, home: Team, away: Team, context: GameContext, game: Game,
                 rng: np.random.Generator) -> GameContext:
        if context.game_over:
            raise GameOverError("Game is already over, cannot simulate next play")
        self._check_budget(game)
        context = self.drive.sim_play(home, away, context, self._current_drive(game), rng)
        return self._finish(game, context)

    def sim_drive(self, home: Team, away: Team, context: GameContext, game: Game,
                  rng: np.random.Generator) -> GameContext:
        if context.game_over:
            raise GameOverError("Game is already over, cannot simulate next drive")
        drive = self._current_drive(game)
        while not (drive.complete or context.game_over):
            self._check_budget(game)
            context = self.drive.sim_play(home, away, context, drive, rng)
        return self._finish(game, context)

    def sim_game(self, home: Team, away: Team, context: GameContext, game: Game,
                 rng: np.random.Generator) -> GameContext:
        """Simulate the remainder of a game in progress."""
        if context.game_over:
            raise GameOverError("Game is already over, cannot simulate remainder of game")
        while not context.game_over:
            context = self.sim_drive(home, away, context, game, rng)
        return context

    def sim(self, home: Team, away: Team, context: GameContext,
            rng: np.random.Generator) -> tuple[Game, GameContext]:
        game = Game()
        return game, self.sim_game(home, away, context, game, rng)
