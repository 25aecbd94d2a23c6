from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from fbsim.constants import TOUCHBACK_YARD_LINE
from fbsim.outcomes.fieldgoal import FieldGoalResult
from fbsim.outcomes.passing import PassResult
from fbsim.outcomes.punt import PuntResult
from fbsim.outcomes.result import PlayResult
from fbsim.outcomes.run import RunResult
from fbsim.score import ScoreResult


@dataclass(slots=True)
class RushingStats:
    rushes: int = 0
    yards: int = 0
    touchdowns: int = 0
    fumbles: int = 0

    def add(self, yards: int, touchdown: bool, fumble: bool) -> None:
        self.rushes += 1
        self.yards += yards
        self.touchdowns += int(touchdown)
        self.fumbles += int(fumble)

    def __str__(self) -> str:
        s = f"{self.rushes} rush, {self.yards} yards"
        if self.touchdowns > 0:
            s += f", {self.touchdowns} TD"
        if self.fumbles > 0:
            s += f", {self.fumbles} FUM"
        return s


@dataclass(slots=True)
class PassingStats:
    attempts: int = 0
    completions: int = 0
    yards: int = 0
    touchdowns: int = 0
    interceptions: int = 0

    def __str__(self) -> str:
        s = f"{self.completions}/{self.attempts}, {self.yards} yards"
        if self.touchdowns > 0:
            s += f", {self.touchdowns} TD"
        if self.interceptions > 0:
            s += f", {self.interceptions} INT"
        return s


@dataclass(slots=True)
class ReceivingStats:
    targets: int = 0
    receptions: int = 0
    yards: int = 0
    touchdowns: int = 0
    fumbles: int = 0

    def __str__(self) -> str:
        s = f"{self.receptions} rec ({self.targets} tar), {self.yards} yards"
        if self.touchdowns > 0:
            s += f", {self.touchdowns} TD"
        if self.fumbles > 0:
            s += f", {self.fumbles} FUM"
        return s


@dataclass(slots=True)
class KickingStats:
    field_goals: int = 0
    field_goals_made: int = 0
    long: int = 0
    extra_points: int = 0
    extra_points_made: int = 0
    blocked: int = 0

    def __str__(self) -> str:
        s = f"FG {self.field_goals_made}/{self.field_goals}"
        if self.field_goals_made > 0:
            s += f" (long {self.long})"
        s += f", XP {self.extra_points_made}/{self.extra_points}"
        if self.blocked > 0:
            s += f", {self.blocked} BLK"
        return s


@dataclass(slots=True)
class PuntingStats:
    punts: int = 0
    yards: int = 0
    net_yards: int = 0
    touchbacks: int = 0
    blocked: int = 0

    def average(self) -> float:
        return self.yards / self.punts if self.punts else 0.0

    def __str__(self) -> str:
        s = f"{self.punts} punts, {self.yards} yards"
        if self.punts > 0:
            s += f" ({self.average():.1f} avg, {self.net_yards / self.punts:.1f} net)"
        if self.touchbacks > 0:
            s += f", {self.touchbacks} TB"
        if self.blocked > 0:
            s += f", {self.blocked} BLK"
        return s


@dataclass(slots=True)
class OffensiveStats:
    passing: PassingStats = field(default_factory=PassingStats)
    rushing: RushingStats = field(default_factory=RushingStats)
    receiving: ReceivingStats = field(default_factory=ReceivingStats)

    def __str__(self) -> str:
        return f"Passing: {self.passing} | Rushing: {self.rushing} | Receiving: {self.receiving}"


def _offense_td(res: PlayResult) -> bool:
    return res.offense_score == ScoreResult.TOUCHDOWN


# Two-point tries and kneels never count toward the box score.

def rushing_stats(results: Iterable[PlayResult]) -> RushingStats:
    stats = RushingStats()
    for res in results:
        if isinstance(res, RunResult):
            if res.two_point_conversion or res.kneel:
                continue
            stats.add(res.net_yards, _offense_td(res), res.fumble)
        elif isinstance(res, PassResult) and res.scramble and not res.two_point_conversion:
            stats.add(res.net_yards, _offense_td(res), res.fumble)
    return stats


def passing_stats(results: Iterable[PlayResult]) -> PassingStats:
    stats = PassingStats()
    for res in results:
        if not isinstance(res, PassResult) or res.two_point_conversion:
            continue
        if not (res.scramble or res.sack):
            stats.attempts += 1
        if res.complete:
            stats.completions += 1
            stats.yards += res.net_yards
            stats.touchdowns += int(_offense_td(res))
        elif res.sack:
            stats.yards += res.net_yards
        stats.interceptions += int(res.interception)
    return stats


def receiving_stats(results: Iterable[PlayResult]) -> ReceivingStats:
    stats = ReceivingStats()
    for res in results:
        if not isinstance(res, PassResult) or res.two_point_conversion:
            continue
        if not (res.scramble or res.sack):
            stats.targets += 1
        if res.complete:
            stats.receptions += 1
            stats.yards += res.net_yards
            stats.touchdowns += int(_offense_td(res))
            stats.fumbles += int(res.fumble)
    return stats


def offensive_stats(results: Iterable[PlayResult]) -> OffensiveStats:
    results = list(results)
    return OffensiveStats(
        passing=passing_stats(results),
        rushing=rushing_stats(results),
        receiving=receiving_stats(results),
    )


def kicking_stats(results: Iterable[PlayResult]) -> KickingStats:
    stats = KickingStats()
    for res in results:
        if not isinstance(res, FieldGoalResult):
            continue
        stats.blocked += int(res.blocked)
        if res.extra_point:
            stats.extra_points += 1
            stats.extra_points_made += int(res.made)
            continue
        stats.field_goals += 1
        if res.made:
            stats.field_goals_made += 1
            stats.long = max(stats.long, res.field_goal_distance)
    return stats


def punting_stats(results: Iterable[PlayResult]) -> PuntingStats:
    """Gross yards exclude blocked punts. Net yards take off the return and the touchback spot."""
    stats = PuntingStats()
    for res in results:
        if not isinstance(res, PuntResult):
            continue
        stats.punts += 1
        stats.blocked += int(res.blocked)
        stats.touchbacks += int(res.touchback)
        if not res.blocked:
            stats.yards += res.punt_yards
            stats.net_yards += res.punt_yards - res.punt_return_yards
            if res.touchback:
                stats.net_yards -= TOUCHBACK_YARD_LINE
    return stats
