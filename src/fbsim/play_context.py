from __future__ import annotations
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fbsim.constants import (QUARTER_SECONDS, LATE_GAME_S, LAST_PLAY_S, MAX_DOWN, MAX_TIMEOUTS,
                             MIDFIELD, MAX_YARDLINE, FIELD_GOAL_RANGE_YARD, GO_FOR_IT_MAX_DISTANCE,
                             GO_FOR_IT_RED_ZONE_YARD, GO_FOR_IT_MIDFIELD_BAND, SECONDS_PER_SNAP,
                             SECONDS_PER_SCORE, POINTS_PER_POSSESSION)
from fbsim.outcomes.distributions import rounded

if TYPE_CHECKING:
    from fbsim.state import GameContext

# Late-game deficits (offense perspective) where going for two beats kicking
TWO_POINT_DEFICITS = frozenset({-2, -5, -9, -10, -13, -16, -17})
TWO_POINT_LEADS = frozenset({1, 4, 5, 12, 15, 19})


@dataclass(frozen=True, slots=True)
class PlayContext:
    """Game situation as seen from the offense, for play-calling decisions.

    `yard_line` counts from the offense's own goal line and `score_diff` is
    offense minus defense, so thresholds read the same for either team.
    """
    quarter: int
    half_seconds: int
    down: int
    distance: int
    yard_line: int
    score_diff: int
    off_timeouts: int
    def_timeouts: int
    clock_running: bool
    next_play_extra_point: bool = False
    next_play_kickoff: bool = False

    @classmethod
    def from_game_context(cls, ctx: GameContext) -> PlayContext:
        if ctx.home_possession:
            diff = ctx.home_score - ctx.away_score
        else:
            diff = ctx.away_score - ctx.home_score
        return cls(
            quarter=ctx.quarter,
            half_seconds=ctx.half_seconds,
            down=ctx.down,
            distance=ctx.distance,
            yard_line=MAX_YARDLINE - ctx.yards_to_touchdown(),
            score_diff=diff,
            off_timeouts=ctx.offense_timeouts(),
            def_timeouts=ctx.defense_timeouts(),
            clock_running=ctx.clock_running(),
            next_play_extra_point=ctx.next_play_extra_point,
            next_play_kickoff=ctx.next_play_kickoff,
        )

    def _late(self) -> bool:
        return self.quarter >= 4 and self.half_seconds <= LATE_GAME_S

    def drain_clock(self) -> bool:
        """Leading late enough that every snap should burn the play clock."""
        if self.score_diff <= 0:
            return False
        threshold = int(self.score_diff / POINTS_PER_POSSESSION * 4 * 60)
        return self.quarter >= 4 and self.half_seconds < threshold

    def up_tempo(self) -> bool:
        return self._late() and -17 <= self.score_diff < 0

    def critical_down(self) -> bool:
        return self.down == 3 and self.half_seconds <= LATE_GAME_S and -9 < self.score_diff < 9

    def offense_conserve_clock(self) -> bool:
        return self._late() and -18 < self.score_diff < 0

    def defense_conserve_clock(self) -> bool:
        return self._late() and 0 < self.score_diff < 18

    def last_play(self) -> bool:
        return self.half_seconds < LAST_PLAY_S

    def last_play_need_td(self) -> bool:
        return self.score_diff < -3

    def can_kneel(self) -> bool:
        runoff = SECONDS_PER_SNAP * max(0, (MAX_DOWN - self.down) - self.def_timeouts)
        return runoff >= self.half_seconds

    def must_score(self) -> bool:
        """Trailing with too little time left to expect another possession."""
        if self.score_diff >= 0:
            return False
        timeout_drive_time = SECONDS_PER_SNAP * (MAX_TIMEOUTS - self.off_timeouts) + SECONDS_PER_SCORE
        if self.half_seconds <= timeout_drive_time:
            return True
        drive_time = SECONDS_PER_SNAP * MAX_TIMEOUTS + SECONDS_PER_SCORE
        drives = 1 + math.ceil((self.half_seconds - timeout_drive_time) / drive_time)
        scores_needed = rounded(abs(self.score_diff) / POINTS_PER_POSSESSION)
        return drives <= scores_needed

    def can_go_for_it(self) -> bool:
        lo, hi = GO_FOR_IT_MIDFIELD_BAND
        return self.distance <= GO_FOR_IT_MAX_DISTANCE and (
            self.yard_line >= GO_FOR_IT_RED_ZONE_YARD or lo <= self.yard_line <= hi
        )

    def in_field_goal_range(self) -> bool:
        return self.yard_line >= FIELD_GOAL_RANGE_YARD

    def two_point_conversion(self) -> bool:
        """Go for two after a touchdown, using a late-game chart.

        `score_diff` already includes the touchdown's six points.
        """
        if not self.next_play_extra_point:
            return False
        if self.quarter < 4 or self.half_seconds > QUARTER_SECONDS:
            return False
        return self.score_diff in TWO_POINT_DEFICITS or self.score_diff in TWO_POINT_LEADS

    def __str__(self) -> str:
        clock = self.half_seconds - QUARTER_SECONDS if self.half_seconds >= QUARTER_SECONDS else self.half_seconds
        mins, secs = divmod(clock, 60)
        quarter = f"{self.quarter}Q" if self.quarter <= 4 else f"{self.quarter - 4}OT"
        if self.next_play_kickoff:
            situation = "Kickoff"
        elif self.next_play_extra_point:
            situation = "PAT"
        else:
            suffix = {1: "st", 2: "nd", 3: "rd"}.get(self.down, "th")
            to_go = "goal" if self.yard_line + self.distance >= MAX_YARDLINE else str(self.distance)
            situation = f"{self.down}{suffix} & {to_go}"
        if self.yard_line < MIDFIELD:
            spot = f"OWN {self.yard_line}"
        else:
            spot = f"OPP {MAX_YARDLINE - self.yard_line}"
        return f"[{mins}:{secs:02d} {quarter}] {situation} at {spot}"
