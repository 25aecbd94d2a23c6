from __future__ import annotations
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from fbsim.constants import (HALF_SECONDS, QUARTER_SECONDS, OVERTIME_SECONDS, MAX_DOWN,
                             MAX_YARDLINE, MIN_YARDLINE, MAX_TIMEOUTS, FIRST_DOWN_YARDS,
                             KICKOFF_YARD_LINE, TOUCHBACK_YARD_LINE, EXTRA_POINT_YARD_LINE,
                             MAX_SHORT_NAME, TWO_MINUTE_WARNING_S, FIVE_MINUTE_WARNING_S)
from fbsim.score import ScoreResult

if TYPE_CHECKING:
    from fbsim.outcomes.betweenplay import BetweenPlayResult
    from fbsim.outcomes.result import PlayResult


class ContextValidationError(ValueError):
    """Raised when a GameContext is constructed in an impossible state."""


_ZERO_DOWN_SCORES = (ScoreResult.TOUCHDOWN, ScoreResult.FIELD_GOAL, ScoreResult.SAFETY)
_HOLD_POSSESSION_SCORES = (ScoreResult.TOUCHDOWN, ScoreResult.FIELD_GOAL,
                           ScoreResult.EXTRA_POINT, ScoreResult.TWO_POINT_CONVERSION)


@dataclass(frozen=True, slots=True)
class UpdateOptions:
    duration: int = 0
    net_yards: int = 0
    off_score: ScoreResult = ScoreResult.NONE
    def_score: ScoreResult = ScoreResult.NONE
    turnover: bool = False
    touchback: bool = False
    kickoff_oob: bool = False
    off_timeout: bool = False
    def_timeout: bool = False
    next_play_extra_point: bool = False
    between_play: bool = False
    end_of_game: bool = False

    @property
    def touchdown(self) -> bool:
        return ScoreResult.TOUCHDOWN in (self.off_score, self.def_score)


def _clamp_yard_line(yl: int) -> int:
    return max(MIN_YARDLINE, min(MAX_YARDLINE, yl))


@dataclass(frozen=True, slots=True)
class GameContext:
    home_team_short: str = "HOME"
    away_team_short: str = "AWAY"
    quarter: int = 1                    # 1..4, 5+ = overtime
    half_seconds: int = HALF_SECONDS    # 1800..0 per half, 600 in overtime
    down: int = 0                       # 0 = kickoff / extra point
    distance: int = FIRST_DOWN_YARDS
    yard_line: int = KICKOFF_YARD_LINE  # absolute, see yards_to_touchdown
    home_score: int = 0
    away_score: int = 0
    home_timeouts: int = MAX_TIMEOUTS
    away_timeouts: int = MAX_TIMEOUTS
    home_positive_direction: bool = True
    home_opening_kickoff: bool = True
    home_possession: bool = True
    last_play_turnover: bool = False
    last_play_incomplete: bool = False
    last_play_out_of_bounds: bool = False
    last_play_timeout: bool = False
    last_play_kickoff: bool = False
    last_play_punt: bool = False
    next_play_extra_point: bool = False
    next_play_kickoff: bool = True
    neutral_site: bool = False
    end_of_half: bool = False
    game_over: bool = False

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        def fail(msg: str) -> None:
            raise ContextValidationError(msg)

        for short in (self.home_team_short, self.away_team_short):
            if len(short) > MAX_SHORT_NAME:
                fail(f"Team short name is longer than {MAX_SHORT_NAME} characters: {short}")
        if self.quarter < 1:
            fail(f"Quarter must be at least 1: {self.quarter}")
        if not 0 <= self.half_seconds <= HALF_SECONDS:
            fail(f"Half seconds is out of range [0, {HALF_SECONDS}]: {self.half_seconds}")
        if self.quarter % 2 == 1 and self.quarter < 4 and self.half_seconds < QUARTER_SECONDS:
            fail(f"Half seconds must be at least {QUARTER_SECONDS} in quarter {self.quarter}: {self.half_seconds}")
        if (self.quarter % 2 == 0 or self.quarter > 4) and self.half_seconds > QUARTER_SECONDS:
            fail(f"Half seconds must be at most {QUARTER_SECONDS} in quarter {self.quarter}: {self.half_seconds}")
        if not 0 <= self.down <= MAX_DOWN:
            fail(f"Down is out of range [0, {MAX_DOWN}]: {self.down}")
        if not MIN_YARDLINE <= self.yard_line <= MAX_YARDLINE:
            fail(f"Yard line is out of range [0, 100]: {self.yard_line}")
        if self.distance < 0 or self.distance > self.yards_to_touchdown():
            fail(f"Distance {self.distance} exceeds yards to touchdown {self.yards_to_touchdown()}")
        for timeouts in (self.home_timeouts, self.away_timeouts):
            if not 0 <= timeouts <= MAX_TIMEOUTS:
                fail(f"Timeouts are out of range [0, {MAX_TIMEOUTS}]: {timeouts}")
        if min(self.home_score, self.away_score) < 0:
            fail("Scores must be non-negative")
        if self.last_play_incomplete and self.last_play_out_of_bounds:
            fail("Last play cannot be both incomplete and out of bounds")
        if self.last_play_timeout and (self.last_play_kickoff or self.last_play_punt):
            fail("Last play cannot be both a timeout and a kickoff or punt")
        if self.last_play_punt and self.last_play_kickoff:
            fail("Last play cannot be both a punt and a kickoff")
        if self.next_play_extra_point and self.next_play_kickoff:
            fail("Next play cannot be both an extra point and a kickoff")
        if self.end_of_half:
            if self.quarter == 1 or (self.quarter == 3 and self.half_seconds < HALF_SECONDS):
                fail(f"Cannot be end of half in quarter {self.quarter} with {self.half_seconds}s left")
            if self.half_seconds not in (0, OVERTIME_SECONDS, HALF_SECONDS):
                fail(f"End of half requires 0, 600 or 1800 half seconds: {self.half_seconds}")
        if self.game_over and not (self.quarter >= 4 and self.half_seconds == 0):
            fail(f"Game cannot be over in quarter {self.quarter} with {self.half_seconds}s left")

    # -- queries -----------------------------------------------------------

    @property
    def offense_flipped(self) -> bool:
        """True when the offense moves toward yard line 0."""
        return self.home_possession ^ self.home_positive_direction

    def started(self) -> bool:
        return (self.down > 0 or self.home_score > 0 or self.away_score > 0
                or self.quarter > 1 or self.half_seconds < HALF_SECONDS)

    def offense_timeouts(self) -> int:
        return self.home_timeouts if self.home_possession else self.away_timeouts

    def defense_timeouts(self) -> int:
        return self.away_timeouts if self.home_possession else self.home_timeouts

    def clock_running(self) -> bool:
        late_oob = self.last_play_out_of_bounds and (
            (self.quarter == 2 and self.half_seconds < TWO_MINUTE_WARNING_S)
            or (self.quarter >= 4 and self.half_seconds < FIVE_MINUTE_WARNING_S)
        )
        return not (
            self.last_play_incomplete or self.last_play_timeout or self.next_play_extra_point
            or self.next_play_kickoff or self.last_play_kickoff or self.last_play_punt
            or self.last_play_turnover or late_oob
        )

    def offense_advantage(self) -> bool:
        return self.home_possession and not self.neutral_site

    def defense_advantage(self) -> bool:
        return not (self.home_possession or self.neutral_site)

    def yards_to_touchdown(self) -> int:
        return self.yard_line if self.offense_flipped else MAX_YARDLINE - self.yard_line

    def yards_to_safety(self) -> int:
        """Signed yards to the offense's own goal line (always <= 0)."""
        return -(MAX_YARDLINE - self.yard_line if self.offense_flipped else self.yard_line)

    # -- transitions -------------------------------------------------------

    def _next_clock(self, opts: UpdateOptions) -> int:
        return max(0, self.half_seconds - opts.duration)

    def _end_of_half_or_pending(self, opts: UpdateOptions) -> bool:
        return self.next_end_of_half(opts) or (self.end_of_half and opts.between_play)

    def next_home_score(self, opts: UpdateOptions) -> int:
        score = opts.off_score if self.home_possession else opts.def_score
        return self.home_score + score.points()

    def next_away_score(self, opts: UpdateOptions) -> int:
        score = opts.def_score if self.home_possession else opts.off_score
        return self.away_score + score.points()

    def next_score_tied(self, opts: UpdateOptions) -> bool:
        return self.next_home_score(opts) == self.next_away_score(opts)

    def next_half_seconds(self, opts: UpdateOptions) -> int:
        next_clock = self._next_clock(opts)
        end_of_half = self._end_of_half_or_pending(opts)
        # a play can't skip the 1st/3rd quarter break
        if self.quarter in (1, 3) and self.half_seconds > QUARTER_SECONDS and next_clock <= QUARTER_SECONDS:
            return QUARTER_SECONDS
        if end_of_half and not (opts.between_play or opts.end_of_game):
            return 0
        if (end_of_half and opts.between_play and self.quarter < 4) or (self.end_of_half and self.quarter == 2):
            return HALF_SECONDS
        if self.quarter >= 4 and next_clock == 0:
            # the try after a final-second touchdown is run with no clock
            if opts.touchdown or not self.next_score_tied(opts):
                return 0
            return OVERTIME_SECONDS
        return next_clock

    def next_end_of_half(self, opts: UpdateOptions) -> bool:
        return (self._next_clock(opts) == 0 and (self.quarter == 2 or self.quarter >= 4)
                and not opts.touchdown)

    def next_game_over(self, opts: UpdateOptions) -> bool:
        return self.quarter >= 4 and self._next_clock(opts) == 0 and not self.next_score_tied(opts)

    def next_quarter(self, opts: UpdateOptions) -> int:
        # extra point still pending
        if opts.touchdown:
            return self.quarter
        next_clock = self._next_clock(opts)
        if ((self.quarter in (1, 3) and self.half_seconds >= QUARTER_SECONDS and next_clock <= QUARTER_SECONDS)
                or (self.quarter == 2 and next_clock == 0)
                or (self.quarter >= 4 and next_clock == 0 and self.next_score_tied(opts))):
            return self.quarter + 1
        return self.quarter

    def next_home_positive_direction(self, opts: UpdateOptions) -> bool:
        if self.next_quarter(opts) != self.quarter or self._end_of_half_or_pending(opts):
            return not self.home_positive_direction
        return self.home_positive_direction

    def next_down(self, opts: UpdateOptions) -> int:
        if self._end_of_half_or_pending(opts):
            return 0
        if self.next_play_extra_point:
            return 0
        if self.next_play_kickoff:
            scored = opts.off_score != ScoreResult.NONE or opts.def_score != ScoreResult.NONE
            return 0 if scored else 1
        if opts.off_score in _ZERO_DOWN_SCORES or opts.def_score in _ZERO_DOWN_SCORES:
            return 0
        if opts.turnover or opts.net_yards >= self.distance:
            return 1
        down = self.down + 1
        return 1 if down > MAX_DOWN else down

    def next_home_possession(self, opts: UpdateOptions) -> bool:
        if self._end_of_half_or_pending(opts):
            return self.home_opening_kickoff
        # kicking team recovered its own kickoff
        if self.next_play_kickoff and not opts.turnover:
            return self.home_possession
        if self.next_play_kickoff or opts.def_score == ScoreResult.TOUCHDOWN or opts.turnover:
            return not self.home_possession
        if opts.net_yards >= self.distance or opts.off_score in _HOLD_POSSESSION_SCORES:
            return self.home_possession
        if self.down + 1 > MAX_DOWN:
            return not self.home_possession
        return self.home_possession

    def next_yard_line(self, opts: UpdateOptions) -> int:
        if self._end_of_half_or_pending(opts):
            flipped = self.home_opening_kickoff ^ self.home_positive_direction
            return KICKOFF_YARD_LINE if flipped else MAX_YARDLINE - KICKOFF_YARD_LINE

        end_of_quarter = self.next_quarter(opts) != self.quarter

        def spot(yards_from_goal: int, own_goal: bool) -> int:
            # yards_from_goal measured from the offense's own goal, or the
            # opponent's goal when own_goal is false
            rel = yards_from_goal if own_goal else MAX_YARDLINE - yards_from_goal
            yl = MAX_YARDLINE - rel if self.offense_flipped else rel
            return MAX_YARDLINE - yl if end_of_quarter else yl

        if (self.next_play_extra_point or opts.def_score == ScoreResult.SAFETY
                or opts.off_score == ScoreResult.FIELD_GOAL):
            return spot(KICKOFF_YARD_LINE, own_goal=True)
        if opts.off_score == ScoreResult.TOUCHDOWN:
            return spot(EXTRA_POINT_YARD_LINE, own_goal=False)
        if opts.def_score == ScoreResult.TOUCHDOWN:
            return spot(EXTRA_POINT_YARD_LINE, own_goal=True)
        if opts.touchback:
            # receiving team's 25, i.e. 75 from the kicking offense's goal
            return spot(TOUCHBACK_YARD_LINE, own_goal=False)
        if opts.kickoff_oob:
            return spot(KICKOFF_YARD_LINE, own_goal=False)

        if self.offense_flipped:
            yl = _clamp_yard_line(self.yard_line - opts.net_yards)
        else:
            yl = _clamp_yard_line(self.yard_line + opts.net_yards)
        return MAX_YARDLINE - yl if end_of_quarter else yl

    def next_distance(self, opts: UpdateOptions) -> int:
        end_of_half = self.end_of_half if opts.between_play else self.next_end_of_half(opts)
        if (self.next_play_extra_point or end_of_half or opts.def_score == ScoreResult.SAFETY
                or opts.off_score == ScoreResult.FIELD_GOAL):
            return FIRST_DOWN_YARDS
        if opts.touchdown:
            return EXTRA_POINT_YARD_LINE

        end_of_quarter = self.next_quarter(opts) != self.quarter
        next_yl = self.next_yard_line(opts)
        if end_of_quarter:
            next_yl = MAX_YARDLINE - next_yl
        # yards to goal for the current offense and for the other side
        same_side = min(FIRST_DOWN_YARDS, next_yl if self.offense_flipped else MAX_YARDLINE - next_yl)
        other_side = min(FIRST_DOWN_YARDS, MAX_YARDLINE - next_yl if self.offense_flipped else next_yl)

        if self.next_play_kickoff and not opts.turnover:
            return max(0, same_side)
        if opts.turnover or (self.next_play_kickoff and not opts.between_play):
            return max(0, other_side)
        if opts.net_yards >= self.distance:
            return max(0, same_side)
        if self.down == MAX_DOWN and not opts.between_play:
            return max(0, other_side)
        return max(0, self.distance - opts.net_yards)

    def next_home_timeouts(self, opts: UpdateOptions) -> int:
        if self.end_of_half:
            return MAX_TIMEOUTS
        called = opts.off_timeout if self.home_possession else opts.def_timeout
        return max(0, self.home_timeouts - 1) if called else self.home_timeouts

    def next_away_timeouts(self, opts: UpdateOptions) -> int:
        if self.end_of_half:
            return MAX_TIMEOUTS
        called = opts.def_timeout if self.home_possession else opts.off_timeout
        return max(0, self.away_timeouts - 1) if called else self.away_timeouts

    # -- folding -----------------------------------------------------------

    def next(self, result: PlayResult) -> GameContext:
        from fbsim.outcomes.betweenplay import BetweenPlayResult
        from fbsim.outcomes.fieldgoal import FieldGoalResult
        from fbsim.outcomes.kickoff import KickoffResult
        from fbsim.outcomes.passing import PassResult
        from fbsim.outcomes.punt import PuntResult
        from fbsim.outcomes.run import RunResult

        match result:
            case BetweenPlayResult():
                return self.next_between_play(result)
            case RunResult() | PassResult() | PuntResult() | KickoffResult() | FieldGoalResult():
                return self.next_context(result)
            case _:
                raise TypeError(f"Not a play result: {type(result).__name__}")

    def next_context(self, result: PlayResult) -> GameContext:
        """Fold the outcome of a snap into the successor context."""
        opts = UpdateOptions(
            duration=result.play_duration,
            net_yards=result.net_yards,
            off_score=result.offense_score,
            def_score=result.defense_score,
            turnover=result.turnover,
            touchback=result.touchback,
            kickoff_oob=result.kickoff and result.out_of_bounds,
            off_timeout=result.offense_timeout,
            def_timeout=result.defense_timeout,
            next_play_extra_point=result.next_play_extra_point,
        )
        extra_point = result.next_play_extra_point
        end_of_half = False if self.end_of_half else (self.next_end_of_half(opts) and not extra_point)
        quarter = self.quarter if end_of_half else self.next_quarter(opts)
        return replace(
            self,
            quarter=quarter,
            half_seconds=self.next_half_seconds(opts),
            down=self.next_down(opts),
            distance=self.next_distance(opts),
            yard_line=self.next_yard_line(opts),
            home_score=self.next_home_score(opts),
            away_score=self.next_away_score(opts),
            home_timeouts=self.next_home_timeouts(opts),
            away_timeouts=self.next_away_timeouts(opts),
            home_positive_direction=self.next_home_positive_direction(opts),
            home_possession=self.next_home_possession(opts),
            last_play_turnover=result.turnover,
            last_play_incomplete=result.incomplete,
            last_play_out_of_bounds=result.out_of_bounds,
            last_play_timeout=result.offense_timeout or result.defense_timeout,
            last_play_kickoff=result.kickoff,
            last_play_punt=result.punt,
            next_play_extra_point=extra_point,
            next_play_kickoff=result.next_play_kickoff or (end_of_half and not extra_point),
            end_of_half=end_of_half,
            game_over=self.next_game_over(opts),
        )

    def next_between_play(self, result: BetweenPlayResult) -> GameContext:
        """Fold the clock runoff and timeouts between two snaps."""
        if self.next_play_extra_point:
            return self
        idle = UpdateOptions(between_play=True)
        opts = UpdateOptions(
            duration=result.duration,
            off_timeout=result.offense_timeout,
            def_timeout=result.defense_timeout,
            between_play=True,
        )
        prev_end_of_half = self.end_of_half
        next_end_of_half = self.next_end_of_half(opts)
        end_of_half = prev_end_of_half or next_end_of_half
        eog_opts = replace(opts, end_of_game=self.next_game_over(opts))

        field_opts = idle if prev_end_of_half else opts
        if prev_end_of_half:
            down = self.next_down(idle)
            home_possession = self.next_home_possession(idle)
        elif next_end_of_half:
            down = self.next_down(opts)
            home_possession = self.next_home_possession(opts)
        else:
            down = self.down
            home_possession = self.home_possession
        return replace(
            self,
            quarter=self.next_quarter(opts),
            half_seconds=self.next_half_seconds(eog_opts),
            down=down,
            distance=self.next_distance(field_opts),
            yard_line=self.next_yard_line(field_opts),
            home_timeouts=self.next_home_timeouts(opts),
            away_timeouts=self.next_away_timeouts(opts),
            home_positive_direction=self.next_home_positive_direction(opts),
            home_possession=home_possession,
            last_play_timeout=result.offense_timeout or result.defense_timeout,
            next_play_kickoff=self.next_play_kickoff or end_of_half,
            end_of_half=end_of_half,
            game_over=self.next_game_over(opts),
        )

    def __str__(self) -> str:
        from fbsim.play_context import PlayContext

        home, away = self.home_team_short, self.away_team_short
        if self.game_over:
            period = f"{self.quarter}Q" if self.quarter <= 4 else f"{self.quarter - 4}OT"
            return f"[FINAL {period}] ({home} {self.home_score} - {away} {self.away_score})"
        if self.home_possession:
            home = f"*{home}"
        else:
            away = f"*{away}"
        score = f"({home} {self.home_score} - {away} {self.away_score})"
        return f"{PlayContext.from_game_context(self)} {score}"
