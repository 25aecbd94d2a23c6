from __future__ import annotations

# Clock
HALF_SECONDS = 1800
QUARTER_SECONDS = 900
OVERTIME_SECONDS = 600
TWO_MINUTE_WARNING_S = 120
FIVE_MINUTE_WARNING_S = 300
LATE_GAME_S = 180
LAST_PLAY_S = 6
MAX_PLAY_DURATION = 100
DRAIN_CLOCK_DURATION = 40

# Field context
MAX_YARDLINE = 100
MIN_YARDLINE = 0
MIDFIELD = 50
MAX_DOWN = 4
FIRST_DOWN_YARDS = 10
KICKOFF_YARD_LINE = 35
TOUCHBACK_YARD_LINE = 25
EXTRA_POINT_YARD_LINE = 2
END_ZONE_DEPTH = 10
FIELD_GOAL_SNAP_YARDS = 17
FIELD_GOAL_RANGE_YARD = 45
MAX_TIMEOUTS = 3

# Situational thresholds
GO_FOR_IT_MAX_DISTANCE = 4
GO_FOR_IT_RED_ZONE_YARD = 80
GO_FOR_IT_MIDFIELD_BAND = (40, 60)
FOURTH_DOWN_NORMAL_CALL_YARD = 20
SECONDS_PER_SNAP = 42
SECONDS_PER_SCORE = 8
POINTS_PER_POSSESSION = 8

# Ratings
RATING_MIN = 0
RATING_MAX = 100
DEFAULT_RATING = 50
HOME_FIELD_BONUS = 3
MAX_SHORT_NAME = 4
MAX_TEAM_NAME = 64
