"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WINDOW_MINUTES = 5
DEFAULT_GRACE_WINDOWS = 0
DEFAULT_OTP_TTL_SECONDS = 300
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_STATS_DAYS = 7

OTP_DIGITS = 6
BEARER_TOKEN_BYTES = 32
