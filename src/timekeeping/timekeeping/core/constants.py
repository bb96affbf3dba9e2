"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_TTL_HOURS = 12
DEFAULT_TIMEZONE = "UTC"
DEFAULT_WORKDAY_START = "09:00"
DEFAULT_WORKDAY_END = "17:00"
MIN_PASSWORD_LENGTH = 6
SECONDS_PER_HOUR = 3600
