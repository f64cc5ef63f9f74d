"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

OPERATING_TIMEZONE = "Africa/Lagos"

DEFAULT_MISSED_DAYS_WINDOW = 30
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_REQUEST_LIST_LIMIT = 200
HIGH_ABSENCE_THRESHOLD = 3
MIN_PASSWORD_LENGTH = 6

ADMIN_INTERN_ID = "ADMIN001"
CSV_MISSING_VALUE = "N/A"
