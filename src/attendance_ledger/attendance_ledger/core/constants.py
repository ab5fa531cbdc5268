"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SHIFT_START = "08:00"
DEFAULT_SHIFT_END = "16:00"
DEFAULT_SHIFT_LENGTH_HOURS = 8
DEFAULT_LATE_GRACE_MINUTES = 0
DEFAULT_WORK_WEEKDAYS = (0, 1, 2, 3, 4)

DEFAULT_ALLOWED_ABSENCE_DAYS = 20
DEFAULT_ALLOWED_LATE_EARLY_HOURS = 8

DEFAULT_MAX_APPROVAL_RETRIES = 3
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_AUDIT_LIMIT = 100
