import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_ledger_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

SHIFT_START = "08:00"
SHIFT_END = "16:00"
SHIFT_LENGTH_HOURS = "8"
LATE_GRACE_MINUTES = 0
WORK_WEEKDAYS = (0, 1, 2, 3, 4)

MAX_APPROVAL_RETRIES = 3
