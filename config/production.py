import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_ledger"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

SHIFT_START = os.getenv("SHIFT_START", "08:00")
SHIFT_END = os.getenv("SHIFT_END", "16:00")
SHIFT_LENGTH_HOURS = os.getenv("SHIFT_LENGTH_HOURS", "8")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "0"))
WORK_WEEKDAYS = tuple(int(d) for d in os.getenv("WORK_WEEKDAYS", "0,1,2,3,4").split(",") if d.strip())

MAX_APPROVAL_RETRIES = int(os.getenv("MAX_APPROVAL_RETRIES", "3"))
