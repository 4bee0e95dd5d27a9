import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "quota_db_test"),
    "connect_timeout": 5,
    "statement_timeout_ms": 2000,
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

RESERVE_DAYS_FORM_NAME = "Reserve Days Management"
EMPLOYEE_FIELD_NAME = "employeeName"
DEFAULT_PAGE_LIMIT = 100
DEFAULT_HISTORY_LIMIT = 30
