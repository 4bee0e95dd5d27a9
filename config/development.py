import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "quota_db"),
    "connect_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    "statement_timeout_ms": int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "5000")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the form schemas on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

RESERVE_DAYS_FORM_NAME = os.getenv("RESERVE_DAYS_FORM_NAME", "Reserve Days Management")
EMPLOYEE_FIELD_NAME = os.getenv("EMPLOYEE_FIELD_NAME", "employeeName")
DEFAULT_PAGE_LIMIT = int(os.getenv("DEFAULT_PAGE_LIMIT", "100"))
DEFAULT_HISTORY_LIMIT = int(os.getenv("DEFAULT_HISTORY_LIMIT", "30"))
