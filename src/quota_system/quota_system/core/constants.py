"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ISO_DATE_FORMAT = "%Y-%m-%d"

RESERVE_DAYS_FORM_NAME = "Reserve Days Management"
EMPLOYEE_FIELD_NAME = "employeeName"
UNKNOWN_EMPLOYEE = "Unknown Employee"

QUOTA_MIN = 0
QUOTA_MAX = 10000
NOTES_MAX_LENGTH = 500
ACTOR_MAX_LENGTH = 100

DEFAULT_PAGE_LIMIT = 100
DEFAULT_HISTORY_LIMIT = 30
MAX_RANGE_DAYS = 366

# A reservation is "ending" only after a run longer than this many days.
CONSECUTIVE_DAYS_THRESHOLD = 2

# Header value required by DELETE /quota/all/confirm.
DELETE_ALL_CONFIRM_HEADER = "X-Confirm-Token"
DELETE_ALL_CONFIRM_TOKEN = "DELETE_ALL_QUOTAS_CONFIRMED"
