"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Collections
EMPLOYEES = "employees"
LEAVE_REQUESTS = "leave_requests"
ATTENDANCE = "attendance"
PAYROLL = "payroll"
PAYROLL_SETTINGS = "payroll_settings"
ATTENDANCE_POLICY = "attendance_policy"

ATTENDANCE_POLICY_DOC_ID = "default_policy"

# Payroll settings defaults (config_key -> value)
DEFAULT_ANNUAL_CASUAL_LEAVE = 10
DEFAULT_ANNUAL_SICK_LEAVE = 10
DEFAULT_LATE_TOLERANCE_COUNT = 3
DEFAULT_WORKING_DAYS_PER_MONTH = 30
DEFAULT_HALF_DAY_HOURS = 4
DEFAULT_FULL_DAY_HOURS = 8

# Office hours policy defaults
DEFAULT_OFFICE_START = "09:00"
DEFAULT_OFFICE_END = "18:00"
DEFAULT_GRACE_MINUTES = 15

DEFAULT_CACHE_TTL_SECONDS = 300
DEFAULT_BULK_WORKERS = 4
