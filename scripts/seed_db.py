"""Seed demo employees, payroll settings and the office-hours policy.

Existing documents are left untouched, so the script can be re-run.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_payroll.hr_payroll.container import build_store
from src.hr_payroll.hr_payroll.core import constants
from src.hr_payroll.hr_payroll.store.base import FailureKind

DEMO_EMPLOYEES = {
    "E001": {
        "name": "Admin User",
        "email": "admin@example.com",
        "department": "HR",
        "designation": "HR Manager",
        "status": "active",
        "is_supervisor": True,
        "supervisor_id": None,
        "salary": 60000,
    },
    "E002": {
        "name": "Team Lead",
        "email": "lead@example.com",
        "department": "Engineering",
        "designation": "Engineering Lead",
        "status": "active",
        "is_supervisor": True,
        "supervisor_id": "E001",
        "salary": 45000,
    },
    "E003": {
        "name": "Developer",
        "email": "dev@example.com",
        "department": "Engineering",
        "designation": "Software Engineer",
        "status": "active",
        "is_supervisor": False,
        "supervisor_id": "E002",
        "salary": 30000,
    },
}

DEMO_POLICY = {
    "office_start_time": constants.DEFAULT_OFFICE_START,
    "office_end_time": constants.DEFAULT_OFFICE_END,
    "grace_period_minutes": constants.DEFAULT_GRACE_MINUTES,
}

DEMO_SETTINGS = {
    "annual_casual_leave": constants.DEFAULT_ANNUAL_CASUAL_LEAVE,
    "annual_sick_leave": constants.DEFAULT_ANNUAL_SICK_LEAVE,
    "late_tolerance_count": constants.DEFAULT_LATE_TOLERANCE_COUNT,
    "working_days_per_month": constants.DEFAULT_WORKING_DAYS_PER_MONTH,
    "half_day_hours": constants.DEFAULT_HALF_DAY_HOURS,
    "full_day_hours": constants.DEFAULT_FULL_DAY_HOURS,
}


def _seed(store, collection: str, doc_id: str, data: dict) -> bool:
    result = store.create(collection, data, doc_id=doc_id)
    if result.ok:
        return True
    if result.error.kind == FailureKind.CONFLICT:
        return False
    raise SystemExit(f"Seeding {collection}/{doc_id} failed: {result.error.message}")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    store = build_store(settings)

    created = 0
    for employee_id, doc in DEMO_EMPLOYEES.items():
        created += _seed(store, constants.EMPLOYEES, employee_id, doc)
    for key, value in DEMO_SETTINGS.items():
        created += _seed(store, constants.PAYROLL_SETTINGS, key, {"config_key": key, "config_value": str(value)})
    created += _seed(store, constants.ATTENDANCE_POLICY, constants.ATTENDANCE_POLICY_DOC_ID, DEMO_POLICY)

    print(f"OK: Seeded {created} new documents ({type(store).__name__})")


if __name__ == "__main__":
    main()
