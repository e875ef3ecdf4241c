"""Example: drive the service layer directly (no Flask).

Runs against the in-memory store so it needs no database.
"""

import importlib
from datetime import date, datetime

from config import get_settings_module

from src.hr_payroll.hr_payroll.container import build_container
from src.hr_payroll.hr_payroll.core.enums import LeaveType, Role
from src.hr_payroll.hr_payroll.store.memory_store import InMemoryDocumentStore


def main():
    settings = importlib.import_module(get_settings_module())
    store = InMemoryDocumentStore(
        seed={
            "employees": {
                "E002": {"name": "Team Lead", "status": "active", "is_supervisor": True, "salary": 45000},
                "E003": {"name": "Developer", "status": "active", "supervisor_id": "E002", "salary": 30000},
            }
        }
    )
    container = build_container(settings, store=store, clock=lambda: datetime(2025, 3, 31, 18, 0))

    leave = container.leave_service.submit(
        current_role=Role.EMPLOYEE,
        current_user_id="E003",
        employee_id="E003",
        leave_type=LeaveType.SICK,
        start_date=date(2025, 3, 10),
        end_date=date(2025, 3, 11),
        reason="Flu",
    )
    container.leave_service.supervisor_decide(
        current_role=Role.EMPLOYEE, current_user_id="E002", request_id=leave.request_id, approve=True
    )
    container.leave_service.admin_decide(
        current_role=Role.ADMIN, current_user_id="E001", request_id=leave.request_id, approve=True
    )

    for outcome in container.payroll_service.generate(current_role=Role.ADMIN, month=3, year=2025):
        print(outcome.to_dict())
    for row in container.payroll_service.export_rows(3, 2025):
        print(row["employee_id"], row["sick_leave_taken"], row["total_deduction"], row["net_payable_salary"])


if __name__ == "__main__":
    main()
