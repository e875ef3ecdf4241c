from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> str:
        """Create or replace the record for (employee, date)."""

        raise NotImplementedError

    def list_for_employee_between(self, employee_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
