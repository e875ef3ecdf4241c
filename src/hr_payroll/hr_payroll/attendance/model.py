from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import as_date, from_iso, to_iso
from ..core.enums import AttendanceLocation, AttendanceStatus
from ..core.exceptions import DocumentShapeError


def attendance_record_id(employee_id: str, work_date: date) -> str:
    """One record per employee per date."""
    return f"{employee_id}_{work_date.isoformat()}"


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar date."""

    employee_id: str
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    location: AttendanceLocation = AttendanceLocation.OFFICE
    is_late: bool = False
    note: Optional[str] = None

    @property
    def record_id(self) -> str:
        return attendance_record_id(self.employee_id, self.work_date)

    @property
    def worked_hours(self) -> Optional[float]:
        if not self.check_in_time or not self.check_out_time:
            return None
        return max((self.check_out_time - self.check_in_time).total_seconds() / 3600.0, 0.0)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "AttendanceRecord":
        try:
            return cls(
                employee_id=str(doc["employee_id"]),
                work_date=as_date(doc["date"]),
                status=AttendanceStatus(doc.get("status") or AttendanceStatus.PRESENT.value),
                check_in_time=from_iso(doc.get("check_in_time")),
                check_out_time=from_iso(doc.get("check_out_time")),
                location=AttendanceLocation(doc.get("location") or AttendanceLocation.OFFICE.value),
                is_late=bool(doc.get("is_late", False)),
                note=doc.get("note"),
            )
        except (KeyError, ValueError, TypeError) as exc:
            raise DocumentShapeError(f"Malformed attendance document {doc.get('id')!r}: {exc}") from exc

    def to_document(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "check_in_time": to_iso(self.check_in_time),
            "check_out_time": to_iso(self.check_out_time),
            "location": self.location.value,
            "is_late": self.is_late,
            "note": self.note,
        }
