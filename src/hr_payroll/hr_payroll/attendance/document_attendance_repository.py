from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import ATTENDANCE
from ..core.exceptions import NotFoundError
from ..store.base import DocumentStore, unwrap
from .model import AttendanceRecord, attendance_record_id
from .repository import AttendanceRepository


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        doc = unwrap(
            self._store.get(ATTENDANCE, attendance_record_id(employee_id, work_date)),
            "Loading attendance",
        )
        return AttendanceRecord.from_document(doc) if doc else None

    def upsert(self, record: AttendanceRecord) -> str:
        try:
            return unwrap(
                self._store.update(ATTENDANCE, record.record_id, record.to_document()),
                "Updating attendance",
            )
        except NotFoundError:
            return unwrap(
                self._store.create(ATTENDANCE, record.to_document(), doc_id=record.record_id),
                "Creating attendance",
            )

    def list_for_employee_between(self, employee_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        docs = unwrap(
            self._store.list(
                ATTENDANCE,
                [
                    ("employee_id", "==", str(employee_id)),
                    ("date", ">=", start.isoformat()),
                    ("date", "<=", end.isoformat()),
                ],
            ),
            "Listing attendance",
        )
        records = [AttendanceRecord.from_document(d) for d in docs]
        records.sort(key=lambda r: r.work_date)
        return records
