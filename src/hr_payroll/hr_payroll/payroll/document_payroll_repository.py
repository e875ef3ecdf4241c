from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import PAYROLL
from ..store.base import DocumentStore, unwrap
from .model import PayrollRecord
from .repository import PayrollRepository


class DocumentPayrollRepository(PayrollRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        doc = unwrap(self._store.get(PAYROLL, str(record_id)), "Loading payroll record")
        return PayrollRecord.from_document(doc) if doc else None

    def create(self, record: PayrollRecord) -> str:
        return unwrap(
            self._store.create(PAYROLL, record.to_document(), doc_id=record.record_id),
            "Creating payroll record",
        )

    def save(self, record: PayrollRecord) -> None:
        unwrap(self._store.update(PAYROLL, record.record_id, record.to_document()), "Saving payroll record")

    def list_for_period(self, month: int, year: int) -> Sequence[PayrollRecord]:
        docs = unwrap(
            self._store.list(PAYROLL, [("month", "==", int(month)), ("year", "==", int(year))]),
            "Listing payroll records",
        )
        records = [PayrollRecord.from_document(d) for d in docs]
        records.sort(key=lambda r: r.employee_id)
        return records
