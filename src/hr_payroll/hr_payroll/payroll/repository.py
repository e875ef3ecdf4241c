from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import PayrollRecord


class PayrollRepository(Protocol):
    def get_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def create(self, record: PayrollRecord) -> str:
        """Insert under the deterministic id; an existing record is a conflict."""

        raise NotImplementedError

    def save(self, record: PayrollRecord) -> None:
        raise NotImplementedError

    def list_for_period(self, month: int, year: int) -> Sequence[PayrollRecord]:
        raise NotImplementedError
