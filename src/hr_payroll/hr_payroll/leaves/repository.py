from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveRequest


class LeaveRequestRepository(Protocol):
    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create(self, request: LeaveRequest) -> str:
        raise NotImplementedError

    def save(self, request: LeaveRequest) -> None:
        """Overwrite the stored request with ``request``."""

        raise NotImplementedError

    def list(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
        supervisor_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_approved_overlapping(self, employee_id: str, start: date, end: date) -> Sequence[LeaveRequest]:
        """Approved requests of one employee that touch ``[start, end]``, oldest first."""

        raise NotImplementedError
