from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import LEAVE_REQUESTS
from ..core.enums import LeaveStatus
from ..store.base import DocumentStore, Filter, unwrap
from .model import LeaveRequest
from .repository import LeaveRequestRepository


class DocumentLeaveRequestRepository(LeaveRequestRepository):
    """Leave requests in the ``leave_requests`` collection.

    The stored ``status`` field narrows queries only; results are re-checked
    against the status derived from the approval flags.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        doc = unwrap(self._store.get(LEAVE_REQUESTS, str(request_id)), "Loading leave request")
        return LeaveRequest.from_document(doc) if doc else None

    def create(self, request: LeaveRequest) -> str:
        return unwrap(
            self._store.create(LEAVE_REQUESTS, request.to_document(), doc_id=request.request_id or None),
            "Creating leave request",
        )

    def save(self, request: LeaveRequest) -> None:
        unwrap(self._store.update(LEAVE_REQUESTS, request.request_id, request.to_document()), "Saving leave request")

    def list(
        self,
        *,
        status: Optional[LeaveStatus] = None,
        employee_id: Optional[str] = None,
        supervisor_id: Optional[str] = None,
    ) -> Sequence[LeaveRequest]:
        filters: list[Filter] = []
        if status:
            filters.append(("status", "==", status.value))
        if employee_id:
            filters.append(("employee_id", "==", str(employee_id)))
        if supervisor_id:
            filters.append(("supervisor_id", "==", str(supervisor_id)))

        docs = unwrap(self._store.list(LEAVE_REQUESTS, filters), "Listing leave requests")
        requests = [LeaveRequest.from_document(d) for d in docs]
        if status:
            requests = [r for r in requests if r.status == status]
        requests.sort(key=lambda r: r.created_at, reverse=True)
        return requests

    def list_approved_overlapping(self, employee_id: str, start: date, end: date) -> Sequence[LeaveRequest]:
        docs = unwrap(
            self._store.list(
                LEAVE_REQUESTS,
                [
                    ("employee_id", "==", str(employee_id)),
                    ("status", "==", LeaveStatus.APPROVED.value),
                    ("start_date", "<=", end.isoformat()),
                ],
            ),
            "Listing approved leave",
        )
        requests = [LeaveRequest.from_document(d) for d in docs]
        requests = [r for r in requests if r.status == LeaveStatus.APPROVED and r.end_date >= start]
        requests.sort(key=lambda r: (r.start_date, r.created_at))
        return requests
