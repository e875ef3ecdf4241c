from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Protocol

from ..common.datetime_utils import parse_hhmm
from ..common.validators import coerce_number
from ..core import constants
from ..core.constants import ATTENDANCE_POLICY, ATTENDANCE_POLICY_DOC_ID
from ..core.exceptions import ValidationError
from ..store.base import DocumentStore, unwrap


@dataclass(frozen=True)
class OfficeHoursPolicy:
    """Office hours and the grace period applied to check-ins."""

    office_start: time = parse_hhmm(constants.DEFAULT_OFFICE_START)
    office_end: time = parse_hhmm(constants.DEFAULT_OFFICE_END)
    grace_period_minutes: int = constants.DEFAULT_GRACE_MINUTES

    def grace_deadline(self, day: date) -> datetime:
        return datetime.combine(day, self.office_start) + timedelta(minutes=self.grace_period_minutes)

    def is_late(self, check_in: datetime) -> bool:
        return check_in > self.grace_deadline(check_in.date())


class OfficeHoursPolicyProvider(Protocol):
    def get_policy(self) -> OfficeHoursPolicy:
        raise NotImplementedError


class DocumentOfficeHoursPolicyProvider(OfficeHoursPolicyProvider):
    """Reads ``attendance_policy/default_policy``; defaults when absent."""

    def __init__(self, store: DocumentStore):
        self._store = store

    def get_policy(self) -> OfficeHoursPolicy:
        doc = unwrap(self._store.get(ATTENDANCE_POLICY, ATTENDANCE_POLICY_DOC_ID), "Loading attendance policy")
        if not doc:
            return OfficeHoursPolicy()

        defaults = OfficeHoursPolicy()
        try:
            start = parse_hhmm(doc["office_start_time"]) if doc.get("office_start_time") else defaults.office_start
            end = parse_hhmm(doc["office_end_time"]) if doc.get("office_end_time") else defaults.office_end
        except ValidationError:
            return defaults
        grace = coerce_number(doc.get("grace_period_minutes"))
        return OfficeHoursPolicy(
            office_start=start,
            office_end=end,
            grace_period_minutes=int(grace) if grace is not None and 0 <= grace <= 120 else defaults.grace_period_minutes,
        )
