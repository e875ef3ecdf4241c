from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Mapping, Protocol

from ..common.datetime_utils import now_local
from ..common.validators import coerce_number, require_int_in_range
from ..core import constants
from ..core.constants import PAYROLL_SETTINGS
from ..core.exceptions import ValidationError
from ..store.base import DocumentStore, unwrap

logger = logging.getLogger(__name__)

# config_key -> (minimum, maximum); maximum None means unbounded
_BOUNDS: dict[str, tuple[int, int | None]] = {
    "annual_casual_leave": (0, 366),
    "annual_sick_leave": (0, 366),
    "late_tolerance_count": (1, 31),
    "working_days_per_month": (1, 31),
    "half_day_hours": (1, 12),
    "full_day_hours": (1, 24),
}


@dataclass(frozen=True)
class PayrollSettings:
    """Tunable payroll constants, stored as ``config_key``/``config_value`` pairs."""

    annual_casual_leave: int = constants.DEFAULT_ANNUAL_CASUAL_LEAVE
    annual_sick_leave: int = constants.DEFAULT_ANNUAL_SICK_LEAVE
    late_tolerance_count: int = constants.DEFAULT_LATE_TOLERANCE_COUNT
    working_days_per_month: int = constants.DEFAULT_WORKING_DAYS_PER_MONTH
    half_day_hours: int = constants.DEFAULT_HALF_DAY_HOURS
    full_day_hours: int = constants.DEFAULT_FULL_DAY_HOURS

    @classmethod
    def from_values(cls, values: Mapping[str, Any]) -> "PayrollSettings":
        """Build settings from raw stored values.

        Absent, unparsable or out-of-range entries fall back to the default.
        """

        kwargs: dict[str, int] = {}
        for f in fields(cls):
            raw = coerce_number(values.get(f.name))
            if raw is None or not raw.is_integer():
                continue
            minimum, maximum = _BOUNDS[f.name]
            if raw < minimum or (maximum is not None and raw > maximum):
                logger.warning("ignoring out-of-range payroll setting %s=%r", f.name, values.get(f.name))
                continue
            kwargs[f.name] = int(raw)
        return cls(**kwargs)

    def to_values(self) -> dict[str, str]:
        return {k: str(v) for k, v in asdict(self).items()}


def validate_setting_updates(updates: Mapping[str, Any]) -> dict[str, int]:
    """Strict validation used for admin edits (unlike the lenient loader)."""
    if not updates:
        raise ValidationError("No settings provided")
    clean: dict[str, int] = {}
    for key, value in updates.items():
        if key not in _BOUNDS:
            raise ValidationError(f"Unknown payroll setting: {key}")
        minimum, maximum = _BOUNDS[key]
        clean[key] = require_int_in_range(value, key, minimum=minimum, maximum=maximum)
    return clean


class PayrollSettingsProvider(Protocol):
    def load(self) -> PayrollSettings:
        raise NotImplementedError


class PayrollSettingsStore(PayrollSettingsProvider, Protocol):
    def update(self, updates: Mapping[str, Any]) -> PayrollSettings:
        raise NotImplementedError


class DocumentPayrollSettingsRepository(PayrollSettingsStore):
    """Reads/writes the ``payroll_settings`` collection.

    Settings are read fresh on every ``load()`` call; edits only affect later
    computations.
    """

    def __init__(self, store: DocumentStore, *, clock: Callable = now_local):
        self._store = store
        self._clock = clock

    def _docs_by_key(self) -> dict[str, dict]:
        docs = unwrap(self._store.list(PAYROLL_SETTINGS), "Loading payroll settings")
        return {str(d.get("config_key")): d for d in docs if d.get("config_key")}

    def load(self) -> PayrollSettings:
        values = {key: doc.get("config_value") for key, doc in self._docs_by_key().items()}
        return PayrollSettings.from_values(values)

    def update(self, updates: Mapping[str, Any]) -> PayrollSettings:
        clean = validate_setting_updates(updates)
        existing = self._docs_by_key()
        stamp = self._clock().isoformat()

        for key, value in clean.items():
            doc = existing.get(key)
            if doc:
                unwrap(
                    self._store.update(PAYROLL_SETTINGS, doc["id"], {"config_value": str(value), "updated_at": stamp}),
                    f"Updating payroll setting {key}",
                )
            else:
                unwrap(
                    self._store.create(
                        PAYROLL_SETTINGS,
                        {"config_key": key, "config_value": str(value), "created_at": stamp, "updated_at": stamp},
                        doc_id=key,
                    ),
                    f"Creating payroll setting {key}",
                )
        logger.info("payroll settings updated: %s", ", ".join(f"{k}={v}" for k, v in clean.items()))
        return self.load()
