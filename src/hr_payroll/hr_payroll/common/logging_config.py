"""Logging setup for the hr_payroll package.

Modules log through ``logging.getLogger(__name__)``; this module only attaches
a handler to the package logger once at startup.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import Any

# "hr_payroll" when installed, "src.hr_payroll.hr_payroll" when run from a checkout
_PACKAGE_LOGGER = __name__.rsplit(".", 2)[0]
_PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_STDLIB_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "taskName"}

_configured = False
_lock = threading.Lock()


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Fields passed through ``extra=``
        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val
        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(*, level: str | int = "INFO", json_format: bool = False, stream: Any = None) -> None:
    """Attach a stream handler to the package logger (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(level if isinstance(level, int) else str(level).upper())
    logger.propagate = False

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter() if json_format else logging.Formatter(_PLAIN_FORMAT))
    logger.addHandler(handler)


def reset_logging() -> None:
    """Drop handlers installed by configure_logging. Used by tests."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
