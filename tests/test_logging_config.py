from __future__ import annotations

import io
import sys
import json
import logging

from src.hr_payroll.hr_payroll.common import logging_config
from src.hr_payroll.hr_payroll.common.logging_config import StructuredFormatter, configure_logging, reset_logging


def test_json_lines_carry_extra_fields():
    stream = io.StringIO()
    reset_logging()
    try:
        configure_logging(level="INFO", json_format=True, stream=stream)
        logging.getLogger(f"{logging_config._PACKAGE_LOGGER}.payroll.service").info(
            "generated %d records", 3, extra={"period": "2025-03"}
        )
    finally:
        reset_logging()

    line = json.loads(stream.getvalue().strip())
    assert line["message"] == "generated 3 records"
    assert line["level"] == "INFO"
    assert line["period"] == "2025-03"


def test_configure_is_idempotent():
    reset_logging()
    try:
        configure_logging(level="DEBUG")
        configure_logging(level="DEBUG")
        assert len(logging.getLogger(logging_config._PACKAGE_LOGGER).handlers) == 1
    finally:
        reset_logging()


def test_exceptions_are_serialized():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
    payload = json.loads(StructuredFormatter().format(record))
    assert payload["exc_type"] == "ValueError"
    assert "boom" in payload["traceback"]
