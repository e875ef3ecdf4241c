from __future__ import annotations

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "init_db.py"


def _load_script(monkeypatch, **settings):
    script_spec = importlib.util.spec_from_file_location("init_db_script", SCRIPT)
    module = importlib.util.module_from_spec(script_spec)
    script_spec.loader.exec_module(module)

    fake = ModuleType("fake_settings")
    fake.__dict__.update(settings)
    monkeypatch.setitem(sys.modules, "fake_settings", fake)
    monkeypatch.setattr(module, "get_settings_module", lambda: "fake_settings")
    monkeypatch.setattr(module, "load_dotenv", lambda *a, **k: False)
    return module


@pytest.fixture()
def db_config():
    return {"host": "db", "port": 3306, "user": "hr", "password": "", "database": "hr_payroll"}


def test_applies_schema_and_reports_ready(monkeypatch, capsys, db_config):
    module = _load_script(monkeypatch, STORE_BACKEND="mysql", DB_CONFIG=db_config)
    applied = []
    monkeypatch.setattr(module, "apply_schema", lambda cfg, *, schema_path: applied.append((cfg, schema_path)))
    monkeypatch.setattr(module, "list_tables", lambda cfg: ["documents"])

    assert module.main() == 0
    assert applied == [(db_config, module.SCHEMA_PATH)]
    assert "OK: document store ready in hr_payroll@db" in capsys.readouterr().out


def test_missing_documents_table_fails(monkeypatch, capsys, db_config):
    module = _load_script(monkeypatch, STORE_BACKEND="mysql", DB_CONFIG=db_config)
    monkeypatch.setattr(module, "apply_schema", lambda cfg, *, schema_path: None)
    monkeypatch.setattr(module, "list_tables", lambda cfg: [])

    assert module.main() == 1
    assert capsys.readouterr().out.startswith("FAIL:")


def test_memory_backend_needs_no_schema(monkeypatch, capsys):
    module = _load_script(monkeypatch, STORE_BACKEND="memory")
    monkeypatch.setattr(module, "apply_schema", lambda *a, **k: pytest.fail("schema applied"))

    assert module.main() == 0
    assert capsys.readouterr().out.startswith("SKIP:")
