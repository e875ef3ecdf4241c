"""Create the MySQL database and the ``documents`` table used by the document store.

Safe to re-run: the schema only uses CREATE ... IF NOT EXISTS.
"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.hr_payroll.hr_payroll.database.bootstrap import apply_schema, list_tables

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"


def main() -> int:
    load_dotenv(REPO_ROOT / ".env")
    settings = importlib.import_module(get_settings_module())
    if str(getattr(settings, "STORE_BACKEND", "mysql")).lower() != "mysql":
        print(f"SKIP: STORE_BACKEND is {settings.STORE_BACKEND!r}, nothing to create")
        return 0

    db_config = dict(settings.DB_CONFIG)
    apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    if "documents" not in tables:
        print(f"FAIL: documents table missing in {db_config.get('database')} after applying {SCHEMA_PATH.name}")
        return 1
    print(f"OK: document store ready in {db_config.get('database')}@{db_config.get('host')} ({len(tables)} tables)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
