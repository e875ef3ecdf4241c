from __future__ import annotations

import json

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.hr_payroll.hr_payroll.core.exceptions import AlreadyExistsError, StoreError
from src.hr_payroll.hr_payroll.store.base import FailureKind, unwrap
from src.hr_payroll.hr_payroll.store.mysql_store import MySQLDocumentStore


class FakeCursor:
    def __init__(self, conn: "FakeConnection"):
        self._conn = conn
        self._rows: list[dict] = []
        self.rowcount = 0

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), tuple(params)))
        if self._conn.error is not None:
            raise self._conn.error
        if sql.lstrip().upper().startswith("SELECT"):
            self._rows = list(self._conn.rows)
            self.rowcount = len(self._rows)
        else:
            self._rows = []
            self.rowcount = self._conn.rowcount

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows=None, *, rowcount: int = 0, error: Exception | None = None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.executed: list[tuple[str, tuple]] = []
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, dictionary: bool = False):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, conn: FakeConnection):
        self.conn = conn

    def connect(self):
        return self.conn


def _store(**kwargs) -> tuple[MySQLDocumentStore, FakeConnection]:
    conn = FakeConnection(**kwargs)
    return MySQLDocumentStore(FakeConnectionFactory(conn)), conn


def test_get_decodes_json_column_and_adds_id():
    store, conn = _store(rows=[{"doc_id": "E1", "data": b'{"name": "Alice", "salary": 30000}'}])

    result = store.get("employees", "E1")

    assert result.ok
    assert result.data == {"id": "E1", "name": "Alice", "salary": 30000}
    assert conn.executed[0][1] == ("employees", "E1")


def test_get_missing_row_is_none_not_failure():
    store, _ = _store(rows=[])

    result = store.get("employees", "nope")

    assert result.ok
    assert result.data is None


def test_list_pushes_down_equality_and_refilters_in_python():
    store, conn = _store(
        rows=[
            {"doc_id": "E1_2025-02-28", "data": json.dumps({"employee_id": "E1", "date": "2025-02-28"})},
            {"doc_id": "E1_2025-03-03", "data": json.dumps({"employee_id": "E1", "date": "2025-03-03"})},
        ]
    )

    result = store.list("attendance", [("employee_id", "==", "E1"), ("date", ">=", "2025-03-01")])

    assert [d["id"] for d in result.data] == ["E1_2025-03-03"]
    sql, params = conn.executed[0]
    assert sql.count("JSON_EXTRACT(data, %s) = CAST(%s AS JSON)") == 1
    assert params == ("attendance", '$."employee_id"', '"E1"')


def test_create_writes_payload_without_id():
    store, conn = _store()

    result = store.create("payroll", {"id": "ignored", "month": 3}, doc_id="E1_2025_03")

    assert result.data == "E1_2025_03"
    _, params = conn.executed[0]
    assert params[:2] == ("payroll", "E1_2025_03")
    assert json.loads(params[2]) == {"month": 3}
    assert conn.commits == 1


def test_duplicate_key_is_a_conflict_result():
    dup = mysql.connector.Error(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    store, conn = _store(error=dup)

    result = store.create("payroll", {"month": 3}, doc_id="E1_2025_03")

    assert not result.ok
    assert result.error.kind == FailureKind.CONFLICT
    assert result.error.cause is dup
    assert conn.rollbacks == 1
    with pytest.raises(AlreadyExistsError) as info:
        unwrap(result, "Creating payroll record")
    assert info.value.__cause__ is dup


@pytest.mark.parametrize(
    "errno, kind",
    [
        (errorcode.ER_ACCESS_DENIED_ERROR, FailureKind.PERMISSION_DENIED),
        (errorcode.ER_TABLEACCESS_DENIED_ERROR, FailureKind.PERMISSION_DENIED),
        (errorcode.CR_CONN_HOST_ERROR, FailureKind.UNAVAILABLE),
    ],
)
def test_driver_errors_map_to_failure_kinds(errno, kind):
    store, _ = _store(error=mysql.connector.Error(msg="boom", errno=errno))

    result = store.list("employees")

    assert result.error.kind == kind
    with pytest.raises(StoreError):
        unwrap(result, "Listing employees")


def test_update_merges_into_existing_document():
    store, conn = _store(rows=[{"data": json.dumps({"name": "Alice", "salary": 30000})}])

    result = store.update("employees", "E1", {"id": "E1", "salary": 32000})

    assert result.data == "E1"
    update_sql, params = conn.executed[1]
    assert update_sql.startswith("UPDATE documents SET data=%s")
    assert json.loads(params[0]) == {"name": "Alice", "salary": 32000}
    assert params[1:] == ("employees", "E1")


def test_update_missing_row_is_not_found():
    store, conn = _store(rows=[])

    result = store.update("employees", "ghost", {"salary": 1})

    assert result.error.kind == FailureKind.NOT_FOUND
    assert len(conn.executed) == 1


def test_delete_uses_rowcount():
    store, _ = _store(rowcount=1)
    assert store.delete("employees", "E1").data == "E1"

    store, _ = _store(rowcount=0)
    assert store.delete("employees", "E1").error.kind == FailureKind.NOT_FOUND
