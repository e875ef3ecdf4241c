from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .base import Document, FailureKind, Filter, StoreFailure, StoreResult, matches, validate_filters

logger = logging.getLogger(__name__)


def _failure(exc: mysql.connector.Error, what: str) -> StoreResult:
    if exc.errno == errorcode.ER_DUP_ENTRY:
        kind = FailureKind.CONFLICT
    elif exc.errno in (errorcode.ER_ACCESS_DENIED_ERROR, errorcode.ER_TABLEACCESS_DENIED_ERROR, errorcode.ER_DBACCESS_DENIED_ERROR):
        kind = FailureKind.PERMISSION_DENIED
    else:
        kind = FailureKind.UNAVAILABLE
    logger.warning("mysql store %s failed: %s", what, exc)
    return StoreResult(error=StoreFailure(kind, f"{what} failed: {exc.msg}", cause=exc))


def _load(raw: Any) -> Document:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return dict(raw or {})


def _json_path(field_name: str) -> str:
    return '$."' + field_name.replace('"', '\\"') + '"'


class MySQLDocumentStore:
    """Document store backed by a single MySQL table with a JSON column.

    Equality filters are pushed down with JSON_EXTRACT; the remaining
    operators are evaluated in Python on the fetched rows.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, table: str = "documents"):
        self._conn_factory = conn_factory
        self._table = table

    def get(self, collection: str, doc_id: str) -> StoreResult:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT doc_id, data FROM {self._table} WHERE collection=%s AND doc_id=%s",
                    (collection, str(doc_id)),
                )
                row = fetchone(cur)
        except mysql.connector.Error as exc:
            return _failure(exc, f"get {collection}/{doc_id}")
        if not row:
            return StoreResult(data=None)
        doc = _load(row["data"])
        doc["id"] = row["doc_id"]
        return StoreResult(data=doc)

    def list(self, collection: str, filters: Sequence[Filter] = ()) -> StoreResult:
        validate_filters(filters)
        clauses = ["collection=%s"]
        params: list[object] = [collection]
        for field_name, op, value in filters:
            if op == "==" and value is not None:
                clauses.append("JSON_EXTRACT(data, %s) = CAST(%s AS JSON)")
                params.extend([_json_path(field_name), json.dumps(value)])
        where = " AND ".join(clauses)

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"SELECT doc_id, data FROM {self._table} WHERE {where}", tuple(params))
                rows = fetchall(cur)
        except mysql.connector.Error as exc:
            return _failure(exc, f"list {collection}")

        out: list[Document] = []
        for r in rows:
            doc = _load(r["data"])
            if matches(doc, filters):
                doc["id"] = r["doc_id"]
                out.append(doc)
        return StoreResult(data=out)

    def create(self, collection: str, data: Document, *, doc_id: Optional[str] = None) -> StoreResult:
        new_id = str(doc_id) if doc_id else uuid.uuid4().hex
        payload = {k: v for k, v in data.items() if k != "id"}
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"INSERT INTO {self._table}(collection, doc_id, data) VALUES(%s,%s,%s)",
                    (collection, new_id, json.dumps(payload, default=str)),
                )
        except mysql.connector.Error as exc:
            return _failure(exc, f"create {collection}/{new_id}")
        return StoreResult(data=new_id)

    def update(self, collection: str, doc_id: str, partial: Document) -> StoreResult:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT data FROM {self._table} WHERE collection=%s AND doc_id=%s FOR UPDATE",
                    (collection, str(doc_id)),
                )
                row = fetchone(cur)
                if not row:
                    return StoreResult(error=StoreFailure(FailureKind.NOT_FOUND, f"{collection}/{doc_id} not found"))
                merged = _load(row["data"])
                merged.update({k: v for k, v in partial.items() if k != "id"})
                cur.execute(
                    f"UPDATE {self._table} SET data=%s WHERE collection=%s AND doc_id=%s",
                    (json.dumps(merged, default=str), collection, str(doc_id)),
                )
        except mysql.connector.Error as exc:
            return _failure(exc, f"update {collection}/{doc_id}")
        return StoreResult(data=str(doc_id))

    def delete(self, collection: str, doc_id: str) -> StoreResult:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"DELETE FROM {self._table} WHERE collection=%s AND doc_id=%s",
                    (collection, str(doc_id)),
                )
                deleted = cur.rowcount
        except mysql.connector.Error as exc:
            return _failure(exc, f"delete {collection}/{doc_id}")
        if not deleted:
            return StoreResult(error=StoreFailure(FailureKind.NOT_FOUND, f"{collection}/{doc_id} not found"))
        return StoreResult(data=str(doc_id))
