"""Document store contract.

Every operation returns a :class:`StoreResult`; expected failures
(not found, permission denied, conflict, backend unavailable) travel as data in
``StoreResult.error`` instead of being raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol, Sequence

from ..core.exceptions import AlreadyExistsError, NotFoundError, StoreError, ValidationError

Document = dict[str, Any]
Filter = tuple[str, str, Any]

FILTER_OPS = frozenset({"==", "!=", "<", "<=", ">", ">=", "in"})


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class StoreFailure:
    kind: FailureKind
    message: str
    cause: Optional[BaseException] = None


@dataclass(frozen=True)
class StoreResult:
    data: Any = None
    error: Optional[StoreFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DocumentStore(Protocol):
    """Generic persistence over named collections.

    Documents returned by ``get``/``list`` carry their id under ``"id"``.
    """

    def get(self, collection: str, doc_id: str) -> StoreResult:
        """``data`` is the document, or None when it does not exist."""

        raise NotImplementedError

    def list(self, collection: str, filters: Sequence[Filter] = ()) -> StoreResult:
        raise NotImplementedError

    def create(self, collection: str, data: Document, *, doc_id: Optional[str] = None) -> StoreResult:
        """``data`` is the new id. A taken ``doc_id`` yields a CONFLICT failure."""

        raise NotImplementedError

    def update(self, collection: str, doc_id: str, partial: Document) -> StoreResult:
        """Shallow merge of ``partial``. Missing documents yield NOT_FOUND."""

        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> StoreResult:
        raise NotImplementedError


def validate_filters(filters: Sequence[Filter]) -> None:
    for flt in filters:
        if len(flt) != 3 or flt[1] not in FILTER_OPS:
            raise ValidationError(f"Unsupported filter: {flt!r}")


def matches(doc: Document, filters: Sequence[Filter]) -> bool:
    """Evaluate ``(field, op, value)`` filters against one document.

    Range comparisons against a missing field or an incomparable type are
    treated as non-matching.
    """

    for field_name, op, expected in filters:
        actual = doc.get(field_name)
        if op == "==":
            ok = actual == expected
        elif op == "!=":
            ok = actual != expected
        elif op == "in":
            ok = actual in expected
        else:
            if actual is None:
                return False
            try:
                if op == "<":
                    ok = actual < expected
                elif op == "<=":
                    ok = actual <= expected
                elif op == ">":
                    ok = actual > expected
                else:
                    ok = actual >= expected
            except TypeError:
                return False
        if not ok:
            return False
    return True


def unwrap(result: StoreResult, what: str) -> Any:
    """Return ``result.data`` or raise the matching domain exception.

    The adapter's original exception (if any) is kept as ``__cause__``.
    """

    if result.error is None:
        return result.data

    failure = result.error
    message = f"{what}: {failure.message}"
    if failure.kind == FailureKind.NOT_FOUND:
        raise NotFoundError(message) from failure.cause
    if failure.kind == FailureKind.CONFLICT:
        raise AlreadyExistsError(message) from failure.cause
    raise StoreError(message) from failure.cause
