from __future__ import annotations

import copy
import threading
import uuid
from typing import Optional, Sequence

from .base import Document, FailureKind, Filter, StoreFailure, StoreResult, matches, validate_filters


class InMemoryDocumentStore:
    """Process-local document store used for development and tests."""

    def __init__(self, seed: Optional[dict[str, dict[str, Document]]] = None):
        self._lock = threading.Lock()
        self._collections: dict[str, dict[str, Document]] = {}
        for collection, docs in (seed or {}).items():
            self._collections[collection] = {str(k): copy.deepcopy(v) for k, v in docs.items()}

    @staticmethod
    def _with_id(doc_id: str, data: Document) -> Document:
        out = copy.deepcopy(data)
        out["id"] = doc_id
        return out

    def get(self, collection: str, doc_id: str) -> StoreResult:
        with self._lock:
            data = self._collections.get(collection, {}).get(str(doc_id))
            return StoreResult(data=self._with_id(str(doc_id), data) if data is not None else None)

    def list(self, collection: str, filters: Sequence[Filter] = ()) -> StoreResult:
        validate_filters(filters)
        with self._lock:
            docs = self._collections.get(collection, {})
            rows = [self._with_id(doc_id, data) for doc_id, data in docs.items() if matches(data, filters)]
        return StoreResult(data=rows)

    def create(self, collection: str, data: Document, *, doc_id: Optional[str] = None) -> StoreResult:
        new_id = str(doc_id) if doc_id else uuid.uuid4().hex
        payload = {k: v for k, v in copy.deepcopy(data).items() if k != "id"}
        with self._lock:
            docs = self._collections.setdefault(collection, {})
            if new_id in docs:
                return StoreResult(error=StoreFailure(FailureKind.CONFLICT, f"{collection}/{new_id} already exists"))
            docs[new_id] = payload
        return StoreResult(data=new_id)

    def update(self, collection: str, doc_id: str, partial: Document) -> StoreResult:
        with self._lock:
            docs = self._collections.get(collection, {})
            current = docs.get(str(doc_id))
            if current is None:
                return StoreResult(error=StoreFailure(FailureKind.NOT_FOUND, f"{collection}/{doc_id} not found"))
            current.update({k: copy.deepcopy(v) for k, v in partial.items() if k != "id"})
        return StoreResult(data=str(doc_id))

    def delete(self, collection: str, doc_id: str) -> StoreResult:
        with self._lock:
            docs = self._collections.get(collection, {})
            if docs.pop(str(doc_id), None) is None:
                return StoreResult(error=StoreFailure(FailureKind.NOT_FOUND, f"{collection}/{doc_id} not found"))
        return StoreResult(data=str(doc_id))
