from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .base import Document, DocumentStore, Filter, StoreResult

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    value: Any
    expires_at: float


class CachedDocumentStore:
    """Read-through cache in front of another DocumentStore.

    Successful ``get``/``list`` results are kept for ``ttl_seconds``. Any write
    to a collection drops every cached entry of that collection, so a reader
    never sees data older than its own last write.
    """

    def __init__(
        self,
        inner: DocumentStore,
        *,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._inner = inner
        self._ttl = float(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, dict[tuple, _Entry]] = {}
        # bumped on every write; a read started before a write is not cached
        self._generations: dict[str, int] = {}
        self.hits = 0
        self.misses = 0

    @property
    def inner(self) -> DocumentStore:
        return self._inner

    def _generation(self, collection: str) -> int:
        with self._lock:
            return self._generations.setdefault(collection, 0)

    def _lookup(self, collection: str, key: tuple) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(collection, {}).get(key)
            if entry is None:
                self.misses += 1
                return None
            if entry.expires_at <= self._clock():
                del self._entries[collection][key]
                self.misses += 1
                return None
            self.hits += 1
            return copy.deepcopy(entry.value)

    def _remember(self, collection: str, key: tuple, value: Any, generation: int) -> None:
        with self._lock:
            if self._generations.get(collection, 0) != generation:
                return
            self._entries.setdefault(collection, {})[key] = _Entry(copy.deepcopy(value), self._clock() + self._ttl)

    def invalidate(self, collection: Optional[str] = None) -> None:
        with self._lock:
            if collection is None:
                self._entries.clear()
                for name in self._generations:
                    self._generations[name] += 1
            else:
                dropped = len(self._entries.pop(collection, None) or ())
                self._generations[collection] = self._generations.get(collection, 0) + 1
        if collection is not None and dropped:
            logger.debug("cache: dropped %d entries of %s", dropped, collection)

    def get(self, collection: str, doc_id: str) -> StoreResult:
        key = ("get", str(doc_id))
        cached = self._lookup(collection, key)
        if cached is not None:
            return cached
        generation = self._generation(collection)
        result = self._inner.get(collection, doc_id)
        if result.ok:
            self._remember(collection, key, result, generation)
        return result

    def list(self, collection: str, filters: Sequence[Filter] = ()) -> StoreResult:
        key = ("list", repr(tuple(tuple(f) for f in filters)))
        cached = self._lookup(collection, key)
        if cached is not None:
            return cached
        generation = self._generation(collection)
        result = self._inner.list(collection, filters)
        if result.ok:
            self._remember(collection, key, result, generation)
        return result

    def create(self, collection: str, data: Document, *, doc_id: Optional[str] = None) -> StoreResult:
        try:
            return self._inner.create(collection, data, doc_id=doc_id)
        finally:
            self.invalidate(collection)

    def update(self, collection: str, doc_id: str, partial: Document) -> StoreResult:
        try:
            return self._inner.update(collection, doc_id, partial)
        finally:
            self.invalidate(collection)

    def delete(self, collection: str, doc_id: str) -> StoreResult:
        try:
            return self._inner.delete(collection, doc_id)
        finally:
            self.invalidate(collection)
