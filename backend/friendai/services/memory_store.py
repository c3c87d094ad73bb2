# in-memory storage: process-local fallback when mongodb is unreachable
# data lives for the process lifetime only. every access goes through one
# asyncio lock and callers only ever see copies of the stored documents.

import asyncio
import copy
import logging
from typing import Any, Optional

from friendai.services.storage import (
    ENTITIES,
    Query,
    Repository,
    Sort,
    Storage,
    T,
    match_filter,
)

logger = logging.getLogger(__name__)


def _sort_key(field: str):
    # missing values sort before present ones
    return lambda doc: (doc.get(field) is not None, doc.get(field))


class MemoryRepository(Repository[T]):
    """one entity collection held in a dict keyed by id"""

    def __init__(self, name, model, query_type, lock: asyncio.Lock):
        super().__init__(name, model, query_type)
        self._lock = lock
        self._docs: dict[str, dict[str, Any]] = {}
        self._counter = 1

    def _next_id(self) -> str:
        # tagged with the entity type so ids never collide across collections
        new_id = f"mem_{self.name}_{self._counter}"
        self._counter += 1
        return new_id

    def _select(self, query: Query) -> list[dict[str, Any]]:
        f = query.to_filter()
        return [doc for doc in self._docs.values() if match_filter(doc, f)]

    def _to_model(self, doc: dict[str, Any]) -> T:
        return self.model.model_validate(copy.deepcopy(doc))

    async def find_one(self, query: Query) -> Optional[T]:
        self._check(query)
        async with self._lock:
            found = self._select(query)
            return self._to_model(found[0]) if found else None

    async def find_many(self, query: Query, sort: Optional[Sort] = None) -> list[T]:
        self._check(query, sort)
        async with self._lock:
            found = self._select(query)
            if sort is not None:
                found = sorted(found, key=_sort_key(sort.field), reverse=sort.descending)
            return [self._to_model(doc) for doc in found]

    async def count(self, query: Query) -> int:
        self._check(query)
        async with self._lock:
            return len(self._select(query))

    async def create(self, data: dict[str, Any]) -> T:
        async with self._lock:
            doc = copy.deepcopy(data)
            doc["id"] = self._next_id()
            record = self.model.model_validate(doc)
            self._docs[doc["id"]] = doc
            return record

    async def update(self, id: str, changes: dict[str, Any]) -> Optional[T]:
        async with self._lock:
            current = self._docs.get(id)
            if current is None:
                return None
            # build a new document rather than mutating the stored one
            merged = {**current, **copy.deepcopy(changes), "id": id}
            record = self.model.model_validate(merged)
            self._docs[id] = merged
            return record

    async def delete(self, query: Query) -> int:
        self._check(query)
        async with self._lock:
            found = self._select(query)
            if not found:
                return 0
            del self._docs[found[0]["id"]]
            return 1


class MemoryStorage(Storage):
    backend = "memory"

    def __init__(self):
        lock = asyncio.Lock()
        repos = {
            name: MemoryRepository(name, model, query_type, lock)
            for name, (model, query_type) in ENTITIES.items()
        }
        super().__init__(**repos)
        logger.info("In-memory storage initialized (data is lost on restart)")
