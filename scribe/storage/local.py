"""
Local storage implementations for development and tests.

In-memory, no external services. Every primitive runs under a single
asyncio lock so each one is atomic with respect to other requests, and
documents are deep-copied on the way in and out.
"""

from __future__ import annotations

import asyncio
import copy
from typing import Any, Sequence

from scribe.core.errors import DuplicateKeyError
from scribe.storage.base import MetadataStorage, SortSpec, StorageProvider


# =============================================================================
# In-Memory Metadata Storage
# =============================================================================


def _matches(doc: dict[str, Any], filters: dict[str, Any] | None) -> bool:
    if not filters:
        return True
    return all(doc.get(key) == value for key, value in filters.items())


class InMemoryMetadataStorage(MetadataStorage):
    """In-memory document storage."""

    def __init__(self):
        self._data: dict[str, dict[str, dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._data.setdefault(collection, {})

    async def insert(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: Sequence[str] = (),
    ) -> None:
        async with self._lock:
            docs = self._collection(collection)
            if id in docs:
                raise DuplicateKeyError(["id"], f"Duplicate id in {collection}: {id}")

            clashes = [
                field for field in unique
                if any(doc.get(field) == data.get(field) for doc in docs.values())
            ]
            if clashes:
                raise DuplicateKeyError(clashes, f"Duplicate {', '.join(clashes)} in {collection}")

            docs[id] = {**copy.deepcopy(data), "id": id}

    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        doc = self._collection(collection).get(id)
        return copy.deepcopy(doc) if doc is not None else None

    async def find_one(
        self,
        collection: str,
        any_of: Sequence[dict[str, Any]],
    ) -> dict[str, Any] | None:
        for doc in self._collection(collection).values():
            if any(_matches(doc, filters) for filters in any_of):
                return copy.deepcopy(doc)
        return None

    async def delete(self, collection: str, id: str) -> bool:
        async with self._lock:
            docs = self._collection(collection)
            if id in docs:
                del docs[id]
                return True
            return False

    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: SortSpec = (),
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        results = [doc for doc in self._collection(collection).values() if _matches(doc, filters)]
        sort = list(sort)

        # Ties keep insertion order, running in the direction of the first key
        if sort and sort[0][1]:
            results.reverse()

        # Apply sort keys last-to-first so the first key wins (stable sort)
        for field, descending in reversed(sort):
            results.sort(key=lambda doc: doc.get(field), reverse=descending)

        return copy.deepcopy(results[offset:offset + limit])

    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        return sum(1 for doc in self._collection(collection).values() if _matches(doc, filters))

    async def update(
        self,
        collection: str,
        id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            doc.update(copy.deepcopy(updates))
            return copy.deepcopy(doc)

    async def increment(
        self,
        collection: str,
        id: str,
        field: str,
        amount: int = 1,
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            doc[field] = doc.get(field, 0) + amount
            return copy.deepcopy(doc)

    async def push(
        self,
        collection: str,
        id: str,
        field: str,
        value: Any,
    ) -> dict[str, Any] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            doc.setdefault(field, []).append(copy.deepcopy(value))
            return copy.deepcopy(doc)

    async def toggle_member(
        self,
        collection: str,
        id: str,
        field: str,
        value: Any,
    ) -> tuple[bool, int] | None:
        async with self._lock:
            doc = self._collection(collection).get(id)
            if doc is None:
                return None
            members = doc.setdefault(field, [])
            if value in members:
                members.remove(value)
                return False, len(members)
            members.append(value)
            return True, len(members)


# =============================================================================
# Factory
# =============================================================================


def create_local_storage() -> StorageProvider:
    """Create a StorageProvider with local implementations."""
    return StorageProvider(metadata=InMemoryMetadataStorage())
