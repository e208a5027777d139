"""
Storage abstraction layer.

All persistence goes through these interfaces. This allows swapping
implementations (in-memory → MongoDB, PostgreSQL, etc.) without changing
application code.

Read-modify-write on a single document must never be done by the caller
against a stale copy. Counters, comment appends and like toggles each
have their own primitive that the adapter applies atomically against
the stored state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from pydantic import BaseModel


# A sort key: (field, descending)
SortSpec = Sequence[tuple[str, bool]]


# =============================================================================
# Storage Interfaces
# =============================================================================


class MetadataStorage(ABC):
    """
    Storage for structured documents (users, posts).

    Implementations raise `TransientStoreError` when the backend is
    unreachable and `DuplicateKeyError` when a unique field collides.
    """

    @abstractmethod
    async def insert(
        self,
        collection: str,
        id: str,
        data: dict[str, Any],
        unique: Sequence[str] = (),
    ) -> None:
        """Insert a new document, rejecting it if any `unique` field collides."""
        pass

    @abstractmethod
    async def get(self, collection: str, id: str) -> dict[str, Any] | None:
        """Get a document by ID."""
        pass

    @abstractmethod
    async def find_one(
        self,
        collection: str,
        any_of: Sequence[dict[str, Any]],
    ) -> dict[str, Any] | None:
        """Get the first document matching any of the filter dicts."""
        pass

    @abstractmethod
    async def delete(self, collection: str, id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: dict[str, Any] | None = None,
        sort: SortSpec = (),
        limit: int = 100,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        """Query documents with optional equality filters, sort and paging."""
        pass

    @abstractmethod
    async def count(self, collection: str, filters: dict[str, Any] | None = None) -> int:
        """Count documents matching the filters."""
        pass

    @abstractmethod
    async def update(
        self,
        collection: str,
        id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Set all `updates` in one write. Returns the new document or None."""
        pass

    @abstractmethod
    async def increment(
        self,
        collection: str,
        id: str,
        field: str,
        amount: int = 1,
    ) -> dict[str, Any] | None:
        """Atomically add `amount` to a numeric field."""
        pass

    @abstractmethod
    async def push(
        self,
        collection: str,
        id: str,
        field: str,
        value: Any,
    ) -> dict[str, Any] | None:
        """Atomically append `value` to a list field."""
        pass

    @abstractmethod
    async def toggle_member(
        self,
        collection: str,
        id: str,
        field: str,
        value: Any,
    ) -> tuple[bool, int] | None:
        """
        Atomically flip membership of `value` in a set-like list field.

        Returns (is_member_after, size_after), or None if the document
        does not exist.
        """
        pass


# =============================================================================
# Storage Provider (dependency injection container)
# =============================================================================


class StorageProvider(BaseModel):
    """
    Container for storage backends.

    Initialize once at app startup with appropriate implementations.
    Services receive this and use the interfaces without knowing
    the underlying implementation.
    """

    model_config = {"arbitrary_types_allowed": True}

    metadata: MetadataStorage


# =============================================================================
# Collection Names (for MetadataStorage)
# =============================================================================


class Collections:
    """Standard collection/table names."""

    USERS = "users"
    POSTS = "posts"
