"""Entity store interface.

The store is a key-value service offering hash fields, sets and sorted sets.
Services keep records and index buckets in it under namespaced string keys.

The actual implementations are backend-specific:
- SQLAlchemyEntityStore: hashes, sets and sorted sets kept in three tables
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Optional


class EntityStore(ABC):
    """Abstract key-value store consumed by the index and search services.

    Set reads return members sorted lexicographically so that callers observe a
    stable collection order for a fixed store state.
    """

    @abstractmethod
    async def get_field(self, key: str, field: str) -> Optional[str]:
        """Return a hash field value, or None when key or field is missing."""

    @abstractmethod
    async def set_field(self, key: str, field: str, value: str) -> None:
        """Create or overwrite a hash field."""

    @abstractmethod
    async def delete_field(self, key: str, field: str) -> bool:
        """Remove a hash field. Returns True if it existed."""

    @abstractmethod
    async def add_to_set(self, key: str, *members: str) -> int:
        """Add members to a set, returning how many were not already present."""

    @abstractmethod
    async def remove_from_set(self, key: str, *members: str) -> int:
        """Remove members from a set, returning how many were present."""

    @abstractmethod
    async def members_of(self, key: str) -> list[str]:
        """Return every member of a set. A missing key is an empty set."""

    @abstractmethod
    async def intersect_sets(self, *keys: str) -> list[str]:
        """Return members present in all of the given sets."""

    @abstractmethod
    async def set_size(self, key: str) -> int:
        """Return the cardinality of a set."""

    @abstractmethod
    async def keys_matching(self, pattern: str) -> list[str]:
        """Return keys of any type matching a glob pattern (``*``, ``?``, ``[...]``)."""

    @abstractmethod
    async def add_scored(self, key: str, score: float, member: str) -> None:
        """Add a member to a sorted set, replacing its score if present."""

    @abstractmethod
    async def remove_scored(self, key: str, *members: str) -> int:
        """Remove members from a sorted set."""

    @abstractmethod
    async def scored_members(
        self, key: str, start: int = 0, stop: int = -1, descending: bool = True
    ) -> list[str]:
        """Return sorted-set members by score between inclusive ranks start and stop."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Drop keys entirely, returning how many existed."""

    @abstractmethod
    async def ping(self) -> bool:
        """Round-trip to the store."""

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager["EntityStore"]:
        """Open a unit of work.

        Operations issued through the yielded store are applied together when the
        block exits cleanly and discarded if it raises. Backends without native
        transactions may yield themselves, which degrades to best effort. Backends
        with transactions isolate units from each other, so a value read inside a
        unit is still current when the unit writes. Calls on the yielded store
        must be awaited one at a time.
        """
