"""Keeps secondary index buckets consistent with business records."""

import time
from typing import Callable, List, Optional

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.schemas.business import Business
from directory_index.search import keys
from directory_index.search.tokenizer import index_terms


def index_keys(business: Business) -> List[str]:
    """Every index bucket the business must belong to given its current attributes."""
    bucket_keys = [
        keys.category_index(business.category_id),
        keys.subcategory_index(business.subcategory_id),
        keys.featured_index(business.featured),
        keys.active_index(business.active),
    ]
    bucket_keys.extend(
        keys.search_index(term) for term in index_terms(business.name, business.keywords)
    )
    return bucket_keys


class IndexMaintainer:
    """Applies and removes a business's index memberships.

    Updates must call ``remove_indexes`` with the record as it was before the
    change and then ``apply_indexes`` with the new record. Using the new record
    for removal leaks the old buckets permanently. Callers run both inside one
    ``EntityStore.atomic()`` block and pass the yielded store in.
    """

    def __init__(self, entity_store: EntityStore, clock: Callable[[], float] = time.time):
        self.entity_store = entity_store
        self.clock = clock

    def _recency_score(self) -> float:
        return float(int(self.clock() * 1000))

    async def apply_indexes(self, business: Business, store: Optional[EntityStore] = None) -> None:
        """Add the business to its buckets and stamp it in the recency set."""
        store = store or self.entity_store
        for key in index_keys(business):
            await store.add_to_set(key, business.id)
        await store.add_scored(keys.RECENCY_KEY, self._recency_score(), business.id)
        logger.debug(f"Applied indexes for business {business.id}")

    async def remove_indexes(self, business: Business, store: Optional[EntityStore] = None) -> None:
        """Remove the business from the buckets matching this snapshot."""
        store = store or self.entity_store
        for key in index_keys(business):
            await store.remove_from_set(key, business.id)
        await store.remove_scored(keys.RECENCY_KEY, business.id)
        logger.debug(f"Removed indexes for business {business.id}")

    async def replace_indexes(
        self, old: Business, new: Business, store: Optional[EntityStore] = None
    ) -> None:
        """Move a business from the buckets of ``old`` to the buckets of ``new``."""
        if old.id != new.id:
            raise ValueError(f"Cannot move indexes from {old.id} to {new.id}")
        await self.remove_indexes(old, store)
        await self.apply_indexes(new, store)
