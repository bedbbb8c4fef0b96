"""Service for business records and their index memberships."""

import uuid
from datetime import datetime, timezone
from typing import List, Sequence

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.schemas.business import (
    Business,
    BusinessCreate,
    BusinessStats,
    BusinessUpdate,
    DashboardStats,
)
from directory_index.schemas.query import BusinessPage, BusinessQuery
from directory_index.search import keys
from directory_index.services.exceptions import EntityNotFoundError
from directory_index.services.index_maintainer import IndexMaintainer
from directory_index.services.query_planner import QueryPlanner, load_businesses


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_business(data: BusinessCreate) -> Business:
    now = _now()
    return Business.model_validate(
        {
            **data.model_dump(),
            "id": str(uuid.uuid4()),
            "created_at": now,
            "updated_at": now,
        }
    )


class BusinessService:
    """Creates, updates and removes businesses together with their indexes.

    Every write runs the record change and the index diff in one
    ``EntityStore.atomic()`` unit so readers never observe a record whose
    indexes are half updated on stores that support transactions.
    """

    def __init__(
        self,
        entity_store: EntityStore,
        index_maintainer: IndexMaintainer,
        query_planner: QueryPlanner,
    ):
        self.entity_store = entity_store
        self.index_maintainer = index_maintainer
        self.query_planner = query_planner

    async def _read(self, store: EntityStore, business_id: str) -> Business:
        blob = await store.get_field(keys.business_key(business_id), keys.RECORD_FIELD)
        if blob is None:
            raise EntityNotFoundError("Business", business_id)
        return Business.model_validate_json(blob)

    async def _write(self, store: EntityStore, business: Business) -> None:
        await store.set_field(keys.business_key(business.id), keys.RECORD_FIELD, business.to_json())

    async def create(self, data: BusinessCreate) -> Business:
        business = _new_business(data)
        async with self.entity_store.atomic() as store:
            await self._write(store, business)
            await store.add_to_set(keys.BUSINESS_LIST_KEY, business.id)
            await self.index_maintainer.apply_indexes(business, store)

        logger.info(f"Created business {business.id} ({business.name})")
        return business

    async def bulk_create(self, items: Sequence[BusinessCreate]) -> List[Business]:
        """Create many businesses in a single unit of work.

        Records, list membership and every index family for the whole batch are
        committed together.
        """
        businesses = [_new_business(data) for data in items]
        if not businesses:
            return []

        async with self.entity_store.atomic() as store:
            for business in businesses:
                await self._write(store, business)
            await store.add_to_set(keys.BUSINESS_LIST_KEY, *(b.id for b in businesses))
            for business in businesses:
                await self.index_maintainer.apply_indexes(business, store)

        logger.info(f"Bulk created {len(businesses)} businesses")
        return businesses

    async def get(self, business_id: str) -> Business:
        return await self._read(self.entity_store, business_id)

    async def update(self, business_id: str, data: BusinessUpdate) -> Business:
        """Apply a partial update and move the business to its new index buckets."""
        async with self.entity_store.atomic() as store:
            existing = await self._read(store, business_id)
            updated = Business.model_validate(
                {
                    **existing.model_dump(),
                    **data.model_dump(exclude_unset=True),
                    "id": existing.id,
                    "created_at": existing.created_at,
                    "updated_at": _now(),
                }
            )
            await self._write(store, updated)
            await self.index_maintainer.replace_indexes(existing, updated, store)

        logger.info(f"Updated business {business_id}")
        return updated

    async def delete(self, business_id: str) -> None:
        async with self.entity_store.atomic() as store:
            existing = await self._read(store, business_id)
            await store.remove_from_set(keys.BUSINESS_LIST_KEY, business_id)
            await self.index_maintainer.remove_indexes(existing, store)
            await store.delete(keys.business_key(business_id))

        logger.info(f"Deleted business {business_id}")

    async def list(self, query: BusinessQuery) -> BusinessPage:
        return await self.query_planner.list(query)

    async def recent_ids(self, limit: int = 5) -> List[str]:
        """Most recently indexed business ids, newest first."""
        if limit <= 0:
            return []
        return await self.entity_store.scored_members(keys.RECENCY_KEY, 0, limit - 1)

    async def stats(self) -> BusinessStats:
        return BusinessStats(
            total_businesses=await self.entity_store.set_size(keys.BUSINESS_LIST_KEY),
            active_businesses=await self.entity_store.set_size(keys.active_index(True)),
            featured_businesses=await self.entity_store.set_size(keys.featured_index(True)),
            categories_count=await self.entity_store.set_size(keys.CATEGORY_LIST_KEY),
        )

    async def dashboard(self, recent: int = 5) -> DashboardStats:
        """Stats plus subcategory count and the most recently indexed businesses."""
        stats = await self.stats()
        loaded = await load_businesses(
            self.entity_store,
            await self.recent_ids(limit=recent),
            self.query_planner.load_concurrency,
        )
        return DashboardStats(
            **stats.model_dump(),
            total_subcategories=await self.entity_store.set_size(keys.SUBCATEGORY_LIST_KEY),
            recent_businesses=loaded.businesses,
        )
