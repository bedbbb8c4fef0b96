"""Index-intersection planner for filtered business listings."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, List, TypeVar

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.schemas.business import Business
from directory_index.schemas.query import BusinessPage, BusinessQuery
from directory_index.search import keys

DEFAULT_LOAD_CONCURRENCY = 16

T = TypeVar("T")


async def gather_limited(
    awaitables: Iterable[Awaitable[T]], concurrency: int = DEFAULT_LOAD_CONCURRENCY
) -> List[T]:
    """Await everything with at most ``concurrency`` store calls in flight, keeping order."""
    semaphore = asyncio.Semaphore(concurrency)

    async def limited(awaitable: Awaitable[T]) -> T:
        async with semaphore:
            return await awaitable

    return list(await asyncio.gather(*(limited(awaitable) for awaitable in awaitables)))


@dataclass
class LoadResult:
    """Records loaded for a list of indexed ids.

    Attributes:
        businesses: Records that exist, in the order of the requested ids
        stale_ids: Indexed ids with no record behind them
    """

    businesses: List[Business] = field(default_factory=list)
    stale_ids: List[str] = field(default_factory=list)


async def load_businesses(
    store: EntityStore,
    business_ids: Iterable[str],
    concurrency: int = DEFAULT_LOAD_CONCURRENCY,
) -> LoadResult:
    """Fetch business records concurrently.

    Missing records are dangling index entries. They are reported in
    ``stale_ids`` and skipped, never raised.
    """
    ids = list(business_ids)
    blobs = await gather_limited(
        (store.get_field(keys.business_key(business_id), keys.RECORD_FIELD) for business_id in ids),
        concurrency,
    )

    result = LoadResult()
    for business_id, blob in zip(ids, blobs):
        if blob is None:
            result.stale_ids.append(business_id)
        else:
            result.businesses.append(Business.model_validate_json(blob))

    if result.stale_ids:
        logger.warning(
            f"Skipped {len(result.stale_ids)} stale index references: {result.stale_ids[:10]}"
        )
    return result


def page_number(offset: int, limit: int) -> int:
    """Page number for an offset, starting at 1."""
    return offset // limit + 1


_SORT_KEYS: dict[str, Callable[[Business], Any]] = {
    "name": lambda business: business.name,
    "rating": lambda business: business.rating,
    "createdAt": lambda business: business.created_at.timestamp(),
    "updatedAt": lambda business: business.updated_at.timestamp(),
}


class QueryPlanner:
    """Answers listing queries by intersecting index buckets."""

    def __init__(self, entity_store: EntityStore, load_concurrency: int = DEFAULT_LOAD_CONCURRENCY):
        self.entity_store = entity_store
        self.load_concurrency = load_concurrency

    def select_keys(self, query: BusinessQuery) -> List[str]:
        """The full business list bucket plus one bucket per active filter."""
        selected = [keys.BUSINESS_LIST_KEY]
        if query.category:
            selected.append(keys.category_index(query.category))
        if query.subcategory:
            selected.append(keys.subcategory_index(query.subcategory))
        if query.featured is not None:
            selected.append(keys.featured_index(query.featured))
        if query.active is not None:
            selected.append(keys.active_index(query.active))
        return selected

    async def matching_ids(self, query: BusinessQuery) -> List[str]:
        selected = self.select_keys(query)
        if len(selected) == 1:
            return await self.entity_store.members_of(selected[0])
        return await self.entity_store.intersect_sets(*selected)

    async def list(self, query: BusinessQuery) -> BusinessPage:
        """Filter, sort and paginate businesses.

        ``total`` counts matches before pagination so clients can compute the
        number of pages.
        """
        business_ids = await self.matching_ids(query)
        loaded = await load_businesses(self.entity_store, business_ids, self.load_concurrency)

        ordered = sorted(
            loaded.businesses,
            key=_SORT_KEYS[query.sort_by],
            reverse=query.sort_order == "DESC",
        )

        total = len(ordered)
        items = ordered[query.offset : query.offset + query.limit]
        logger.debug(
            f"Listed businesses: filters={self.select_keys(query)[1:]}, "
            f"total={total}, offset={query.offset}, limit={query.limit}"
        )
        return BusinessPage(
            items=items,
            total=total,
            page=page_number(query.offset, query.limit),
            limit=query.limit,
            stale_ids=loaded.stale_ids,
        )
