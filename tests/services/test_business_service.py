"""Tests for BusinessService writes, listings and stats."""

import asyncio
import itertools

import pytest

from directory_index.schemas import BusinessQuery, BusinessUpdate
from directory_index.search import keys
from directory_index.services import (
    BusinessService,
    EntityNotFoundError,
    IndexMaintainer,
    QueryPlanner,
    index_keys,
)


async def assert_indexes_consistent(entity_store, reconcile_service):
    """Every bucket holds exactly the ids whose records match it."""
    report = await reconcile_service.reconcile(dry_run=True)
    assert report.removed == {}
    assert report.added == {}
    assert report.stale_ids == set()


@pytest.mark.asyncio
async def test_create_business(business_service: BusinessService, entity_store, make_business):
    business = await business_service.create(
        make_business("Corner Bakery", keywords=["bread"], featured=True)
    )

    assert business.id
    assert business.created_at == business.updated_at
    assert await entity_store.members_of(keys.BUSINESS_LIST_KEY) == [business.id]
    for key in index_keys(business):
        assert business.id in await entity_store.members_of(key)
    assert await entity_store.scored_members(keys.RECENCY_KEY) == [business.id]

    found = await business_service.get(business.id)
    assert found == business


@pytest.mark.asyncio
async def test_record_is_stored_with_camel_case_fields(business_service, entity_store, make_business):
    business = await business_service.create(make_business(review_count=3))
    blob = await entity_store.get_field(keys.business_key(business.id), keys.RECORD_FIELD)

    assert '"reviewCount":3' in blob
    assert '"categoryId":"c1"' in blob


@pytest.mark.asyncio
async def test_get_missing_business(business_service):
    with pytest.raises(EntityNotFoundError) as exc_info:
        await business_service.get("nope")
    assert exc_info.value.entity_id == "nope"


@pytest.mark.asyncio
async def test_bulk_create(business_service, entity_store, reconcile_service, make_business):
    created = await business_service.bulk_create(
        [make_business(f"Shop {i}", category_id=f"c{i % 2}") for i in range(5)]
    )

    assert len(created) == 5
    assert await entity_store.set_size(keys.BUSINESS_LIST_KEY) == 5
    assert await entity_store.set_size("index:category:c0") == 3
    assert await entity_store.set_size("index:category:c1") == 2
    await assert_indexes_consistent(entity_store, reconcile_service)


@pytest.mark.asyncio
async def test_bulk_create_empty(business_service):
    assert await business_service.bulk_create([]) == []


@pytest.mark.asyncio
async def test_update_moves_indexes(business_service, entity_store, reconcile_service, make_business):
    business = await business_service.create(make_business("Old Name Diner", category_id="c1"))

    updated = await business_service.update(
        business.id, BusinessUpdate(name="New Grill", category_id="c2", active=False)
    )

    assert updated.name == "New Grill"
    assert updated.created_at == business.created_at
    assert updated.updated_at >= business.updated_at
    # untouched fields survive a partial update
    assert updated.subcategory_id == business.subcategory_id

    assert await entity_store.members_of("index:category:c1") == []
    assert await entity_store.members_of("index:category:c2") == [business.id]
    assert await entity_store.members_of("index:active:true") == []
    assert await entity_store.members_of("index:active:false") == [business.id]
    assert await entity_store.members_of("index:search:diner") == []
    assert await entity_store.members_of("index:search:grill") == [business.id]
    await assert_indexes_consistent(entity_store, reconcile_service)


@pytest.mark.asyncio
async def test_update_accepts_camel_case_payload(business_service, make_business):
    business = await business_service.create(make_business())
    updated = await business_service.update(
        business.id, BusinessUpdate.model_validate({"reviewCount": 12})
    )
    assert updated.review_count == 12


@pytest.mark.asyncio
async def test_update_missing_business(business_service):
    with pytest.raises(EntityNotFoundError):
        await business_service.update("nope", BusinessUpdate(name="x"))


@pytest.mark.asyncio
async def test_delete_removes_record_and_indexes(business_service, entity_store, make_business):
    business = await business_service.create(make_business("Gone Cafe", keywords=["coffee"]))

    await business_service.delete(business.id)

    with pytest.raises(EntityNotFoundError):
        await business_service.get(business.id)
    assert await entity_store.members_of(keys.BUSINESS_LIST_KEY) == []
    for key in await entity_store.keys_matching("index:*"):
        assert business.id not in await entity_store.members_of(key)
    assert await entity_store.scored_members(keys.RECENCY_KEY) == []


@pytest.mark.asyncio
async def test_delete_missing_business(business_service):
    with pytest.raises(EntityNotFoundError):
        await business_service.delete("nope")


@pytest.mark.asyncio
async def test_indexes_consistent_across_write_sequence(
    business_service, entity_store, reconcile_service, make_business
):
    a = await business_service.create(make_business("Alpha Books", category_id="c1"))
    await assert_indexes_consistent(entity_store, reconcile_service)

    b = await business_service.create(make_business("Beta Books", category_id="c2", featured=True))
    await assert_indexes_consistent(entity_store, reconcile_service)

    await business_service.update(a.id, BusinessUpdate(category_id="c2", keywords=["comics"]))
    await assert_indexes_consistent(entity_store, reconcile_service)

    await business_service.update(b.id, BusinessUpdate(featured=False, name="Beta Music"))
    await assert_indexes_consistent(entity_store, reconcile_service)

    await business_service.delete(a.id)
    await assert_indexes_consistent(entity_store, reconcile_service)

    assert await entity_store.members_of("index:category:c2") == [b.id]
    assert await entity_store.members_of("index:search:books") == []


@pytest.mark.asyncio
async def test_list_scenario_category_and_active(business_service, make_business):
    a = await business_service.create(make_business("A", category_id="c1", active=True))
    await business_service.create(make_business("B", category_id="c1", active=False))
    await business_service.create(make_business("C", category_id="c2", active=True))

    page = await business_service.list(BusinessQuery(category="c1", active=True))

    assert [item.id for item in page.items] == [a.id]
    assert page.total == 1


@pytest.mark.asyncio
async def test_list_without_filters_returns_everything(business_service, make_business):
    created = [await business_service.create(make_business(f"Shop {i}")) for i in range(3)]

    page = await business_service.list(BusinessQuery())

    assert {item.id for item in page.items} == {b.id for b in created}
    assert page.total == 3
    assert page.page == 1
    assert page.limit == 10


@pytest.mark.asyncio
async def test_list_sorting(business_service, make_business):
    await business_service.create(make_business("Bravo", rating=3))
    await business_service.create(make_business("Alpha", rating=5))
    await business_service.create(make_business("Charlie", rating=1))

    by_name = await business_service.list(BusinessQuery(sort_by="name", sort_order="ASC"))
    assert [b.name for b in by_name.items] == ["Alpha", "Bravo", "Charlie"]

    by_rating = await business_service.list(BusinessQuery(sort_by="rating", sort_order="DESC"))
    assert [b.name for b in by_rating.items] == ["Alpha", "Bravo", "Charlie"]

    newest = await business_service.list(BusinessQuery())
    assert [b.name for b in newest.items] == ["Charlie", "Alpha", "Bravo"]


@pytest.mark.asyncio
@pytest.mark.parametrize("offset,limit", [(0, 3), (3, 3), (6, 3), (7, 3), (12, 5), (2, 100)])
async def test_list_pagination(business_service, make_business, offset, limit):
    await business_service.bulk_create([make_business(f"Shop {i:02d}") for i in range(7)])

    page = await business_service.list(
        BusinessQuery(offset=offset, limit=limit, sort_by="name", sort_order="ASC")
    )

    assert page.total == 7
    assert len(page.items) == min(limit, max(0, 7 - offset))
    assert page.page == offset // limit + 1
    assert [b.name for b in page.items] == [f"Shop {i:02d}" for i in range(7)][offset : offset + limit]


@pytest.mark.asyncio
async def test_list_reports_stale_ids(business_service, entity_store, make_business):
    business = await business_service.create(make_business("Real"))
    await entity_store.add_to_set(keys.BUSINESS_LIST_KEY, "ghost")

    page = await business_service.list(BusinessQuery())

    assert [b.id for b in page.items] == [business.id]
    assert page.stale_ids == ["ghost"]
    assert page.total == 1


@pytest.mark.asyncio
async def test_stats(business_service, category_service, food_category, make_business):
    await business_service.create(make_business("One", featured=True))
    await business_service.create(make_business("Two", active=False))

    stats = await business_service.stats()

    assert stats.total_businesses == 2
    assert stats.active_businesses == 1
    assert stats.featured_businesses == 1
    assert stats.categories_count == 1


@pytest.mark.asyncio
async def test_recent_ids_newest_first(entity_store, make_business):
    ticks = itertools.count(1_700_000_000)
    maintainer = IndexMaintainer(entity_store, clock=lambda: float(next(ticks)))
    service = BusinessService(entity_store, maintainer, QueryPlanner(entity_store))

    first = await service.create(make_business("First"))
    second = await service.create(make_business("Second"))
    third = await service.create(make_business("Third"))

    assert await service.recent_ids(limit=2) == [third.id, second.id]

    # updating refreshes the recency stamp
    await service.update(first.id, BusinessUpdate(rating=2))
    assert await service.recent_ids(limit=1) == [first.id]


@pytest.mark.asyncio
async def test_recent_ids_with_non_positive_limit(business_service, make_business):
    await business_service.create(make_business("First"))
    await business_service.create(make_business("Second"))

    assert await business_service.recent_ids(limit=0) == []
    assert await business_service.recent_ids(limit=-3) == []


@pytest.mark.asyncio
async def test_concurrent_updates_leave_indexes_consistent(
    business_service, entity_store, reconcile_service, make_business
):
    business = await business_service.create(make_business("Alpha Cafe", category_id="c1"))

    results = await asyncio.gather(
        business_service.update(business.id, BusinessUpdate(category_id="c2", name="Beta Tea")),
        business_service.update(business.id, BusinessUpdate(category_id="c3", name="Gamma Juice")),
    )

    assert len(results) == 2
    report = await reconcile_service.reconcile(dry_run=True)
    assert report.total == 0

    final = await business_service.get(business.id)
    assert final.name in {"Beta Tea", "Gamma Juice"}
    assert await entity_store.members_of(keys.category_index(final.category_id)) == [business.id]
    for category_id in {"c1", "c2", "c3"} - {final.category_id}:
        assert await entity_store.members_of(keys.category_index(category_id)) == []


@pytest.mark.asyncio
async def test_dashboard(business_service, category_service, food_category, make_business):
    ticks = itertools.count(1_700_000_000)
    business_service.index_maintainer.clock = lambda: float(next(ticks))
    first = await business_service.create(make_business("First", featured=True))
    second = await business_service.create(make_business("Second", active=False))
    # a recency entry whose record is gone is skipped
    await business_service.entity_store.add_scored(keys.RECENCY_KEY, 1, "ghost")

    dashboard = await business_service.dashboard(recent=5)

    assert dashboard.total_businesses == 2
    assert dashboard.featured_businesses == 1
    assert dashboard.categories_count == 1
    assert dashboard.total_subcategories == 0
    assert [b.id for b in dashboard.recent_businesses] == [second.id, first.id]