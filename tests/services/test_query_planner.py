"""Tests for listing queries planned over index buckets."""

import asyncio

import pytest

from directory_index.schemas import BusinessQuery
from directory_index.services import QueryPlanner, load_businesses
from directory_index.services.query_planner import gather_limited, page_number


def test_select_keys_without_filters():
    planner = QueryPlanner(entity_store=None)
    assert planner.select_keys(BusinessQuery()) == ["businesses:list"]


def test_select_keys_with_every_filter():
    planner = QueryPlanner(entity_store=None)
    query = BusinessQuery(category="c1", subcategory="s1", featured=False, active=True)
    assert planner.select_keys(query) == [
        "businesses:list",
        "index:category:c1",
        "index:subcategory:s1",
        "index:featured:false",
        "index:active:true",
    ]


@pytest.mark.parametrize("offset,limit,expected", [(0, 10, 1), (9, 10, 1), (10, 10, 2), (7, 3, 3)])
def test_page_number(offset, limit, expected):
    assert page_number(offset, limit) == expected


@pytest.mark.asyncio
async def test_matching_ids_is_intersection_of_filters(
    query_planner: QueryPlanner, business_service, make_business
):
    a = await business_service.create(make_business("A", category_id="c1", featured=True))
    b = await business_service.create(make_business("B", category_id="c1", featured=False))
    c = await business_service.create(make_business("C", category_id="c2", featured=True))

    assert set(await query_planner.matching_ids(BusinessQuery())) == {a.id, b.id, c.id}
    assert set(await query_planner.matching_ids(BusinessQuery(category="c1"))) == {a.id, b.id}
    assert await query_planner.matching_ids(BusinessQuery(category="c1", featured=True)) == [a.id]
    assert await query_planner.matching_ids(BusinessQuery(category="c3")) == []


@pytest.mark.asyncio
async def test_load_businesses_keeps_order_and_reports_stale(
    entity_store, business_service, make_business
):
    first = await business_service.create(make_business("First"))
    second = await business_service.create(make_business("Second"))

    loaded = await load_businesses(entity_store, [second.id, "ghost", first.id], concurrency=1)

    assert [b.id for b in loaded.businesses] == [second.id, first.id]
    assert loaded.stale_ids == ["ghost"]


def test_business_query_rejects_bad_limits():
    with pytest.raises(ValueError):
        BusinessQuery(limit=0)
    with pytest.raises(ValueError):
        BusinessQuery(limit=101)
    with pytest.raises(ValueError):
        BusinessQuery(offset=-1)


@pytest.mark.asyncio
async def test_gather_limited_bounds_calls_in_flight():
    in_flight = 0
    peak = 0

    async def call(value: int) -> int:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        return value * 2

    results = await gather_limited((call(i) for i in range(20)), concurrency=3)

    assert results == [i * 2 for i in range(20)]
    assert peak == 3


@pytest.mark.asyncio
async def test_gather_limited_empty():
    assert await gather_limited([]) == []
