"""Tests for index membership maintenance."""

from datetime import datetime, timezone

import pytest

from directory_index.schemas import Business
from directory_index.search import keys
from directory_index.services import IndexMaintainer, index_keys

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def business(**overrides) -> Business:
    data = {
        "id": "b1",
        "name": "Blue Bottle Coffee",
        "keywords": ["espresso", "pour over"],
        "category_id": "c1",
        "subcategory_id": "s1",
        "featured": True,
        "active": True,
        "created_at": NOW,
        "updated_at": NOW,
    }
    data.update(overrides)
    return Business(**data)


async def buckets_containing(entity_store, business_id: str) -> list[str]:
    found = []
    for key in await entity_store.keys_matching("index:*"):
        if business_id in await entity_store.members_of(key):
            found.append(key)
    return found


def test_index_keys():
    assert index_keys(business()) == [
        "index:category:c1",
        "index:subcategory:s1",
        "index:featured:true",
        "index:active:true",
        "index:search:blue",
        "index:search:bottle",
        "index:search:coffee",
        "index:search:espresso",
        "index:search:pour",
        "index:search:over",
    ]


@pytest.mark.asyncio
async def test_apply_indexes(entity_store):
    maintainer = IndexMaintainer(entity_store, clock=lambda: 1700000000.1234)
    b = business()

    await maintainer.apply_indexes(b)

    assert sorted(await buckets_containing(entity_store, "b1")) == sorted(index_keys(b))
    assert await entity_store.scored_members(keys.RECENCY_KEY) == ["b1"]


@pytest.mark.asyncio
async def test_remove_indexes(entity_store, index_maintainer):
    b = business()
    await index_maintainer.apply_indexes(b)
    await index_maintainer.remove_indexes(b)

    assert await buckets_containing(entity_store, "b1") == []
    assert await entity_store.scored_members(keys.RECENCY_KEY) == []


@pytest.mark.asyncio
async def test_replace_indexes_moves_buckets(entity_store, index_maintainer):
    old = business()
    new = business(
        name="Blue Cup Tea",
        keywords=None,
        category_id="c2",
        subcategory_id="s2",
        featured=False,
        active=False,
    )
    await index_maintainer.apply_indexes(old)
    await index_maintainer.replace_indexes(old, new)

    assert sorted(await buckets_containing(entity_store, "b1")) == sorted(
        [
            "index:category:c2",
            "index:subcategory:s2",
            "index:featured:false",
            "index:active:false",
            "index:search:blue",
            "index:search:cup",
            "index:search:tea",
        ]
    )
    # the shared term stays, old-only terms are gone
    assert await entity_store.members_of("index:search:coffee") == []
    assert await entity_store.members_of("index:search:blue") == ["b1"]


@pytest.mark.asyncio
async def test_replace_indexes_rejects_different_ids(index_maintainer):
    with pytest.raises(ValueError):
        await index_maintainer.replace_indexes(business(), business(id="b2"))


@pytest.mark.asyncio
async def test_apply_indexes_within_atomic_unit(entity_store, index_maintainer):
    with pytest.raises(RuntimeError):
        async with entity_store.atomic() as store:
            await index_maintainer.apply_indexes(business(), store)
            raise RuntimeError("abort")

    assert await buckets_containing(entity_store, "b1") == []
