"""Service for categories and subcategories."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Type, TypeVar

from loguru import logger

from directory_index.repository.entity_store import EntityStore
from directory_index.schemas.base import DirectoryModel
from directory_index.schemas.category import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryWithSubcategories,
    Subcategory,
    SubcategoryCreate,
    SubcategoryUpdate,
)
from directory_index.search import keys
from directory_index.services.exceptions import ConflictError, EntityNotFoundError
from directory_index.services.query_planner import DEFAULT_LOAD_CONCURRENCY, gather_limited

M = TypeVar("M", bound=DirectoryModel)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _ordered(items: List[M]) -> List[M]:
    return sorted(items, key=lambda item: (item.sort_order, item.name))


class CategoryService:
    """Category records plus the slug lookups that enforce uniqueness.

    Slug uniqueness is checked with a lookup before the write; there is no
    store-level constraint behind it.
    """

    def __init__(self, entity_store: EntityStore, load_concurrency: int = DEFAULT_LOAD_CONCURRENCY):
        self.entity_store = entity_store
        self.load_concurrency = load_concurrency

    async def _load(self, model: Type[M], key: str) -> Optional[M]:
        blob = await self.entity_store.get_field(key, keys.RECORD_FIELD)
        return model.model_validate_json(blob) if blob is not None else None

    async def _load_many(self, model: Type[M], record_keys: List[str]) -> List[M]:
        records = await gather_limited(
            (self._load(model, key) for key in record_keys), self.load_concurrency
        )
        return [record for record in records if record is not None]

    # Categories

    async def create_category(self, data: CategoryCreate) -> Category:
        if await self.find_category_by_slug(data.slug):
            raise ConflictError(f"Category slug already exists: {data.slug}")

        now = _now()
        category = Category.model_validate(
            {**data.model_dump(), "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        async with self.entity_store.atomic() as store:
            await store.set_field(keys.category_key(category.id), keys.RECORD_FIELD, category.to_json())
            await store.add_to_set(keys.CATEGORY_LIST_KEY, category.id)
            await store.set_field(keys.CATEGORY_SLUG_KEY, category.slug, category.id)

        logger.info(f"Created category {category.id} ({category.slug})")
        return category

    async def get_category(self, category_id: str) -> Category:
        category = await self._load(Category, keys.category_key(category_id))
        if category is None:
            raise EntityNotFoundError("Category", category_id)
        return category

    async def find_category_by_slug(self, slug: str) -> Optional[Category]:
        category_id = await self.entity_store.get_field(keys.CATEGORY_SLUG_KEY, slug)
        if category_id is None:
            return None
        return await self._load(Category, keys.category_key(category_id))

    async def list_categories(self) -> List[Category]:
        """All categories ordered by sort order, then name."""
        category_ids = await self.entity_store.members_of(keys.CATEGORY_LIST_KEY)
        categories = await self._load_many(
            Category, [keys.category_key(category_id) for category_id in category_ids]
        )
        return _ordered(categories)

    async def update_category(self, category_id: str, data: CategoryUpdate) -> Category:
        existing = await self.get_category(category_id)
        changes = data.model_dump(exclude_unset=True)
        slug_changed = "slug" in changes and changes["slug"] != existing.slug
        if slug_changed and await self.find_category_by_slug(changes["slug"]):
            raise ConflictError(f"Category slug already exists: {changes['slug']}")

        updated = Category.model_validate(
            {**existing.model_dump(), **changes, "id": existing.id, "updated_at": _now()}
        )
        async with self.entity_store.atomic() as store:
            await store.set_field(keys.category_key(category_id), keys.RECORD_FIELD, updated.to_json())
            if slug_changed:
                await store.delete_field(keys.CATEGORY_SLUG_KEY, existing.slug)
                await store.set_field(keys.CATEGORY_SLUG_KEY, updated.slug, category_id)

        logger.info(f"Updated category {category_id}")
        return updated

    async def delete_category(self, category_id: str) -> None:
        category = await self.get_category(category_id)
        if await self.entity_store.set_size(keys.category_subcategories_key(category_id)):
            raise ConflictError("Cannot delete category with existing subcategories")

        async with self.entity_store.atomic() as store:
            await store.remove_from_set(keys.CATEGORY_LIST_KEY, category_id)
            await store.delete_field(keys.CATEGORY_SLUG_KEY, category.slug)
            await store.delete(keys.category_key(category_id))

        logger.info(f"Deleted category {category_id}")

    async def business_count(self, category_id: str) -> int:
        """Number of businesses indexed under the category."""
        return await self.entity_store.set_size(keys.category_index(category_id))

    async def categories_with_subcategories(self) -> List[CategoryWithSubcategories]:
        categories = await self.list_categories()
        member_lists = await gather_limited(
            (
                self.entity_store.members_of(keys.category_subcategories_key(category.id))
                for category in categories
            ),
            self.load_concurrency,
        )
        counts = await gather_limited(
            (self.business_count(category.id) for category in categories), self.load_concurrency
        )
        loaded = await self._load_many(
            Subcategory,
            [keys.subcategory_key(i) for members in member_lists for i in members],
        )
        by_id = {subcategory.id: subcategory for subcategory in loaded}

        return [
            CategoryWithSubcategories(
                **category.model_dump(),
                subcategories=_ordered([by_id[i] for i in members if i in by_id]),
                business_count=count,
            )
            for category, members, count in zip(categories, member_lists, counts)
        ]

    # Subcategories

    async def find_subcategory_by_slug(self, slug: str, category_id: str) -> Optional[Subcategory]:
        subcategory_id = await self.entity_store.get_field(keys.subcategory_slug_key(category_id), slug)
        if subcategory_id is None:
            return None
        return await self._load(Subcategory, keys.subcategory_key(subcategory_id))

    async def create_subcategory(self, data: SubcategoryCreate) -> Subcategory:
        await self.get_category(data.category_id)
        if await self.find_subcategory_by_slug(data.slug, data.category_id):
            raise ConflictError(f"Subcategory slug already exists in this category: {data.slug}")

        now = _now()
        subcategory = Subcategory.model_validate(
            {**data.model_dump(), "id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        )
        async with self.entity_store.atomic() as store:
            await store.set_field(
                keys.subcategory_key(subcategory.id), keys.RECORD_FIELD, subcategory.to_json()
            )
            await store.add_to_set(keys.SUBCATEGORY_LIST_KEY, subcategory.id)
            await store.add_to_set(keys.category_subcategories_key(data.category_id), subcategory.id)
            await store.set_field(
                keys.subcategory_slug_key(data.category_id), subcategory.slug, subcategory.id
            )

        logger.info(f"Created subcategory {subcategory.id} under {data.category_id}")
        return subcategory

    async def get_subcategory(self, subcategory_id: str) -> Subcategory:
        subcategory = await self._load(Subcategory, keys.subcategory_key(subcategory_id))
        if subcategory is None:
            raise EntityNotFoundError("Subcategory", subcategory_id)
        return subcategory

    async def list_subcategories(self) -> List[Subcategory]:
        subcategory_ids = await self.entity_store.members_of(keys.SUBCATEGORY_LIST_KEY)
        return _ordered(
            await self._load_many(Subcategory, [keys.subcategory_key(i) for i in subcategory_ids])
        )

    async def subcategories_of(self, category_id: str) -> List[Subcategory]:
        subcategory_ids = await self.entity_store.members_of(
            keys.category_subcategories_key(category_id)
        )
        return _ordered(
            await self._load_many(Subcategory, [keys.subcategory_key(i) for i in subcategory_ids])
        )

    async def update_subcategory(self, subcategory_id: str, data: SubcategoryUpdate) -> Subcategory:
        existing = await self.get_subcategory(subcategory_id)
        changes = data.model_dump(exclude_unset=True)
        target_category = changes.get("category_id") or existing.category_id
        moved = target_category != existing.category_id
        slug = changes.get("slug") or existing.slug

        if moved:
            await self.get_category(target_category)
        if (moved or slug != existing.slug) and await self.find_subcategory_by_slug(
            slug, target_category
        ):
            raise ConflictError(f"Subcategory slug already exists in this category: {slug}")

        updated = Subcategory.model_validate(
            {**existing.model_dump(), **changes, "id": existing.id, "updated_at": _now()}
        )
        async with self.entity_store.atomic() as store:
            await store.set_field(
                keys.subcategory_key(subcategory_id), keys.RECORD_FIELD, updated.to_json()
            )
            if moved:
                await store.remove_from_set(
                    keys.category_subcategories_key(existing.category_id), subcategory_id
                )
                await store.add_to_set(keys.category_subcategories_key(target_category), subcategory_id)
            if moved or slug != existing.slug:
                await store.delete_field(keys.subcategory_slug_key(existing.category_id), existing.slug)
                await store.set_field(keys.subcategory_slug_key(target_category), slug, subcategory_id)

        logger.info(f"Updated subcategory {subcategory_id}")
        return updated

    async def delete_subcategory(self, subcategory_id: str) -> None:
        subcategory = await self.get_subcategory(subcategory_id)
        async with self.entity_store.atomic() as store:
            await store.remove_from_set(keys.SUBCATEGORY_LIST_KEY, subcategory_id)
            await store.remove_from_set(
                keys.category_subcategories_key(subcategory.category_id), subcategory_id
            )
            await store.delete_field(
                keys.subcategory_slug_key(subcategory.category_id), subcategory.slug
            )
            await store.delete(keys.subcategory_key(subcategory_id))

        logger.info(f"Deleted subcategory {subcategory_id}")
