"""Common test fixtures."""

from typing import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from directory_index.config import ConfigManager, DirectoryIndexConfig
from directory_index.db import DatabaseType, engine_session_factory
from directory_index.repository import SQLAlchemyEntityStore
from directory_index.schemas import BusinessCreate, CategoryCreate
from directory_index.services import (
    BusinessService,
    CategoryService,
    IndexMaintainer,
    QueryPlanner,
    ReconcileService,
    SearchService,
)


@pytest.fixture
def app_config(tmp_path) -> DirectoryIndexConfig:
    """Test configuration pointing at a per-test home directory."""
    return DirectoryIndexConfig(env="test", home=tmp_path, store_timeout=10.0)


@pytest.fixture
def config_manager(app_config: DirectoryIndexConfig):
    ConfigManager.set_config(app_config)
    yield ConfigManager()
    ConfigManager.reset()


@pytest_asyncio.fixture(scope="function")
async def engine_factory(
    app_config: DirectoryIndexConfig,
) -> AsyncGenerator[tuple[AsyncEngine, async_sessionmaker[AsyncSession]], None]:
    """File-backed SQLite database with the store tables created."""
    async with engine_session_factory(app_config.database_path, DatabaseType.FILESYSTEM) as (
        engine,
        session_maker,
    ):
        yield engine, session_maker


@pytest_asyncio.fixture
async def session_maker(engine_factory) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


@pytest_asyncio.fixture
async def entity_store(session_maker, app_config) -> SQLAlchemyEntityStore:
    return SQLAlchemyEntityStore(session_maker, timeout=app_config.store_timeout)


@pytest_asyncio.fixture
async def index_maintainer(entity_store) -> IndexMaintainer:
    return IndexMaintainer(entity_store)


@pytest_asyncio.fixture
async def query_planner(entity_store) -> QueryPlanner:
    return QueryPlanner(entity_store)


@pytest_asyncio.fixture
async def business_service(entity_store, index_maintainer, query_planner) -> BusinessService:
    return BusinessService(entity_store, index_maintainer, query_planner)


@pytest_asyncio.fixture
async def category_service(entity_store) -> CategoryService:
    return CategoryService(entity_store)


@pytest_asyncio.fixture
async def search_service(entity_store) -> SearchService:
    return SearchService(entity_store)


@pytest_asyncio.fixture
async def reconcile_service(entity_store) -> ReconcileService:
    return ReconcileService(entity_store)


@pytest.fixture
def make_business() -> Callable[..., BusinessCreate]:
    """Build a BusinessCreate with sensible defaults, overridable per field."""

    def _make(name: str = "Test Business", **overrides) -> BusinessCreate:
        data = {
            "name": name,
            "description": None,
            "category_id": "c1",
            "subcategory_id": "s1",
        }
        data.update(overrides)
        return BusinessCreate(**data)

    return _make


@pytest_asyncio.fixture
async def food_category(category_service: CategoryService):
    return await category_service.create_category(
        CategoryCreate(name="Food", slug="food", description="Restaurants and cafes", sort_order=1)
    )
