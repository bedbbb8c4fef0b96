"""FastAPI dependency providers.

Tests override ``get_app_config`` and ``get_engine_factory`` to point the API
at a throwaway database.
"""

import time
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from directory_index import db
from directory_index.config import ConfigManager, DirectoryIndexConfig
from directory_index.repository import EntityStore, SQLAlchemyEntityStore
from directory_index.services import (
    BusinessService,
    CategoryService,
    HealthService,
    IndexMaintainer,
    QueryPlanner,
    ReconcileService,
    SearchService,
)

_STARTED_AT = time.monotonic()


## config


def get_app_config() -> DirectoryIndexConfig:  # pragma: no cover
    return ConfigManager().config


AppConfigDep = Annotated[DirectoryIndexConfig, Depends(get_app_config)]


## sqlalchemy


async def get_engine_factory(
    app_config: AppConfigDep,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:  # pragma: no cover
    """Engine and session maker for the configured database, created once."""
    return await db.get_or_create_db(app_config)


EngineFactoryDep = Annotated[
    tuple[AsyncEngine, async_sessionmaker[AsyncSession]], Depends(get_engine_factory)
]


async def get_session_maker(engine_factory: EngineFactoryDep) -> async_sessionmaker[AsyncSession]:
    _, session_maker = engine_factory
    return session_maker


SessionMakerDep = Annotated[async_sessionmaker, Depends(get_session_maker)]


## store


async def get_entity_store(
    session_maker: SessionMakerDep, app_config: AppConfigDep
) -> EntityStore:
    return SQLAlchemyEntityStore(session_maker, timeout=app_config.store_timeout)


EntityStoreDep = Annotated[EntityStore, Depends(get_entity_store)]


## services


async def get_business_service(entity_store: EntityStoreDep) -> BusinessService:
    return BusinessService(entity_store, IndexMaintainer(entity_store), QueryPlanner(entity_store))


BusinessServiceDep = Annotated[BusinessService, Depends(get_business_service)]


async def get_category_service(entity_store: EntityStoreDep) -> CategoryService:
    return CategoryService(entity_store)


CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]


async def get_search_service(
    entity_store: EntityStoreDep, app_config: AppConfigDep
) -> SearchService:
    return SearchService(
        entity_store,
        max_categories=app_config.max_categories,
        max_suggestions=app_config.max_suggestions,
    )


SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]


async def get_reconcile_service(entity_store: EntityStoreDep) -> ReconcileService:
    return ReconcileService(entity_store)


ReconcileServiceDep = Annotated[ReconcileService, Depends(get_reconcile_service)]


async def get_health_service(entity_store: EntityStoreDep) -> HealthService:
    return HealthService(entity_store, started_at=_STARTED_AT)


HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]
