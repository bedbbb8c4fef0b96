"""Composition root shared by the API and CLI entrypoints.

Wires one entity store into every service so that callers only deal with a
session maker and the loaded configuration.
"""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from directory_index.config import DirectoryIndexConfig
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


@dataclass
class ServiceContainer:
    """Services bound to one entity store."""

    config: DirectoryIndexConfig
    entity_store: EntityStore
    businesses: BusinessService
    categories: CategoryService
    search: SearchService
    reconcile: ReconcileService
    health: HealthService

    @classmethod
    def create(
        cls,
        config: DirectoryIndexConfig,
        session_maker: async_sessionmaker[AsyncSession],
    ) -> "ServiceContainer":
        entity_store = SQLAlchemyEntityStore(session_maker, timeout=config.store_timeout)
        return cls.for_store(config, entity_store)

    @classmethod
    def for_store(cls, config: DirectoryIndexConfig, entity_store: EntityStore) -> "ServiceContainer":
        return cls(
            config=config,
            entity_store=entity_store,
            businesses=BusinessService(
                entity_store, IndexMaintainer(entity_store), QueryPlanner(entity_store)
            ),
            categories=CategoryService(entity_store),
            search=SearchService(
                entity_store,
                max_categories=config.max_categories,
                max_suggestions=config.max_suggestions,
            ),
            reconcile=ReconcileService(entity_store),
            health=HealthService(entity_store),
        )
