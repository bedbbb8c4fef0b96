"""Services package."""

from directory_index.services.business_service import BusinessService
from directory_index.services.category_service import CategoryService
from directory_index.services.exceptions import (
    ConflictError,
    DirectoryIndexError,
    EntityNotFoundError,
    StoreUnavailableError,
)
from directory_index.services.health_service import HealthService, HealthStatus, ReadinessStatus
from directory_index.services.index_maintainer import IndexMaintainer, index_keys
from directory_index.services.query_planner import LoadResult, QueryPlanner, load_businesses
from directory_index.services.reconcile_service import ReconcileReport, ReconcileService
from directory_index.services.search_service import SearchService

__all__ = [
    "BusinessService",
    "CategoryService",
    "ConflictError",
    "DirectoryIndexError",
    "EntityNotFoundError",
    "HealthService",
    "HealthStatus",
    "IndexMaintainer",
    "LoadResult",
    "QueryPlanner",
    "ReadinessStatus",
    "ReconcileReport",
    "ReconcileService",
    "SearchService",
    "StoreUnavailableError",
    "index_keys",
    "load_businesses",
]
