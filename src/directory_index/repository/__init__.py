from directory_index.repository.entity_store import EntityStore
from directory_index.repository.sqlalchemy_entity_store import SQLAlchemyEntityStore
from directory_index.repository.store_errors import DirectoryIndexError, StoreUnavailableError

__all__ = [
    "DirectoryIndexError",
    "EntityStore",
    "SQLAlchemyEntityStore",
    "StoreUnavailableError",
]
