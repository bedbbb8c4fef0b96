"""Service layer errors."""

from directory_index.repository.store_errors import DirectoryIndexError, StoreUnavailableError


class EntityNotFoundError(DirectoryIndexError):
    """Raised when a business, category or subcategory id has no record."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class ConflictError(DirectoryIndexError):
    """Raised when a write would break a uniqueness or containment rule."""

    pass


__all__ = [
    "DirectoryIndexError",
    "EntityNotFoundError",
    "ConflictError",
    "StoreUnavailableError",
]
