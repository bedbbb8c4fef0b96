"""Shared pydantic configuration for directory-index schemas.

Records are stored and served with camelCase field names (``categoryId``,
``reviewCount``) while Python code uses snake_case attributes.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DirectoryModel(BaseModel):
    """Base model accepting both snake_case names and camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json(self) -> str:
        """Serialize the way records are kept in the entity store."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


class FrozenDirectoryModel(DirectoryModel):
    """Immutable value objects, created once per request."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
