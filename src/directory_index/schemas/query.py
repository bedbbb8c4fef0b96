"""Typed query and result objects for listing, search and suggestions."""

from typing import List, Literal, Optional

from pydantic import Field

from directory_index.schemas.base import DirectoryModel, FrozenDirectoryModel
from directory_index.schemas.business import Business
from directory_index.schemas.category import CategoryMatch

BusinessSortField = Literal["name", "createdAt", "updatedAt", "rating"]
SortOrder = Literal["ASC", "DESC"]
SearchSort = Literal["relevance", "name", "rating", "createdAt"]


class BusinessQuery(FrozenDirectoryModel):
    """Filters, pagination and ordering for a business listing."""

    category: Optional[str] = None
    subcategory: Optional[str] = None
    featured: Optional[bool] = None
    active: Optional[bool] = None
    offset: int = Field(0, ge=0)
    limit: int = Field(10, ge=1, le=100)
    sort_by: BusinessSortField = "createdAt"
    sort_order: SortOrder = "DESC"


class SearchQuery(FrozenDirectoryModel):
    """Free-text search with optional category narrowing."""

    q: str
    category: Optional[str] = None
    subcategory: Optional[str] = None
    offset: int = Field(0, ge=0)
    limit: Optional[int] = Field(None, ge=1, le=100, description="Unset returns all remaining")
    sort_by: SearchSort = "relevance"


class BusinessPage(DirectoryModel):
    items: List[Business]
    total: int = Field(..., description="Matches before pagination")
    page: int
    limit: int
    stale_ids: List[str] = Field(
        default_factory=list, description="Indexed ids whose record is missing"
    )


class SearchResult(DirectoryModel):
    data: List[Business]
    categories: List[CategoryMatch]
    total: int
    page: int
    limit: Optional[int]
    query: str
    stale_ids: List[str] = Field(default_factory=list)
