"""Pydantic schemas for directory-index records, queries and results."""

from directory_index.schemas.business import (
    BulkBusinessCreate,
    Business,
    BusinessCreate,
    BusinessHours,
    BusinessStats,
    BusinessUpdate,
    DashboardStats,
)
from directory_index.schemas.category import (
    Category,
    CategoryCreate,
    CategoryMatch,
    CategoryUpdate,
    CategoryWithSubcategories,
    Subcategory,
    SubcategoryCreate,
    SubcategoryUpdate,
)
from directory_index.schemas.query import (
    BusinessPage,
    BusinessQuery,
    SearchQuery,
    SearchResult,
)

__all__ = [
    "BulkBusinessCreate",
    "Business",
    "BusinessCreate",
    "BusinessHours",
    "BusinessPage",
    "BusinessQuery",
    "BusinessStats",
    "BusinessUpdate",
    "Category",
    "CategoryCreate",
    "CategoryMatch",
    "CategoryUpdate",
    "CategoryWithSubcategories",
    "DashboardStats",
    "SearchQuery",
    "SearchResult",
    "Subcategory",
    "SubcategoryCreate",
    "SubcategoryUpdate",
]
