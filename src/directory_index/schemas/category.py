"""Category and subcategory schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from directory_index.schemas.base import DirectoryModel


class CategoryFields(DirectoryModel):
    name: str = Field(..., max_length=100)
    slug: str = Field(..., max_length=100, description="Unique url-friendly name")
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=255)
    active: bool = True
    sort_order: int = Field(0, ge=0)


class CategoryCreate(CategoryFields):
    pass


class CategoryUpdate(DirectoryModel):
    name: Optional[str] = Field(None, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    icon: Optional[str] = Field(None, max_length=255)
    active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)


class Category(CategoryFields):
    id: str
    created_at: datetime
    updated_at: datetime


class SubcategoryCreate(CategoryFields):
    category_id: str


class SubcategoryUpdate(CategoryUpdate):
    category_id: Optional[str] = None


class Subcategory(SubcategoryCreate):
    id: str
    created_at: datetime
    updated_at: datetime


class CategoryWithSubcategories(Category):
    subcategories: List[Subcategory] = Field(default_factory=list)
    business_count: int = 0


class CategoryMatch(DirectoryModel):
    """A category returned next to search results."""

    id: str
    name: str
    icon: Optional[str] = None
    description: Optional[str] = None
    count: int = Field(0, description="Number of businesses indexed under the category")
