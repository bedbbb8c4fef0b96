"""Business record schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from directory_index.schemas.base import DirectoryModel


class BusinessHours(DirectoryModel):
    open: str
    close: str


class BusinessFields(DirectoryModel):
    """Attributes shared by create requests and stored records."""

    name: str = Field(..., max_length=255, description="Business name")
    description: Optional[str] = Field(None, description="Free text description")
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[Dict[str, str]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    images: Optional[List[str]] = None
    keywords: Optional[List[str]] = Field(None, description="Extra search terms")
    featured: bool = False
    active: bool = True
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    business_hours: Optional[Dict[str, BusinessHours]] = None
    category_id: str = Field(..., description="Category the business is listed under")
    subcategory_id: str = Field(..., description="Subcategory the business is listed under")


class BusinessCreate(BusinessFields):
    """Payload for creating a business."""


class BusinessUpdate(DirectoryModel):
    """Partial update; only fields that were explicitly set are applied."""

    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    email: Optional[str] = None
    website: Optional[str] = None
    social_media: Optional[Dict[str, str]] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    images: Optional[List[str]] = None
    keywords: Optional[List[str]] = None
    featured: Optional[bool] = None
    active: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    business_hours: Optional[Dict[str, BusinessHours]] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None


class BulkBusinessCreate(DirectoryModel):
    businesses: List[BusinessCreate]


class Business(BusinessFields):
    """A stored business record."""

    id: str = Field(..., description="Opaque unique id")
    created_at: datetime
    updated_at: datetime


class BusinessStats(DirectoryModel):
    total_businesses: int
    active_businesses: int
    featured_businesses: int
    categories_count: int


class DashboardStats(BusinessStats):
    """Admin overview: business stats, subcategory count and recent businesses."""

    total_subcategories: int
    recent_businesses: List[Business]
