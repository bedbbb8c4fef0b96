"""Routes for categories and their subcategories."""

from typing import List

from fastapi import APIRouter, Response, status
from pydantic import Field

from directory_index.deps import CategoryServiceDep
from directory_index.schemas import (
    Category,
    CategoryCreate,
    CategoryUpdate,
    CategoryWithSubcategories,
    Subcategory,
    SubcategoryCreate,
    SubcategoryUpdate,
)
from directory_index.schemas.category import CategoryFields

router = APIRouter(prefix="/categories", tags=["categories"])


class SubcategoryBody(CategoryFields):
    """Subcategory payload; the parent category comes from the path."""

    category_id: str | None = Field(None, description="Ignored, taken from the path")


@router.get("", response_model=List[CategoryWithSubcategories])
async def list_categories(category_service: CategoryServiceDep) -> List[CategoryWithSubcategories]:
    """Categories in display order with their subcategories and business counts."""
    return await category_service.categories_with_subcategories()


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, category_service: CategoryServiceDep) -> Category:
    return await category_service.create_category(data)


@router.get("/subcategories/all", response_model=List[Subcategory])
async def list_all_subcategories(category_service: CategoryServiceDep) -> List[Subcategory]:
    """Every subcategory across all categories, in display order."""
    return await category_service.list_subcategories()


@router.get("/subcategories/{subcategory_id}", response_model=Subcategory)
async def get_subcategory(subcategory_id: str, category_service: CategoryServiceDep) -> Subcategory:
    return await category_service.get_subcategory(subcategory_id)


@router.delete("/subcategories/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subcategory(subcategory_id: str, category_service: CategoryServiceDep) -> Response:
    await category_service.delete_subcategory(subcategory_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/subcategories/{subcategory_id}", response_model=Subcategory)
async def update_subcategory(
    subcategory_id: str, data: SubcategoryUpdate, category_service: CategoryServiceDep
) -> Subcategory:
    return await category_service.update_subcategory(subcategory_id, data)


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str, category_service: CategoryServiceDep) -> Category:
    return await category_service.get_category(category_id)


@router.patch("/{category_id}", response_model=Category)
async def update_category(
    category_id: str, data: CategoryUpdate, category_service: CategoryServiceDep
) -> Category:
    return await category_service.update_category(category_id, data)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: str, category_service: CategoryServiceDep) -> Response:
    await category_service.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{category_id}/subcategories", response_model=List[Subcategory])
async def list_subcategories(
    category_id: str, category_service: CategoryServiceDep
) -> List[Subcategory]:
    await category_service.get_category(category_id)
    return await category_service.subcategories_of(category_id)


@router.post(
    "/{category_id}/subcategories",
    response_model=Subcategory,
    status_code=status.HTTP_201_CREATED,
)
async def create_subcategory(
    category_id: str, data: SubcategoryBody, category_service: CategoryServiceDep
) -> Subcategory:
    payload = SubcategoryCreate(**data.model_dump(exclude={"category_id"}), category_id=category_id)
    return await category_service.create_subcategory(payload)
