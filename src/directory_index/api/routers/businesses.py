"""Routes for business records and filtered listings."""

from typing import Annotated, List

from fastapi import APIRouter, Query, Response, status
from loguru import logger

from directory_index.deps import BusinessServiceDep
from directory_index.schemas import (
    BulkBusinessCreate,
    Business,
    BusinessCreate,
    BusinessPage,
    BusinessQuery,
    BusinessStats,
    BusinessUpdate,
)

router = APIRouter(prefix="/businesses", tags=["businesses"])


@router.get("", response_model=BusinessPage)
async def list_businesses(
    query: Annotated[BusinessQuery, Query()],
    business_service: BusinessServiceDep,
) -> BusinessPage:
    """List businesses filtered by category, subcategory, featured and active flags."""
    return await business_service.list(query)


@router.post("", response_model=Business, status_code=status.HTTP_201_CREATED)
async def create_business(data: BusinessCreate, business_service: BusinessServiceDep) -> Business:
    return await business_service.create(data)


@router.post("/bulk", response_model=List[Business], status_code=status.HTTP_201_CREATED)
async def bulk_create_businesses(
    data: BulkBusinessCreate, business_service: BusinessServiceDep
) -> List[Business]:
    logger.info(f"Bulk create request with {len(data.businesses)} businesses")
    return await business_service.bulk_create(data.businesses)


@router.get("/stats", response_model=BusinessStats)
async def business_stats(business_service: BusinessServiceDep) -> BusinessStats:
    return await business_service.stats()


@router.get("/{business_id}", response_model=Business)
async def get_business(business_id: str, business_service: BusinessServiceDep) -> Business:
    return await business_service.get(business_id)


@router.patch("/{business_id}", response_model=Business)
async def update_business(
    business_id: str, data: BusinessUpdate, business_service: BusinessServiceDep
) -> Business:
    return await business_service.update(business_id, data)


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business(business_id: str, business_service: BusinessServiceDep) -> Response:
    await business_service.delete(business_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
