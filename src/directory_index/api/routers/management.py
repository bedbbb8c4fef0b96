"""Health and maintenance routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from directory_index.deps import BusinessServiceDep, HealthServiceDep, ReconcileServiceDep
from directory_index.schemas import DashboardStats
from directory_index.services import HealthStatus, ReadinessStatus

router = APIRouter(tags=["management"])


class ReconcileResponse(BaseModel):
    businesses: int
    stale_ids: list[str]
    removed: int
    added: int
    recency_removed: int
    recency_added: int
    dry_run: bool


@router.get("/health", response_model=HealthStatus)
async def health(health_service: HealthServiceDep) -> HealthStatus:
    return await health_service.check()


@router.get("/health/ready", response_model=ReadinessStatus)
async def ready(health_service: HealthServiceDep) -> ReadinessStatus:
    return await health_service.ready()


@router.get("/health/live", response_model=ReadinessStatus)
async def live(health_service: HealthServiceDep) -> ReadinessStatus:
    return await health_service.live()


@router.get("/admin/dashboard", response_model=DashboardStats)
async def dashboard(business_service: BusinessServiceDep) -> DashboardStats:
    return await business_service.dashboard()


@router.post("/admin/reconcile", response_model=ReconcileResponse)
async def reconcile(reconcile_service: ReconcileServiceDep, dry_run: bool = False) -> ReconcileResponse:
    """Rebuild index memberships from the stored business records."""
    report = await reconcile_service.reconcile(dry_run=dry_run)
    return ReconcileResponse(
        businesses=report.businesses,
        stale_ids=sorted(report.stale_ids),
        removed=sum(len(ids) for ids in report.removed.values()),
        added=sum(len(ids) for ids in report.added.values()),
        recency_removed=len(report.recency_removed),
        recency_added=len(report.recency_added),
        dry_run=report.dry_run,
    )
