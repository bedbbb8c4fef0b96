"""Store round-trip health checks."""

import time
from datetime import datetime, timezone

from loguru import logger
from pydantic import BaseModel

from directory_index.repository.entity_store import EntityStore
from directory_index.repository.store_errors import StoreUnavailableError


class HealthStatus(BaseModel):
    status: str
    timestamp: datetime
    uptime: float
    store: bool


class ReadinessStatus(BaseModel):
    status: str


class HealthService:
    def __init__(self, entity_store: EntityStore, started_at: float | None = None):
        self.entity_store = entity_store
        self.started_at = started_at if started_at is not None else time.monotonic()

    async def check(self) -> HealthStatus:
        """Report healthy when the store answers a ping."""
        try:
            reachable = await self.entity_store.ping()
        except StoreUnavailableError as exc:
            logger.warning(f"Health check failed: {exc}")
            reachable = False

        return HealthStatus(
            status="healthy" if reachable else "unhealthy",
            timestamp=datetime.now(timezone.utc),
            uptime=time.monotonic() - self.started_at,
            store=reachable,
        )

    async def ready(self) -> ReadinessStatus:
        """Ready once the store accepts reads."""
        try:
            reachable = await self.entity_store.ping()
        except StoreUnavailableError as exc:
            logger.warning(f"Readiness check failed: {exc}")
            reachable = False
        return ReadinessStatus(status="ready" if reachable else "not ready")

    async def live(self) -> ReadinessStatus:
        """The process is up; no store round trip."""
        return ReadinessStatus(status="alive")
