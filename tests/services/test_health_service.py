"""Tests for the health checks."""

import pytest

from directory_index.repository import StoreUnavailableError
from directory_index.services import HealthService


@pytest.mark.asyncio
async def test_healthy(entity_store):
    status = await HealthService(entity_store).check()

    assert status.status == "healthy"
    assert status.store is True
    assert status.uptime >= 0


@pytest.mark.asyncio
async def test_unhealthy_when_store_unreachable(entity_store, monkeypatch):
    async def failing_ping():
        raise StoreUnavailableError("ping", "connection refused")

    monkeypatch.setattr(entity_store, "ping", failing_ping)

    status = await HealthService(entity_store).check()

    assert status.status == "unhealthy"
    assert status.store is False


@pytest.mark.asyncio
async def test_ready_and_live(entity_store):
    service = HealthService(entity_store)

    assert (await service.ready()).status == "ready"
    assert (await service.live()).status == "alive"


@pytest.mark.asyncio
async def test_not_ready_when_store_unreachable(entity_store, monkeypatch):
    async def failing_ping():
        raise StoreUnavailableError("ping", "connection refused")

    monkeypatch.setattr(entity_store, "ping", failing_ping)
    service = HealthService(entity_store)

    assert (await service.ready()).status == "not ready"
    assert (await service.live()).status == "alive"
