"""Fixtures for API tests."""

from typing import AsyncGenerator

import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from directory_index.deps import get_app_config, get_engine_factory


@pytest_asyncio.fixture
async def app(app_config, engine_factory) -> AsyncGenerator[FastAPI, None]:
    """FastAPI app wired to the per-test database."""
    from directory_index.api.app import app

    app.dependency_overrides[get_app_config] = lambda: app_config
    app.dependency_overrides[get_engine_factory] = lambda: engine_factory
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
