"""Pytest configuration: a fresh in-memory registry per test."""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from echo.main import create_app
from echo.registry import Registry


@pytest_asyncio.fixture
async def registry():
    registry = Registry("sqlite+aiosqlite:///:memory:")
    await registry.open()
    yield registry
    await registry.close()


@pytest_asyncio.fixture
async def client(registry):
    """Test client bound to the per-test registry (lifespan is not run)."""
    app = create_app(registry)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
