"""
Pytest configuration and fixtures for widgetboard backend tests.
"""

from __future__ import annotations

import os

import httpx
import pytest_asyncio

# Set test environment variables before importing config
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("PUBLIC_URL", "http://test")

from backend.main import app  # noqa: E402
from backend.repos.location_store import FileLocationStore  # noqa: E402


@pytest_asyncio.fixture
async def file_store(tmp_path):
    """A FileLocationStore on a fresh file."""
    store = FileLocationStore(tmp_path / "data" / "locations.json")
    await store.initialize()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def async_client(file_store):
    """
    Async HTTP client against the ASGI app.
    ASGITransport does not run the lifespan, so the store is installed directly.
    """
    app.state.store = file_store
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    app.state.store = None
