"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

import asyncio
import socket
from contextlib import closing
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from htcache.cache.store import CacheStore
from htcache.network.http_server import HTCacheServer, create_app


def find_free_port() -> int:
    """Find an available port for testing."""
    with closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind(('', 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


class FakeClock:
    """
    Manually advanced UTC clock.

    Usage:
        clock = FakeClock()
        store = CacheStore(clock=clock)
        clock.advance(5)
    """

    def __init__(self, start: datetime = None):
        self.now = start if start is not None else datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at 2024-01-01T00:00:00Z."""
    return FakeClock()


@pytest.fixture
def store() -> CacheStore:
    """Create a fresh CacheStore on the real clock (capacity hint 128)."""
    return CacheStore(capacity_target=128)


@pytest.fixture
def clocked_store(clock: FakeClock) -> CacheStore:
    """Create a CacheStore driven by the fake clock."""
    return CacheStore(capacity_target=128, clock=clock)


@pytest.fixture
def small_store(clock: FakeClock) -> CacheStore:
    """Create a fake-clock CacheStore with a tiny capacity hint (4)."""
    return CacheStore(capacity_target=4, clock=clock)


# ============================================================================
# HTTP Fixtures
# ============================================================================

@pytest.fixture
def app(clocked_store: CacheStore):
    """FastAPI application around the fake-clock store."""
    return create_app(clocked_store)


@pytest.fixture
def http(app) -> TestClient:
    """In-process HTTP client (lifespan not started, no garbage collector)."""
    return TestClient(app)


@pytest.fixture
def server_port() -> int:
    """Get a free port for server testing."""
    return find_free_port()


@pytest_asyncio.fixture
async def server(server_port: int) -> AsyncGenerator[HTCacheServer, None]:
    """
    Create and start a live uvicorn server for testing.

    This fixture:
    1. Creates an HTCacheServer on a random free port
    2. Starts it in a background task
    3. Yields the server once it accepts connections
    4. Shuts it down after the test
    """
    srv = HTCacheServer(host='127.0.0.1', port=server_port, gc_interval=60)

    server_task = asyncio.create_task(srv.start())

    # Wait for server to be ready
    for _ in range(100):
        if srv.is_running():
            break
        await asyncio.sleep(0.05)

    yield srv

    # Cleanup
    await srv.stop()
    try:
        await asyncio.wait_for(server_task, timeout=5)
    except asyncio.TimeoutError:
        server_task.cancel()


@pytest_asyncio.fixture
async def client(server: HTCacheServer, server_port: int) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client pointed at the live server."""
    async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{server_port}") as c:
        yield c


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
