"""Integration-test fixtures (require running PostgreSQL + Redis).

Pre-condition: services up and `alembic upgrade head` applied. Collection is
skipped unless INTEGRATION_TESTS=1.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool and Redis pool stay valid for the whole session.
"""

import os

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

if os.environ.get("INTEGRATION_TESTS") != "1":
    collect_ignore_glob = ["test_*.py"]

from src.main import app  # noqa: E402


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client that keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
