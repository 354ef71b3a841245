"""Integration-test fixtures.

Pre-condition: PostgreSQL + Redis running and `alembic upgrade head` applied.
Collected only when RM_INTEGRATION=1 is set.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool remain valid across the session.
"""

import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from integration_helpers import PASSWORD, login

from src.main import app
from src.rm_common.database import async_session_factory
from src.rm_gateway.user.service import UserService


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("RM_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set RM_INTEGRATION=1 to run against PostgreSQL + Redis")
    for item in items:
        if "integration" in item.nodeid.split("/"):
            item.add_marker(pytest.mark.integration)
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    name = f"admin_{uuid.uuid4().hex[:8]}"
    async with async_session_factory() as db, db.begin():
        await UserService().register(name, f"{name}@example.com", PASSWORD, db, is_admin=True)
    return await login(client, name)
