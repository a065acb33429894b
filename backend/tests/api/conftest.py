"""API test fixtures - a fresh application (and store) per test.

Invariants:
    - Every test gets its own create_app() instance, so stores never leak between tests
    - Requests go through httpx ASGITransport; lifespan is not run
"""

import pytest
from httpx import ASGITransport, AsyncClient

from user_api.config import Settings
from user_api.main import create_app


@pytest.fixture
def app():
    return create_app(Settings(environment="test", tracing_enabled=False))


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
