"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before anything imports config.settings.
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")

from unittest.mock import AsyncMock, MagicMock, patch  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402


@pytest.fixture
def fake_redis() -> MagicMock:
    """Redis stand-in for RateLimitMiddleware: every request is the first in its window."""
    redis = MagicMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    return redis


@pytest.fixture
async def client(fake_redis: MagicMock) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    with patch(
        "src.pm_gateway.middleware.rate_limit.get_redis",
        AsyncMock(return_value=fake_redis),
    ):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
