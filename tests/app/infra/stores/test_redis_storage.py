"""Testes do RedisKeyValueStorage com mock."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from app.infra.stores.redis_storage import RedisKeyValueStorage


@pytest.fixture
def mock_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.delete = AsyncMock(return_value=1)
    return redis


class TestRedisKeyValueStorage:
    """Testes do storage Redis (async)."""

    @pytest.mark.asyncio
    async def test_set_uses_prefixed_key(self, mock_redis: AsyncMock) -> None:
        storage = RedisKeyValueStorage(mock_redis)

        await storage.set_item("user", "payload")

        mock_redis.set.assert_awaited_once_with("petsit:user", "payload")

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, mock_redis: AsyncMock) -> None:
        mock_redis.get = AsyncMock(return_value=b"true")
        storage = RedisKeyValueStorage(mock_redis, prefix="app:")

        assert await storage.get_item("user_logged_out") == "true"
        mock_redis.get.assert_awaited_once_with("app:user_logged_out")

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, mock_redis: AsyncMock) -> None:
        storage = RedisKeyValueStorage(mock_redis)
        assert await storage.get_item("user") is None

    @pytest.mark.asyncio
    async def test_remove_reports_deletion(self, mock_redis: AsyncMock) -> None:
        storage = RedisKeyValueStorage(mock_redis)

        assert await storage.remove_item("user") is True
        mock_redis.delete = AsyncMock(return_value=0)
        assert await storage.remove_item("user") is False
