"""Testes do MemoryKeyValueStorage."""

from __future__ import annotations

import pytest

from app.infra.stores.memory_storage import MemoryKeyValueStorage


class TestMemoryKeyValueStorage:
    """Testes do storage em memória."""

    @pytest.mark.asyncio
    async def test_set_get_remove(self) -> None:
        storage = MemoryKeyValueStorage()

        await storage.set_item("user", '{"user_id": "1"}')

        assert await storage.get_item("user") == '{"user_id": "1"}'
        assert await storage.remove_item("user") is True
        assert await storage.get_item("user") is None

    @pytest.mark.asyncio
    async def test_remove_missing_key(self) -> None:
        storage = MemoryKeyValueStorage()
        assert await storage.remove_item("nada") is False

    def test_snapshot_is_a_copy(self) -> None:
        storage = MemoryKeyValueStorage({"a": "1"})
        snapshot = storage.snapshot()
        snapshot["b"] = "2"

        assert storage.snapshot() == {"a": "1"}
