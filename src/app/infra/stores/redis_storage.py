"""Redis Key-Value Storage — storage durável compartilhado.

Permite que a sessão sobreviva a reinícios e seja compartilhada
entre processos do mesmo usuário (ex: worker + CLI).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.protocols.storage import AsyncKeyValueStorageProtocol

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

# Prefixo para namespace das chaves do cliente
STORAGE_PREFIX = "petsit:"


class RedisKeyValueStorage(AsyncKeyValueStorageProtocol):
    """Storage chave-valor usando redis.asyncio.

    Args:
        redis_client: Cliente Redis assíncrono
        prefix: Namespace das chaves
    """

    def __init__(self, redis_client: AsyncRedis, prefix: str = STORAGE_PREFIX) -> None:
        self._redis = redis_client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{self._prefix}{key}"

    async def get_item(self, key: str) -> str | None:
        value = await self._redis.get(self._key(key))
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    async def set_item(self, key: str, value: str) -> None:
        await self._redis.set(self._key(key), value)
        logger.debug("redis_storage_set", extra={"key": key})

    async def remove_item(self, key: str) -> bool:
        removed = await self._redis.delete(self._key(key))
        return bool(removed)
