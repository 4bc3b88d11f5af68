"""Stores — implementações concretas do storage durável chave-valor.

Módulos disponíveis:
    - memory_storage: Storage em memória para desenvolvimento/testes
    - file_storage: Storage em arquivo JSON local
    - redis_storage: Storage usando Redis (redis.asyncio)
"""

from __future__ import annotations

from app.infra.stores.file_storage import FileKeyValueStorage
from app.infra.stores.memory_storage import MemoryKeyValueStorage
from app.infra.stores.redis_storage import RedisKeyValueStorage

__all__ = [
    "FileKeyValueStorage",
    "MemoryKeyValueStorage",
    "RedisKeyValueStorage",
]
