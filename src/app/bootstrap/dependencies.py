"""Factories de storage e do container do cliente.

Centraliza a criação das implementações concretas a partir
das configurações de ambiente.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.bootstrap.clients import create_async_redis_client, create_http_client
from app.bootstrap.container import ApiClientContainer
from app.infra.stores import (
    FileKeyValueStorage,
    MemoryKeyValueStorage,
    RedisKeyValueStorage,
)
from config.settings import (
    get_auth_settings,
    get_base_settings,
    get_network_settings,
    get_session_settings,
)

if TYPE_CHECKING:
    import httpx
    from redis.asyncio import Redis as AsyncRedis

    from app.protocols.account_lock import AccountLockNotifierProtocol
    from app.protocols.storage import AsyncKeyValueStorageProtocol
    from config.settings import BaseSettings, SessionSettings

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Storage Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_storage(
    session_settings: SessionSettings,
    base_settings: BaseSettings,
    redis_client: AsyncRedis | None = None,
) -> AsyncKeyValueStorageProtocol:
    """Cria o storage durável conforme SESSION_STORAGE_BACKEND.

    - "memory": MemoryKeyValueStorage (dev only)
    - "file": FileKeyValueStorage (SESSION_STORAGE_PATH)
    - "redis": RedisKeyValueStorage (REDIS_URL)

    Raises:
        ValueError: Backend inválido ou Redis sem REDIS_URL.
    """
    backend = session_settings.storage_backend

    if backend == "redis":
        client = redis_client or create_async_redis_client(base_settings.redis_url)
        logger.info("session_storage_created", extra={"backend": "redis"})
        return RedisKeyValueStorage(client)

    if backend == "file":
        logger.info(
            "session_storage_created",
            extra={"backend": "file", "path": session_settings.storage_path},
        )
        return FileKeyValueStorage(session_settings.storage_path)

    if backend == "memory":
        if not base_settings.is_development:
            logger.warning(
                "memory_storage_in_non_dev",
                extra={"backend": "memory", "environment": base_settings.environment},
            )
        logger.info("session_storage_created", extra={"backend": "memory"})
        return MemoryKeyValueStorage()

    msg = f"SESSION_STORAGE_BACKEND inválido: {backend}"
    raise ValueError(msg)


# ──────────────────────────────────────────────────────────────────────────────
# Container Factory
# ──────────────────────────────────────────────────────────────────────────────


def build_client(
    *,
    notifier: AccountLockNotifierProtocol | None = None,
    storage: AsyncKeyValueStorageProtocol | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApiClientContainer:
    """Monta o container a partir das settings de ambiente.

    Args:
        notifier: Aviso de conta bloqueada (padrão: apenas log)
        storage: Storage já construído (padrão: conforme settings)
        transport: Transporte httpx alternativo (testes)
    """
    base_settings = get_base_settings()
    network_settings = get_network_settings()
    session_settings = get_session_settings()

    redis_client = None
    if storage is None:
        if session_settings.storage_backend == "redis":
            redis_client = create_async_redis_client(base_settings.redis_url)
        storage = create_storage(session_settings, base_settings, redis_client)

    return ApiClientContainer(
        http_client=create_http_client(network_settings, transport),
        storage=storage,
        network_settings=network_settings,
        session_settings=session_settings,
        auth_settings=get_auth_settings(),
        notifier=notifier,
        redis_client=redis_client,
    )
