"""Factories de clientes externos — HTTP (httpx) e Redis."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

    from config.settings import NetworkSettings

logger = logging.getLogger(__name__)

# Conexões simultâneas: probes prioritários + requisições do app
DEFAULT_MAX_CONNECTIONS = 20


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_http_client(
    settings: NetworkSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Cria o cliente httpx compartilhado pelo resolver e pelo executor.

    Args:
        settings: Configurações de rede (timeout padrão)
        transport: Transporte alternativo (testes usam httpx.MockTransport)

    Returns:
        Cliente assíncrono; o dono deve fechá-lo com `aclose()`.
    """
    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        limits=httpx.Limits(max_connections=DEFAULT_MAX_CONNECTIONS),
        follow_redirects=True,
        transport=transport,
    )
    logger.info(
        "http_client_created",
        extra={"timeout_seconds": settings.request_timeout_seconds},
    )
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_async_redis_client(redis_url: str | None) -> AsyncRedis:
    """Cria cliente Redis assíncrono.

    Returns:
        Cliente Redis assíncrono

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    if not redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis = AsyncRedis.from_url(
        redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )

    host = client.connection_pool.connection_kwargs.get("host", "unknown")
    logger.info("async_redis_client_created", extra={"host": host})
    return client
