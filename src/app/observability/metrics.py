"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente pelo backend de logs.

Métricas suportadas:
- Latência: tempo de cada chamada lógica por componente/operação
- Retry: contador de retries por tipo (network, auth_refresh)
- Account lock: contador de sinais de suspensão/banimento recebidos

Uso:
    from app.observability.metrics import record_latency, record_retry

    start = time.perf_counter()
    # ... operação ...
    record_latency("request_executor", "execute", (time.perf_counter() - start) * 1000)

    record_retry("network", endpoint="/api/bookings", attempt=1)
"""

from __future__ import annotations

import logging

from app.observability.correlation import get_correlation_id

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "request_executor", "endpoint_resolver")
        operation: Nome da operação (ex: "execute", "resolve")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação (usa o do contexto se omitido)
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )


def record_retry(
    kind: str,
    endpoint: str,
    attempt: int,
    correlation_id: str | None = None,
) -> None:
    """Registra um retry de requisição.

    Args:
        kind: Tipo do retry ("network" ou "auth_refresh")
        endpoint: Endpoint lógico (path, sem host)
        attempt: Número da tentativa que será feita
        correlation_id: ID de correlação (usa o do contexto se omitido)
    """
    logger.info(
        "metric_retry",
        extra={
            "metric_type": "retry",
            "kind": kind,
            "endpoint": endpoint,
            "attempt": attempt,
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )


def record_account_lock(
    status: str,
    handled: bool,
    correlation_id: str | None = None,
) -> None:
    """Registra sinal de conta suspensa/banida.

    Args:
        status: Status recebido ("suspended" ou "banned")
        handled: True se esta chamada iniciou a sequência de logout
        correlation_id: ID de correlação (usa o do contexto se omitido)
    """
    logger.info(
        "metric_account_lock",
        extra={
            "metric_type": "account_lock",
            "status": status,
            "handled": handled,
            "correlation_id": correlation_id or get_correlation_id(),
        },
    )
