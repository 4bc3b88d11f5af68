"""Resolução do endpoint base da API.

Duas estratégias com o mesmo contrato, escolhidas uma vez no bootstrap:
    - StaticEndpointResolver: endpoint público fixo (produção)
    - DiscoveredEndpointResolver: descobre o servidor de dev/teste
      entre hosts candidatos em redes que mudam (WiFi, dados móveis, hotspot)

Algoritmo de descoberta:
    1. Hosts prioritários testados em paralelo; vence o primeiro da lista
       (ordem configurada) cujo probe respondeu.
    2. Sem vencedor, hosts de fallback testados em sequência.
    3. Tudo falhou: usa o host padrão e marca desconectado (nunca levanta).

Probe = GET curto no host; qualquer status < 500 (até 404) conta como
alcançável, pois o que se testa é alcance, não correção.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx

from app.network.candidates import (
    EndpointCandidate,
    NetworkStatus,
    build_candidate_lists,
    classify_network_type,
    host_of,
)
from app.network.errors import EndpointUnavailableError
from app.observability.metrics import record_latency
from app.protocols.endpoint_resolver import EndpointResolverProtocol
from config.logging import log_fallback
from config.settings.network import prefixed_path

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from config.settings import NetworkSettings

logger = logging.getLogger(__name__)


class BaseEndpointResolver(EndpointResolverProtocol):
    """Helpers de URL comuns às estratégias."""

    def __init__(self, settings: NetworkSettings) -> None:
        self._settings = settings
        self._resolved = False

    async def url_for(self, endpoint: str) -> str:
        if not self._resolved:
            await self.resolve()
        return self.build_url(endpoint)

    def build_url(self, endpoint: str) -> str:
        """Monta a URL completa, adicionando o prefixo da API quando ausente."""
        return f"{self.current()}{prefixed_path(endpoint, self._settings.api_prefix)}"

    def media_url(self, path: str) -> str:
        """Converte caminhos de mídia do backend (/storage/...) em URL absoluta."""
        if not path:
            return ""
        if path.startswith("http"):
            return path
        if path.startswith("/storage/"):
            return f"{self.current()}{path}"
        return path


class StaticEndpointResolver(BaseEndpointResolver):
    """Endpoint fixo; nenhuma descoberta é feita."""

    def __init__(self, settings: NetworkSettings, base_url: str | None = None) -> None:
        super().__init__(settings)
        self._base_url = (base_url or settings.production_base_url).rstrip("/")
        self._resolved = True

    async def resolve(self) -> str:
        return self._base_url

    async def force_reresolve(self) -> str:
        return self._base_url

    async def retry_connection(self, attempt: int = 1) -> str:
        return self._base_url

    def current(self) -> str:
        return self._base_url

    def is_connected(self) -> bool:
        return True

    def status(self) -> NetworkStatus:
        return NetworkStatus(
            base_url=self._base_url,
            connected=True,
            network_type=classify_network_type(host_of(self._base_url)),
        )


class DiscoveredEndpointResolver(BaseEndpointResolver):
    """Descobre um host alcançável entre candidatos configurados.

    Resoluções concorrentes compartilham a mesma task em voo, então
    N chamadas simultâneas de resolve() retornam a mesma URL.

    Args:
        settings: Configurações de rede (hosts, porta, timeouts)
        http_client: Cliente httpx compartilhado (opcional; sem ele,
            cada resolução abre e fecha o próprio cliente)
    """

    def __init__(
        self,
        settings: NetworkSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings)
        self._http_client = http_client
        self._priority, self._fallback = build_candidate_lists(
            settings.priority_hosts,
            settings.fallback_hosts,
        )
        self._base_url = settings.default_base_url
        self._connected = False
        self._inflight: asyncio.Task[str] | None = None

    # ──────────────────────────────────────────────────────────────
    # Contrato
    # ──────────────────────────────────────────────────────────────

    async def resolve(self) -> str:
        return await self._join_or_start()

    async def force_reresolve(self) -> str:
        self._connected = False
        logger.info("endpoint_reresolve_forced", extra={"previous_base_url": self._base_url})
        return await self._join_or_start()

    def current(self) -> str:
        return self._base_url

    def is_connected(self) -> bool:
        return self._connected

    def status(self) -> NetworkStatus:
        return NetworkStatus(
            base_url=self._base_url,
            connected=self._connected,
            network_type=classify_network_type(host_of(self._base_url)),
            priority_hosts=tuple(c.host for c in self._priority),
            fallback_hosts=tuple(c.host for c in self._fallback),
        )

    async def retry_connection(self, attempt: int = 1) -> str:
        """Re-resolve com backoff exponencial até conectar.

        Espera `2**tentativa * reconnect_backoff_seconds` antes de cada
        tentativa, a partir de `attempt` até `max_reconnect_attempts`.

        Raises:
            EndpointUnavailableError: Se nenhuma tentativa conectou.
        """
        max_attempts = self._settings.max_reconnect_attempts
        for current in range(attempt, max_attempts + 1):
            delay = (2**current) * self._settings.reconnect_backoff_seconds
            logger.info(
                "endpoint_reconnect_scheduled",
                extra={"attempt": current, "max_attempts": max_attempts, "delay_seconds": delay},
            )
            await asyncio.sleep(delay)
            base_url = await self.resolve()
            if self._connected:
                return base_url

        msg = f"Nenhum host alcançável após {max_attempts} tentativas"
        raise EndpointUnavailableError(msg)

    # ──────────────────────────────────────────────────────────────
    # Resolução
    # ──────────────────────────────────────────────────────────────

    async def _join_or_start(self) -> str:
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._run_resolution())
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        # shield: cancelar um chamador não cancela a resolução dos demais
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[str]) -> None:
        if self._inflight is task:
            self._inflight = None

    async def _run_resolution(self) -> str:
        start = time.perf_counter()
        async with self._probe_client() as client:
            winner = await self._probe_priority(client)
            if winner is None:
                winner = await self._probe_fallback(client)

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._resolved = True
        if winner is not None:
            self._base_url = self._settings.base_url_for(winner.host)
            self._connected = True
            logger.info(
                "endpoint_resolved",
                extra={
                    "base_url": self._base_url,
                    "network_type": winner.network_type.value,
                },
            )
        else:
            self._base_url = self._settings.base_url_for(self._settings.default_host)
            self._connected = False
            log_fallback(
                logger,
                "endpoint_resolver",
                reason="all_candidates_unreachable",
                elapsed_ms=round(elapsed_ms, 2),
            )

        record_latency("endpoint_resolver", "resolve", elapsed_ms)
        return self._base_url

    async def _probe_priority(self, client: httpx.AsyncClient) -> EndpointCandidate | None:
        """Testa os prioritários em paralelo; vence o primeiro na ordem da lista."""
        if not self._priority:
            return None

        tasks = [asyncio.create_task(self._probe(client, c)) for c in self._priority]
        try:
            for candidate, task in zip(self._priority, tasks, strict=True):
                if await task:
                    return candidate
            return None
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _probe_fallback(self, client: httpx.AsyncClient) -> EndpointCandidate | None:
        """Testa os hosts de fallback um a um (limita a latência total)."""
        for candidate in self._fallback:
            if await self._probe(client, candidate):
                return candidate
        return None

    async def _probe(self, client: httpx.AsyncClient, candidate: EndpointCandidate) -> bool:
        url = f"{self._settings.base_url_for(candidate.host)}{self._settings.probe_path}"
        timeout = self._settings.probe_timeout_seconds
        try:
            async with asyncio.timeout(timeout):
                response = await client.get(
                    url,
                    headers={"Content-Type": "application/json"},
                    timeout=timeout,
                )
        except (httpx.HTTPError, httpx.InvalidURL, TimeoutError) as exc:
            # Host mal configurado conta como inalcançável
            logger.debug(
                "endpoint_probe_failed",
                extra={"host": candidate.host, "error_type": type(exc).__name__},
            )
            return False

        reachable = response.status_code < 500
        logger.debug(
            "endpoint_probe_completed",
            extra={
                "host": candidate.host,
                "status_code": response.status_code,
                "reachable": reachable,
            },
        )
        return reachable

    @asynccontextmanager
    async def _probe_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._http_client is not None:
            yield self._http_client
            return
        async with httpx.AsyncClient(timeout=self._settings.probe_timeout_seconds) as client:
            yield client


def create_endpoint_resolver(
    settings: NetworkSettings,
    http_client: httpx.AsyncClient | None = None,
) -> BaseEndpointResolver:
    """Escolhe a estratégia de endpoint conforme a configuração.

    Descoberta desligada (produção) → StaticEndpointResolver.
    """
    if not settings.discovery_enabled:
        logger.info("endpoint_strategy_selected", extra={"strategy": "static"})
        return StaticEndpointResolver(settings)

    logger.info(
        "endpoint_strategy_selected",
        extra={
            "strategy": "discovered",
            "priority_count": len(settings.priority_hosts),
            "fallback_count": len(settings.fallback_hosts),
        },
    )
    return DiscoveredEndpointResolver(settings, http_client)
