"""Ciclo de vida do bearer token.

Renova o token da sessão pelo identificador estável do usuário (email),
nunca pelo token antigo. Se o refresh falhar, tenta emitir um token
novo; se ambos falharem, o erro ORIGINAL do refresh é propagado.

Chamadas concorrentes de refresh() compartilham a mesma task em voo.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from app.domain.auth_payloads import TokenResponse
from app.network.errors import TokenRefreshError
from app.observability.metrics import record_latency
from app.protocols.token_refresher import TokenRefresherProtocol

if TYPE_CHECKING:
    from app.protocols.endpoint_resolver import EndpointResolverProtocol
    from app.sessions.store import SessionStore
    from config.settings import AuthSettings, NetworkSettings

logger = logging.getLogger(__name__)

_TOKEN_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class TokenLifecycleManager(TokenRefresherProtocol):
    """Renova o token da sessão com refresh → regenerate.

    Args:
        store: SessionStore (fonte do email e destino do token)
        http_client: Cliente httpx compartilhado
        resolver: Resolver de endpoint
        auth_settings: Endpoints de token
        network_settings: Timeout das requisições
    """

    def __init__(
        self,
        store: SessionStore,
        http_client: httpx.AsyncClient,
        resolver: EndpointResolverProtocol,
        auth_settings: AuthSettings,
        network_settings: NetworkSettings,
    ) -> None:
        self._store = store
        self._http_client = http_client
        self._resolver = resolver
        self._auth_settings = auth_settings
        self._timeout = network_settings.request_timeout_seconds
        self._inflight: asyncio.Task[str] | None = None

    async def refresh(self) -> str:
        """Renova o token; chamadas simultâneas aguardam a mesma renovação.

        Returns:
            Novo bearer token (já persistido na sessão).

        Raises:
            TokenRefreshError: Sem sessão, ou refresh e regenerate falharam.
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._refresh_with_fallback())
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        return await asyncio.shield(task)

    async def regenerate(self) -> str:
        """Pede um token novo ao endpoint de emissão."""
        return await self._request_token(self._auth_settings.regenerate_endpoint)

    def _clear_inflight(self, task: asyncio.Task[str]) -> None:
        if self._inflight is task:
            self._inflight = None
        # Evita "exception was never retrieved" quando ninguém mais aguarda
        if not task.cancelled():
            task.exception()

    async def _refresh_with_fallback(self) -> str:
        start = time.perf_counter()
        try:
            token = await self._request_token(self._auth_settings.refresh_endpoint)
        except TokenRefreshError as refresh_error:
            logger.warning(
                "token_refresh_failed",
                extra={
                    "status_code": refresh_error.status_code,
                    "fallback": "regenerate",
                },
            )
            try:
                token = await self.regenerate()
            except TokenRefreshError as regenerate_error:
                logger.error(
                    "token_regenerate_failed",
                    extra={"status_code": regenerate_error.status_code},
                )
                raise refresh_error from regenerate_error
        finally:
            record_latency("token_manager", "refresh", (time.perf_counter() - start) * 1000)

        logger.info("token_refreshed")
        return token

    async def _request_token(self, endpoint: str) -> str:
        session = await self._store.load()
        if session is None or not session.email:
            raise TokenRefreshError("Sem sessão ativa para renovar o token", endpoint)

        url = await self._resolver.url_for(endpoint)
        try:
            response = await self._http_client.post(
                url,
                json=session.identity_payload(),
                headers=_TOKEN_HEADERS,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise TokenRefreshError(
                f"Falha de transporte ao renovar token: {type(exc).__name__}",
                endpoint,
            ) from exc

        if not response.is_success:
            raise TokenRefreshError(
                f"Renovação de token recusada: {response.status_code}",
                endpoint,
                response.status_code,
            )

        try:
            payload = TokenResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise TokenRefreshError(
                "Resposta de token inválida", endpoint, response.status_code
            ) from exc

        if not payload.is_valid or payload.token is None:
            raise TokenRefreshError("Resposta de token inválida", endpoint, response.status_code)

        await self._store.update_token(payload.token)
        return payload.token
