"""Executor de requisições autenticadas.

Única porta de saída HTTP do app. Para cada chamada lógica:
    1. Usuário saiu (flag) e endpoint não é de auth → 403 sintético, sem rede
    2. Monta headers (JSON + bearer da sessão, salvo se já informado)
    3. Envia com timeout por tentativa e cancelamento opcional do chamador
    4. Classifica a resposta:
        - 403 suspended/banned → sequência de bloqueio em background;
          a resposta original volta ao chamador
        - 401 (ou 500 "Unauthenticated.") → um refresh de token e nova
          tentativa com o bearer novo
        - outro não-2xx / falha de transporte → uma nova tentativa após
          re-resolver o endpoint

Os dois orçamentos (refresh e re-tentativa de rede) são independentes
e de uso único; o laço explícito substitui recursão.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

from app.domain.auth_payloads import parse_account_lock
from app.network.errors import (
    AuthenticationExpired,
    LoggedOutError,
    NetworkFailure,
    RequestAborted,
    TokenRefreshError,
)
from app.observability.correlation import correlation_scope
from app.observability.metrics import record_latency, record_retry

if TYPE_CHECKING:
    from collections.abc import Mapping

    from app.domain.auth_payloads import AccountLock
    from app.protocols.endpoint_resolver import EndpointResolverProtocol
    from app.protocols.token_refresher import TokenRefresherProtocol
    from app.services.account_lock import AccountLockHandler
    from app.sessions.store import SessionStore
    from config.settings import AuthSettings, NetworkSettings

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
LOGGED_OUT_BODY = {"success": False, "message": "User is logged out"}


@dataclass(slots=True)
class RetryBudget:
    """Orçamentos de uso único de uma chamada lógica."""

    refreshed: bool = False
    network_retried: bool = False


@dataclass(frozen=True, slots=True)
class RequestSpec:
    """Parâmetros imutáveis de uma chamada lógica."""

    endpoint: str
    method: str = "GET"
    json: Any = None
    content: bytes | str | None = None
    params: Mapping[str, Any] | None = None
    headers: Mapping[str, str] | None = None


class _TransportFailure(Exception):
    def __init__(self, cause: BaseException, *, timed_out: bool) -> None:
        super().__init__(type(cause).__name__)
        self.cause = cause
        self.timed_out = timed_out


class RequestExecutor:
    """Executa requisições com refresh de token e re-tentativa única.

    Args:
        http_client: Cliente httpx compartilhado
        resolver: Resolver de endpoint
        store: SessionStore (token e flag de logout)
        token_refresher: Renovador de token
        lock_handler: Tratador de conta suspensa/banida
        auth_settings: Endpoints de auth e sentinela
        network_settings: Timeout por tentativa
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        resolver: EndpointResolverProtocol,
        store: SessionStore,
        token_refresher: TokenRefresherProtocol,
        lock_handler: AccountLockHandler,
        auth_settings: AuthSettings,
        network_settings: NetworkSettings,
    ) -> None:
        self._http_client = http_client
        self._resolver = resolver
        self._store = store
        self._token_refresher = token_refresher
        self._lock_handler = lock_handler
        self._auth_settings = auth_settings
        self._timeout = network_settings.request_timeout_seconds
        self._api_prefix = network_settings.api_prefix

    async def execute(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        json: Any = None,
        content: bytes | str | None = None,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> httpx.Response:
        """Executa uma chamada lógica à API.

        Returns:
            Resposta final (inclusive não-2xx que não geraram re-tentativa).

        Raises:
            LoggedOutError: 401 com o usuário deslogado.
            AuthenticationExpired: 401 e o refresh falhou.
            NetworkFailure: Transporte falhou duas vezes.
            RequestAborted: O chamador sinalizou `cancel_event`.
        """
        spec = RequestSpec(
            endpoint=endpoint,
            method=method.upper(),
            json=json,
            content=content,
            params=params,
            headers=headers,
        )
        with correlation_scope() as correlation_id:
            start = time.perf_counter()
            try:
                return await self._run(spec, cancel_event)
            finally:
                record_latency(
                    "request_executor",
                    spec.method,
                    (time.perf_counter() - start) * 1000,
                    correlation_id=correlation_id,
                )

    async def get(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.execute(endpoint, method="GET", **kwargs)

    async def post(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.execute(endpoint, method="POST", **kwargs)

    async def put(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.execute(endpoint, method="PUT", **kwargs)

    async def delete(self, endpoint: str, **kwargs: Any) -> httpx.Response:
        return await self.execute(endpoint, method="DELETE", **kwargs)

    # ──────────────────────────────────────────────────────────────
    # Laço de tentativas
    # ──────────────────────────────────────────────────────────────

    async def _run(self, spec: RequestSpec, cancel_event: asyncio.Event | None) -> httpx.Response:
        is_auth = self._auth_settings.is_auth_endpoint(spec.endpoint, self._api_prefix)
        if not is_auth and await self._store.is_logged_out():
            logger.info("request_blocked_logged_out", extra={"endpoint": spec.endpoint})
            return self._logged_out_response(spec)

        budget = RetryBudget()
        bearer_override: str | None = None

        while True:
            self._ensure_not_cancelled(spec, cancel_event)
            url = await self._resolver.url_for(spec.endpoint)
            request_headers = await self._build_headers(spec, is_auth, bearer_override)
            request = self._http_client.build_request(
                spec.method,
                url,
                json=spec.json,
                content=spec.content,
                params=spec.params,
                headers=request_headers,
            )

            try:
                response = await self._send(request, spec, cancel_event)
            except _TransportFailure as failure:
                if budget.network_retried:
                    logger.warning(
                        "request_transport_failed",
                        extra={
                            "endpoint": spec.endpoint,
                            "error_type": str(failure),
                            "timed_out": failure.timed_out,
                        },
                    )
                    raise NetworkFailure(
                        endpoint=spec.endpoint, timed_out=failure.timed_out
                    ) from failure.cause
                budget.network_retried = True
                await self._prepare_network_retry(spec, reason=str(failure))
                continue

            lock = self._detect_account_lock(response)
            if lock is not None:
                self._lock_handler.handle(lock)
                return response

            auth_error = self._is_auth_error(response)
            if auth_error and not is_auth and not budget.refreshed:
                bearer_override = await self._refresh_token(spec)
                budget.refreshed = True
                record_retry("token_refresh", spec.endpoint, attempt=2)
                continue

            if not response.is_success and not auth_error and not budget.network_retried:
                budget.network_retried = True
                await self._prepare_network_retry(
                    spec, reason=f"status_{response.status_code}"
                )
                continue

            return response

    async def _send(
        self,
        request: httpx.Request,
        spec: RequestSpec,
        cancel_event: asyncio.Event | None,
    ) -> httpx.Response:
        try:
            async with asyncio.timeout(self._timeout):
                if cancel_event is None:
                    return await self._http_client.send(request)
                return await self._send_cancellable(request, spec, cancel_event)
        except TimeoutError as exc:
            raise _TransportFailure(exc, timed_out=True) from exc
        except httpx.TimeoutException as exc:
            raise _TransportFailure(exc, timed_out=True) from exc
        except httpx.TransportError as exc:
            raise _TransportFailure(exc, timed_out=False) from exc

    async def _send_cancellable(
        self,
        request: httpx.Request,
        spec: RequestSpec,
        cancel_event: asyncio.Event,
    ) -> httpx.Response:
        send_task = asyncio.create_task(self._http_client.send(request))
        cancel_task = asyncio.create_task(cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (send_task, cancel_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(send_task, cancel_task, return_exceptions=True)

        if send_task in done:
            return send_task.result()

        logger.info("request_aborted_by_caller", extra={"endpoint": spec.endpoint})
        raise RequestAborted("Requisição cancelada pelo chamador", spec.endpoint)

    # ──────────────────────────────────────────────────────────────
    # Auxiliares
    # ──────────────────────────────────────────────────────────────

    async def _build_headers(
        self,
        spec: RequestSpec,
        is_auth: bool,
        bearer_override: str | None,
    ) -> httpx.Headers:
        merged = httpx.Headers(DEFAULT_HEADERS)
        if spec.headers:
            merged.update(spec.headers)

        if bearer_override is not None:
            merged["Authorization"] = f"Bearer {bearer_override}"
        elif "authorization" not in merged and not is_auth:
            token = await self._store.current_token()
            if token:
                merged["Authorization"] = f"Bearer {token}"
            else:
                logger.info("request_without_token", extra={"endpoint": spec.endpoint})
        return merged

    async def _refresh_token(self, spec: RequestSpec) -> str:
        if await self._store.is_logged_out():
            raise LoggedOutError("Usuário saiu; refresh não tentado", spec.endpoint)
        try:
            return await self._token_refresher.refresh()
        except TokenRefreshError as exc:
            logger.warning(
                "request_auth_expired",
                extra={"endpoint": spec.endpoint, "status_code": exc.status_code},
            )
            raise AuthenticationExpired(
                "Authentication failed: Please log in again", spec.endpoint
            ) from exc

    async def _prepare_network_retry(self, spec: RequestSpec, *, reason: str) -> None:
        record_retry("network", spec.endpoint, attempt=2)
        logger.info(
            "request_retry_scheduled",
            extra={"endpoint": spec.endpoint, "reason": reason},
        )
        await self._resolver.force_reresolve()

    def _is_auth_error(self, response: httpx.Response) -> bool:
        if response.status_code == 401:
            return True
        if response.status_code != 500:
            return False
        body = _json_or_none(response)
        if not isinstance(body, dict):
            return False
        sentinel = self._auth_settings.unauthenticated_sentinel
        return body.get("error") == sentinel or body.get("message") == sentinel

    @staticmethod
    def _detect_account_lock(response: httpx.Response) -> AccountLock | None:
        if response.status_code != 403:
            return None
        return parse_account_lock(_json_or_none(response))

    @staticmethod
    def _ensure_not_cancelled(spec: RequestSpec, cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestAborted("Requisição cancelada pelo chamador", spec.endpoint)

    def _logged_out_response(self, spec: RequestSpec) -> httpx.Response:
        request = httpx.Request(spec.method, self._resolver.build_url(spec.endpoint))
        return httpx.Response(403, json=LOGGED_OUT_BODY, request=request)


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
