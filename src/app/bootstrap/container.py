"""Container do cliente de API — composition root dos componentes.

Liga resolver, sessão, tokens, latch de suspensão, executor e
serviço de autenticação, e é dono dos recursos compartilhados
(cliente httpx e, opcionalmente, cliente Redis).
"""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING, Any

from app.network.resolver import create_endpoint_resolver
from app.services.account_lock import AccountLockHandler, LoggingAccountLockNotifier
from app.services.auth_service import AuthService
from app.services.request_executor import RequestExecutor
from app.sessions.store import SessionStore
from app.sessions.suspension import SuspensionGuard
from app.sessions.tokens import TokenLifecycleManager

if TYPE_CHECKING:
    import httpx
    from redis.asyncio import Redis as AsyncRedis

    from app.protocols.account_lock import AccountLockNotifierProtocol
    from app.protocols.storage import AsyncKeyValueStorageProtocol
    from config.settings import AuthSettings, NetworkSettings, SessionSettings

logger = logging.getLogger(__name__)


class ApiClientContainer:
    """Agrupa os componentes do cliente com ciclo de vida único.

    Uso:
        async with build_client() as client:
            response = await client.executor.get("/api/pets")
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        storage: AsyncKeyValueStorageProtocol,
        network_settings: NetworkSettings,
        session_settings: SessionSettings,
        auth_settings: AuthSettings,
        notifier: AccountLockNotifierProtocol | None = None,
        redis_client: AsyncRedis | None = None,
    ) -> None:
        self.http_client = http_client
        self.storage = storage
        self._redis_client = redis_client

        self.resolver = create_endpoint_resolver(network_settings, http_client)
        self.session_store = SessionStore(storage, session_settings)
        self.tokens = TokenLifecycleManager(
            self.session_store,
            http_client,
            self.resolver,
            auth_settings,
            network_settings,
        )
        self.session_store.bind_token_refresher(self.tokens)

        self.suspension_guard = SuspensionGuard(session_settings.suspension_grace_seconds)
        self.lock_handler = AccountLockHandler(
            self.suspension_guard,
            notifier or LoggingAccountLockNotifier(),
            self.session_store.end_session,
        )
        self.executor = RequestExecutor(
            http_client,
            self.resolver,
            self.session_store,
            self.tokens,
            self.lock_handler,
            auth_settings,
            network_settings,
        )
        self.auth = AuthService(self.executor, self.session_store, auth_settings)
        self.lock_handler.bind_logout(partial(self.auth.logout, skip_api_calls=True))

    async def start(self) -> str:
        """Resolve o endpoint inicial; retorna a URL base escolhida."""
        base_url = await self.resolver.resolve()
        logger.info(
            "api_client_started",
            extra={"base_url": base_url, "connected": self.resolver.is_connected()},
        )
        return base_url

    async def aclose(self) -> None:
        """Aguarda sequências de bloqueio pendentes e fecha os clientes."""
        await self.lock_handler.drain()
        await self.http_client.aclose()
        if self._redis_client is not None:
            await self._redis_client.aclose()
        logger.info("api_client_closed")

    async def __aenter__(self) -> ApiClientContainer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
