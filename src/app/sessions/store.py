"""Store da sessão do usuário autenticado.

Mantém o único principal ativo em dois níveis:
    - memória: leitura rápida, fonte da verdade durante o processo
    - storage durável: sobrevive a reinícios (chave `user`)

Também guarda a flag "usuário saiu explicitamente" (chave
`user_logged_out`), consultada antes de qualquer requisição.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from app.network.errors import ApiClientError
from app.sessions.models import Session

if TYPE_CHECKING:
    from app.protocols.storage import AsyncKeyValueStorageProtocol
    from app.protocols.token_refresher import TokenRefresherProtocol
    from config.settings import SessionSettings

logger = logging.getLogger(__name__)

LOGGED_OUT_VALUE = "true"


class SessionStore:
    """Store de sessão com escrita serializada.

    Escritas (save/update/clear) passam por um asyncio.Lock: o storage
    durável é gravado primeiro e só então a memória é atualizada, então
    uma falha de escrita deixa a memória intacta.

    Args:
        storage: Storage durável chave-valor
        settings: Configurações de sessão (chaves)
        token_refresher: Renovador usado quando a sessão não tem token
            (pode ser ligado depois com `bind_token_refresher`)
    """

    __slots__ = (
        "_generation",
        "_lock",
        "_session",
        "_settings",
        "_storage",
        "_token_refresher",
    )

    def __init__(
        self,
        storage: AsyncKeyValueStorageProtocol,
        settings: SessionSettings,
        token_refresher: TokenRefresherProtocol | None = None,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._token_refresher = token_refresher
        self._session: Session | None = None
        self._lock = asyncio.Lock()
        # Incrementado a cada clear; leituras iniciadas antes dele são descartadas
        self._generation = 0

    def bind_token_refresher(self, token_refresher: TokenRefresherProtocol) -> None:
        """Liga o renovador de token (quebra o ciclo store ↔ token manager)."""
        self._token_refresher = token_refresher

    # ──────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────

    async def load(self) -> Session | None:
        """Retorna a sessão (memória, depois storage) sem efeitos colaterais."""
        if self._session is not None:
            return self._session
        return await self._restore()

    async def get(self) -> Session | None:
        """Retorna a sessão; sem token, tenta renová-lo antes (best-effort).

        Falha no refresh é registrada e a sessão é retornada como está.
        """
        session = await self.load()
        if session is None or session.has_token or self._token_refresher is None:
            return session

        logger.info("session_token_missing", extra={"user_id": session.user_id})
        try:
            await self._token_refresher.refresh()
        except ApiClientError as exc:
            logger.warning(
                "session_token_refresh_failed",
                extra={"user_id": session.user_id, "error_type": type(exc).__name__},
            )
        return await self.load()

    async def current_token(self) -> str | None:
        """Atalho para o bearer token da sessão (via `get`)."""
        session = await self.get()
        return session.token if session else None

    # ──────────────────────────────────────────────────────────────
    # Escrita
    # ──────────────────────────────────────────────────────────────

    async def save(self, session: Session) -> None:
        """Persiste a sessão (storage durável primeiro, depois memória)."""
        payload = json.dumps(session.to_dict())
        async with self._lock:
            await self._storage.set_item(self._settings.storage_key, payload)
            self._session = session
        logger.debug("session_saved", extra={"user_id": session.user_id})

    async def update(self, **changes: Any) -> Session | None:
        """Altera campos da sessão atual e persiste.

        Returns:
            Sessão atualizada, ou None se não há sessão.
        """
        async with self._lock:
            current = self._session or await self._restore()
            if current is None:
                logger.warning("session_update_without_session")
                return None
            updated = current.with_changes(**changes)
            await self._storage.set_item(
                self._settings.storage_key, json.dumps(updated.to_dict())
            )
            self._session = updated
        logger.debug("session_updated", extra={"fields": sorted(changes)})
        return updated

    async def update_token(self, token: str) -> Session | None:
        """Grava um novo bearer token na sessão atual."""
        return await self.update(token=token)

    async def clear(self) -> None:
        """Remove a sessão da memória e do storage."""
        async with self._lock:
            self._generation += 1
            self._session = None
            await self._storage.remove_item(self._settings.storage_key)
        logger.info("session_cleared")

    # ──────────────────────────────────────────────────────────────
    # Flag de logout
    # ──────────────────────────────────────────────────────────────

    async def is_logged_out(self) -> bool:
        value = await self._storage.get_item(self._settings.logged_out_key)
        return value == LOGGED_OUT_VALUE

    async def mark_logged_out(self) -> None:
        await self._storage.set_item(self._settings.logged_out_key, LOGGED_OUT_VALUE)

    async def clear_logged_out(self) -> None:
        await self._storage.remove_item(self._settings.logged_out_key)

    async def end_session(self) -> None:
        """Logout local: limpa a sessão e marca a flag de logout."""
        await self.clear()
        await self.mark_logged_out()
        logger.info("session_ended")

    # ──────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────

    async def _restore(self) -> Session | None:
        """Lê o registro durável e o adota em memória.

        Um clear concorrente invalida a leitura: o registro lido antes
        dele nunca volta para a memória.
        """
        generation = self._generation
        raw = await self._storage.get_item(self._settings.storage_key)
        if raw is None or generation != self._generation:
            return None

        session = self._decode(raw)
        if session is not None and self._session is None:
            self._session = session
            logger.info("session_restored", extra={"user_id": session.user_id})
        return self._session or session

    @staticmethod
    def _decode(raw: str) -> Session | None:
        try:
            return Session.from_dict(json.loads(raw))
        except (json.JSONDecodeError, KeyError, TypeError, AttributeError) as exc:
            logger.error(
                "session_record_corrupt",
                extra={"error_type": type(exc).__name__},
            )
            return None
