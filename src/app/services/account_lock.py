"""Tratamento de conta suspensa/banida.

Quando o backend responde 403 com status suspended/banned, o aviso
ao usuário e o logout local rodam em background, uma única vez por
episódio (latch SuspensionGuard), sem bloquear a requisição que
recebeu o 403.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from app.observability.correlation import get_correlation_id
from app.observability.metrics import record_account_lock
from app.protocols.account_lock import AccountLockNotifierProtocol

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from app.domain.auth_payloads import AccountLock
    from app.sessions.suspension import SuspensionGuard

logger = logging.getLogger(__name__)


class LoggingAccountLockNotifier(AccountLockNotifierProtocol):
    """Notificador padrão: apenas registra o bloqueio no log."""

    async def notify(self, lock: AccountLock) -> None:
        logger.warning(
            "account_lock_notified",
            extra={"lock_status": lock.status, "title": lock.title},
        )


class AccountLockHandler:
    """Dispara aviso + logout uma vez por episódio de bloqueio.

    Args:
        guard: Latch de suspensão
        notifier: Fronteira com a UI (aviso ao usuário)
        logout: Corrotina de logout local (ligável via `bind_logout`)
    """

    def __init__(
        self,
        guard: SuspensionGuard,
        notifier: AccountLockNotifierProtocol,
        logout: Callable[[], Awaitable[Any]],
    ) -> None:
        self._guard = guard
        self._notifier = notifier
        self._logout = logout
        self._tasks: set[asyncio.Task[None]] = set()

    def bind_logout(self, logout: Callable[[], Awaitable[Any]]) -> None:
        """Troca a rotina de logout (o bootstrap liga o logout do AuthService)."""
        self._logout = logout

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def handle(self, lock: AccountLock) -> bool:
        """Inicia a sequência de bloqueio se nenhuma estiver ativa.

        Returns:
            True se esta chamada iniciou a sequência.
        """
        correlation_id = get_correlation_id()
        if not self._guard.try_enter():
            record_account_lock(lock.status, handled=False, correlation_id=correlation_id)
            logger.info("account_lock_already_handling", extra={"lock_status": lock.status})
            return False

        self._guard.schedule_release()
        task = asyncio.create_task(self._run_sequence(lock))
        self._tasks.add(task)
        task.add_done_callback(self._on_sequence_done)
        record_account_lock(lock.status, handled=True, correlation_id=correlation_id)
        logger.warning("account_lock_detected", extra={"lock_status": lock.status})
        return True

    async def drain(self, timeout: float = 10.0) -> None:
        """Aguarda sequências pendentes (shutdown e testes)."""
        if not self._tasks:
            return

        pending_now = list(self._tasks)
        _, pending = await asyncio.wait(pending_now, timeout=timeout)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("account_lock_drain_cancelled", extra={"cancelled_tasks": len(pending)})

    async def _run_sequence(self, lock: AccountLock) -> None:
        await self._notifier.notify(lock)
        await self._logout()
        logger.info("account_lock_logout_completed", extra={"lock_status": lock.status})

    def _on_sequence_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                self._guard.release()
                logger.error(
                    "account_lock_sequence_failed",
                    extra={"error_type": type(exc).__name__},
                )
