"""Testes para AccountLockHandler."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from app.domain.auth_payloads import AccountLock
from app.services.account_lock import AccountLockHandler, LoggingAccountLockNotifier
from app.sessions.suspension import SuspensionGuard

BANNED = AccountLock(status="banned", message="Banido")


@pytest.fixture
def guard() -> SuspensionGuard:
    return SuspensionGuard(grace_seconds=1.0)


class TestAccountLockHandler:
    """Testes da sequência aviso + logout."""

    @pytest.mark.asyncio
    async def test_first_handle_runs_notify_then_logout(self, guard: SuspensionGuard) -> None:
        order: list[str] = []
        notifier = AsyncMock()
        notifier.notify = AsyncMock(side_effect=lambda lock: order.append("notify"))
        logout = AsyncMock(side_effect=lambda: order.append("logout"))
        handler = AccountLockHandler(guard, notifier, logout)

        assert handler.handle(BANNED) is True
        assert handler.handle(BANNED) is False
        await handler.drain()

        assert order == ["notify", "logout"]
        assert handler.pending == 0
        assert guard.is_latched is True

    @pytest.mark.asyncio
    async def test_failing_sequence_releases_latch(self, guard: SuspensionGuard) -> None:
        notifier = AsyncMock()
        notifier.notify = AsyncMock(side_effect=RuntimeError("ui indisponível"))
        logout = AsyncMock()
        handler = AccountLockHandler(guard, notifier, logout)

        handler.handle(BANNED)
        await handler.drain()

        logout.assert_not_awaited()
        assert guard.is_latched is False

    @pytest.mark.asyncio
    async def test_bind_logout_replaces_callable(self, guard: SuspensionGuard) -> None:
        original = AsyncMock()
        replacement = AsyncMock()
        handler = AccountLockHandler(guard, LoggingAccountLockNotifier(), original)
        handler.bind_logout(replacement)

        handler.handle(BANNED)
        await handler.drain()

        original.assert_not_awaited()
        replacement.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_drain_without_pending_is_noop(self, guard: SuspensionGuard) -> None:
        handler = AccountLockHandler(guard, LoggingAccountLockNotifier(), AsyncMock())
        await handler.drain()
        assert handler.pending == 0
