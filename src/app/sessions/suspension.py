"""Latch de suspensão/banimento.

Garante que o aviso + logout de conta bloqueada rode uma única vez
por episódio, mesmo com várias requisições recebendo 403 ao mesmo
tempo. O latch é liberado após uma janela de carência.
"""

from __future__ import annotations

import asyncio
import logging
import threading

logger = logging.getLogger(__name__)

DEFAULT_GRACE_SECONDS = 5.0


class SuspensionGuard:
    """Latch compare-and-set com liberação temporizada."""

    def __init__(self, grace_seconds: float = DEFAULT_GRACE_SECONDS) -> None:
        self._grace_seconds = grace_seconds
        self._latched = False
        self._mutex = threading.Lock()
        self._release_handle: asyncio.TimerHandle | None = None

    @property
    def is_latched(self) -> bool:
        return self._latched

    def try_enter(self) -> bool:
        """Trava o latch; True apenas para quem efetivamente travou."""
        with self._mutex:
            if self._latched:
                return False
            self._latched = True
            return True

    def release(self) -> None:
        with self._mutex:
            self._latched = False
            if self._release_handle is not None:
                self._release_handle.cancel()
                self._release_handle = None

    def schedule_release(self, delay: float | None = None) -> None:
        """Agenda a liberação no loop corrente (padrão: janela de carência)."""
        seconds = self._grace_seconds if delay is None else delay
        loop = asyncio.get_running_loop()
        with self._mutex:
            if self._release_handle is not None:
                self._release_handle.cancel()
            self._release_handle = loop.call_later(seconds, self._timed_release)
        logger.debug("suspension_release_scheduled", extra={"delay_seconds": seconds})

    def _timed_release(self) -> None:
        with self._mutex:
            self._latched = False
            self._release_handle = None
        logger.debug("suspension_latch_released")
