"""Protocolo de notificação de conta suspensa/banida.

Fronteira com a camada de UI: o core decide QUANDO notificar
(uma vez por episódio); a UI decide COMO (modal, push, etc.).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.auth_payloads import AccountLock


class AccountLockNotifierProtocol(ABC):
    """Contrato para exibir o aviso de suspensão/banimento ao usuário."""

    @abstractmethod
    async def notify(self, lock: AccountLock) -> None:
        """Exibe o aviso e retorna quando o usuário o reconhecer."""
