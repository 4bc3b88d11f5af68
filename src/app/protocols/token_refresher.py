"""Protocolo de refresh de token.

Permite ao SessionStore pedir um token novo sem depender
diretamente do TokenLifecycleManager (que depende do store).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class TokenRefresherProtocol(ABC):
    """Contrato mínimo para renovar o bearer token da sessão."""

    @abstractmethod
    async def refresh(self) -> str:
        """Renova o token da sessão atual e retorna o novo valor."""
