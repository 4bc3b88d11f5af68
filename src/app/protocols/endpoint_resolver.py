"""Protocolo de resolução do endpoint base da API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.network.candidates import NetworkStatus


class EndpointResolverProtocol(ABC):
    """Contrato para estratégias de endpoint (estático ou descoberto).

    A estratégia é escolhida uma vez no bootstrap; os consumidores
    (RequestExecutor, TokenLifecycleManager) só conhecem este contrato.
    """

    @abstractmethod
    async def resolve(self) -> str:
        """Determina uma URL base alcançável (nunca levanta)."""

    @abstractmethod
    async def force_reresolve(self) -> str:
        """Invalida a URL atual e resolve de novo."""

    @abstractmethod
    def current(self) -> str:
        """Retorna a última URL conhecida sem bloquear."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Indica se a última resolução encontrou um host alcançável."""

    @abstractmethod
    def status(self) -> NetworkStatus:
        """Snapshot de diagnóstico da resolução."""

    @abstractmethod
    async def retry_connection(self, attempt: int = 1) -> str:
        """Re-resolve com backoff até conectar ou esgotar as tentativas."""

    @abstractmethod
    async def url_for(self, endpoint: str) -> str:
        """URL completa do endpoint, resolvendo a base na primeira chamada."""

    @abstractmethod
    def build_url(self, endpoint: str) -> str:
        """URL completa do endpoint sobre a base atual (sem bloquear)."""
