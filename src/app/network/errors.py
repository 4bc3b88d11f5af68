"""Erros tipados do cliente de API.

Taxonomia exposta aos colaboradores:
    - NetworkFailure: falha de transporte/timeout após o retry
    - RequestAborted: cancelamento pedido pelo próprio chamador
    - AuthenticationExpired: 401 (ou 500 "Unauthenticated.") sem refresh possível
    - LoggedOutError: refresh bloqueado porque o usuário saiu
    - TokenRefreshError: refresh e regenerate falharam
    - EndpointUnavailableError: retry_connection esgotou as tentativas

Mensagens nunca carregam tokens ou dados pessoais.
"""

from __future__ import annotations


class ApiClientError(Exception):
    """Base de todos os erros do cliente de API."""

    def __init__(self, message: str, endpoint: str | None = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint


class NetworkFailure(ApiClientError):
    """Transporte falhou (conexão, DNS, timeout) e o retry foi consumido."""

    def __init__(
        self,
        message: str = "Network request failed. Please check your connection and try again.",
        endpoint: str | None = None,
        *,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message, endpoint)
        self.timed_out = timed_out


class RequestAborted(ApiClientError):
    """O chamador cancelou a requisição."""


class AuthenticationExpired(ApiClientError):
    """Token rejeitado e não foi possível renová-lo."""


class LoggedOutError(AuthenticationExpired):
    """Usuário saiu explicitamente; nenhuma renovação é tentada."""


class TokenRefreshError(ApiClientError):
    """Refresh (e o regenerate de fallback) não produziram token."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, endpoint)
        self.status_code = status_code


class EndpointUnavailableError(ApiClientError):
    """Nenhum host candidato respondeu após as tentativas de reconexão."""
