"""Settings de autenticação.

Endpoints de token, lista de endpoints de autenticação
(que nunca carregam bearer) e o sentinela de "não autenticado".
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.network import prefixed_path

DEFAULT_AUTH_ENDPOINTS: tuple[str, ...] = (
    "/api/login",
    "/api/register",
    "/api/forgot-password",
    "/api/reset-password",
    "/api/verify-phone",
    "/api/verify-email",
)

UNAUTHENTICATED_SENTINEL = "Unauthenticated."


@dataclass(frozen=True)
class AuthSettings:
    """Configurações de autenticação.

    Attributes:
        refresh_endpoint: Endpoint de refresh do token
        regenerate_endpoint: Endpoint que emite um token novo (fallback)
        login_endpoint: Endpoint de login
        register_endpoint: Endpoint de cadastro
        sitter_status_endpoint: Endpoint de status online do cuidador
        auth_endpoints: Endpoints liberados mesmo com a flag de logout
        unauthenticated_sentinel: Mensagem do backend que indica token inválido em 500
    """

    refresh_endpoint: str = "/api/refresh-token"
    regenerate_endpoint: str = "/api/generate-token"
    login_endpoint: str = "/api/login"
    register_endpoint: str = "/api/register"
    sitter_status_endpoint: str = "/api/location/status"
    auth_endpoints: tuple[str, ...] = DEFAULT_AUTH_ENDPOINTS
    unauthenticated_sentinel: str = UNAUTHENTICATED_SENTINEL

    def is_auth_endpoint(self, endpoint: str, api_prefix: str = "/api") -> bool:
        """Retorna True se o endpoint pertence ao fluxo de autenticação.

        O endpoint é comparado já com o prefixo da API, como será enviado
        (`/login` e `/api/login` são o mesmo endpoint).
        """
        normalized = prefixed_path(endpoint, api_prefix).lower()
        return any(auth_path in normalized for auth_path in self.auth_endpoints)

    def validate(self) -> list[str]:
        """Valida configurações de autenticação.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.refresh_endpoint:
            errors.append("AUTH_REFRESH_ENDPOINT não configurado")

        if not self.regenerate_endpoint:
            errors.append("AUTH_REGENERATE_ENDPOINT não configurado")

        if self.is_auth_endpoint(self.refresh_endpoint):
            errors.append("AUTH_REFRESH_ENDPOINT não pode estar na lista de endpoints de auth")

        return errors


def _load_from_env() -> AuthSettings:
    """Carrega AuthSettings a partir de variáveis de ambiente."""
    raw_endpoints = os.getenv("AUTH_ENDPOINTS")
    auth_endpoints = (
        tuple(item.strip().lower() for item in raw_endpoints.split(",") if item.strip())
        if raw_endpoints
        else DEFAULT_AUTH_ENDPOINTS
    )
    return AuthSettings(
        refresh_endpoint=os.getenv("AUTH_REFRESH_ENDPOINT", "/api/refresh-token"),
        regenerate_endpoint=os.getenv("AUTH_REGENERATE_ENDPOINT", "/api/generate-token"),
        login_endpoint=os.getenv("AUTH_LOGIN_ENDPOINT", "/api/login"),
        register_endpoint=os.getenv("AUTH_REGISTER_ENDPOINT", "/api/register"),
        sitter_status_endpoint=os.getenv("AUTH_SITTER_STATUS_ENDPOINT", "/api/location/status"),
        auth_endpoints=auth_endpoints,
        unauthenticated_sentinel=os.getenv("AUTH_UNAUTHENTICATED_SENTINEL", UNAUTHENTICATED_SENTINEL),
    )


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """Retorna instância cacheada de AuthSettings."""
    return _load_from_env()
