"""Settings de sessão local.

Configurações do armazenamento durável da sessão do usuário
e da janela de tratamento de suspensão.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

SessionStorageBackend = Literal["memory", "file", "redis"]


@dataclass(frozen=True)
class SessionSettings:
    """Configurações de sessão.

    Attributes:
        storage_backend: Backend do storage durável (memory|file|redis)
        storage_path: Arquivo JSON usado pelo backend file
        storage_key: Chave do registro serializado da sessão
        logged_out_key: Chave da flag "usuário saiu explicitamente"
        suspension_grace_seconds: Janela do latch de suspensão
    """

    storage_backend: SessionStorageBackend = "memory"
    storage_path: str = ".petsit/session.json"
    storage_key: str = "user"
    logged_out_key: str = "user_logged_out"
    suspension_grace_seconds: float = 5.0

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de sessão.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        valid_backends = {"memory", "file", "redis"}
        if self.storage_backend not in valid_backends:
            errors.append(f"SESSION_STORAGE_BACKEND inválido: {self.storage_backend}")

        if self.storage_backend == "memory" and not base.is_development:
            errors.append("SESSION_STORAGE_BACKEND=memory proibido em staging/production")

        if self.storage_backend == "redis" and not base.redis_url:
            errors.append("SESSION_STORAGE_BACKEND=redis requer REDIS_URL configurado")

        if self.storage_backend == "file" and not self.storage_path:
            errors.append("SESSION_STORAGE_BACKEND=file requer SESSION_STORAGE_PATH")

        if not self.storage_key or not self.logged_out_key:
            errors.append("SESSION_STORAGE_KEY e SESSION_LOGGED_OUT_KEY não podem ser vazios")

        if self.storage_key == self.logged_out_key:
            errors.append("SESSION_STORAGE_KEY e SESSION_LOGGED_OUT_KEY devem ser distintas")

        if self.suspension_grace_seconds <= 0:
            errors.append("SESSION_SUSPENSION_GRACE_SECONDS deve ser > 0")

        return errors


def _load_session_from_env() -> SessionSettings:
    """Carrega SessionSettings de variáveis de ambiente."""
    backend_str = os.getenv("SESSION_STORAGE_BACKEND", "memory").lower()
    backend: SessionStorageBackend = (
        backend_str if backend_str in ("memory", "file", "redis") else "memory"
    )
    return SessionSettings(
        storage_backend=backend,
        storage_path=os.getenv("SESSION_STORAGE_PATH", ".petsit/session.json"),
        storage_key=os.getenv("SESSION_STORAGE_KEY", "user"),
        logged_out_key=os.getenv("SESSION_LOGGED_OUT_KEY", "user_logged_out"),
        suspension_grace_seconds=float(os.getenv("SESSION_SUSPENSION_GRACE_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_session_settings() -> SessionSettings:
    """Retorna instância cacheada de SessionSettings."""
    return _load_session_from_env()
