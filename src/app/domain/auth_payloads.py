"""Payloads do backend consumidos pela camada de sessão.

Contratos Pydantic para as poucas respostas que o core interpreta:
resposta de refresh/regenerate de token e o corpo 403 de bloqueio.
Qualquer outra resposta segue intacta para o chamador.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LOCKED_STATUSES = frozenset({"suspended", "banned"})

DEFAULT_LOCK_MESSAGES = {
    "suspended": (
        "You have been suspended for 72 hours by the admin. "
        "Please email the admin for assistance."
    ),
    "banned": (
        "Your account has been permanently banned. "
        "You will not be able to use the platform anymore."
    ),
}


class TokenResponse(BaseModel):
    """Resposta dos endpoints de refresh e regenerate."""

    model_config = ConfigDict(extra="ignore")

    success: bool = Field(default=False, description="Indica se o token foi emitido.")
    token: str | None = Field(default=None, description="Novo bearer token.")

    @property
    def is_valid(self) -> bool:
        """True quando a resposta traz um token utilizável."""
        return self.success and bool(self.token)


class AccountLock(BaseModel):
    """Sinal de conta bloqueada (HTTP 403 com status suspended/banned)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: Literal["suspended", "banned"] = Field(..., description="Tipo de bloqueio.")
    message: str = Field(default="", description="Mensagem do backend para o usuário.")

    @property
    def display_message(self) -> str:
        """Mensagem a exibir; usa o texto padrão quando o backend não envia."""
        return self.message or DEFAULT_LOCK_MESSAGES[self.status]

    @property
    def title(self) -> str:
        return "Account Banned" if self.status == "banned" else "Account Suspended"


def parse_account_lock(payload: Any) -> AccountLock | None:
    """Extrai AccountLock de um corpo JSON, ou None se não for um bloqueio."""
    if not isinstance(payload, dict):
        return None
    if payload.get("status") not in LOCKED_STATUSES:
        return None
    try:
        return AccountLock.model_validate(
            {"status": payload["status"], "message": str(payload.get("message") or "")}
        )
    except ValidationError:
        return None


__all__ = [
    "DEFAULT_LOCK_MESSAGES",
    "LOCKED_STATUSES",
    "AccountLock",
    "TokenResponse",
    "parse_account_lock",
]
