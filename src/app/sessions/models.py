"""Modelo da sessão do usuário autenticado.

Define a identidade, o status da conta e o bearer token do único
principal ativo no cliente. Os campos de perfil são opacos para o core.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class SessionStatus(Enum):
    """Status da conta conforme o backend."""

    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"
    PENDING = "pending"
    DENIED = "denied"

    @classmethod
    def parse(cls, value: Any) -> SessionStatus:
        """Converte valor do backend; desconhecido vira ACTIVE."""
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.ACTIVE


# Campos do usuário no backend que não são mapeados para atributos próprios
_PROFILE_FIELDS = (
    "age",
    "gender",
    "address",
    "experience",
    "hourly_rate",
    "max_pets",
    "bio",
    "specialties",
    "email_verified",
    "phone_verified",
    "selected_pet_types",
    "pet_breeds",
)


@dataclass(frozen=True, slots=True)
class Session:
    """Sessão do principal autenticado.

    Imutável: alterações geram nova instância via `with_changes`,
    persistida apenas pelo SessionStore.

    Atributos:
        user_id: Identificador do usuário no backend
        email: Identificador estável usado no refresh de token
        name: Nome de exibição
        first_name: Primeiro nome
        last_name: Sobrenome
        role: Papel no marketplace (pet_owner | pet_sitter)
        phone: Telefone de contato
        status: Status da conta
        token: Bearer token (None quando ainda não emitido)
        profile: Campos de perfil opacos ao core
    """

    user_id: str
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    role: str = "pet_owner"
    phone: str = ""
    status: SessionStatus = SessionStatus.ACTIVE
    token: str | None = None
    profile: dict[str, Any] = field(default_factory=dict)

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @property
    def is_locked(self) -> bool:
        """True se a conta está suspensa ou banida."""
        return self.status in (SessionStatus.SUSPENDED, SessionStatus.BANNED)

    @property
    def is_pet_sitter(self) -> bool:
        return self.role in ("pet_sitter", "Pet Sitter")

    def identity_payload(self) -> dict[str, str]:
        """Corpo usado nos endpoints de token (identificador estável)."""
        return {"email": self.email}

    def with_changes(self, **changes: Any) -> Session:
        """Retorna cópia com os campos alterados."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "role": self.role,
            "phone": self.phone,
            "status": self.status.value,
            "token": self.token,
            "profile": dict(self.profile),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        """Deserializa de persistência.

        Raises:
            KeyError: Se o registro não tem identificador de usuário.
        """
        user_id = data.get("user_id", data.get("id"))
        if user_id is None:
            raise KeyError("user_id")
        return cls(
            user_id=str(user_id),
            email=data.get("email", ""),
            name=data.get("name", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=data.get("role", "pet_owner"),
            phone=data.get("phone", ""),
            status=SessionStatus.parse(data.get("status", "active")),
            token=data.get("token") or None,
            profile=dict(data.get("profile") or {}),
        )

    @classmethod
    def from_backend(cls, user: dict[str, Any], token: str | None = None) -> Session:
        """Constrói a sessão a partir do usuário retornado no login/cadastro.

        Args:
            user: Objeto `user` da resposta do backend (snake_case)
            token: Bearer token emitido junto (pode vir dentro de `user`)

        Raises:
            ValueError: Se o usuário não tem `id`.
        """
        if not isinstance(user, dict) or not user.get("id"):
            raise ValueError("Dados de usuário inválidos: id ausente")

        profile = {key: user[key] for key in _PROFILE_FIELDS if user.get(key) is not None}
        image = user.get("profile_image_url") or user.get("profile_image")
        if image:
            profile["profile_image"] = image

        return cls(
            user_id=str(user["id"]),
            email=user.get("email") or "",
            name=user.get("name") or "",
            first_name=user.get("first_name") or "",
            last_name=user.get("last_name") or "",
            role=user.get("role") or "pet_owner",
            phone=user.get("phone") or "",
            status=SessionStatus.parse(user.get("status") or "active"),
            token=token or user.get("token") or None,
            profile=profile,
        )
