"""Gerenciamento de correlation_id para rastreamento de chamadas lógicas.

Uma chamada lógica (execute + retries + refresh de token) compartilha
o mesmo correlation_id, que é injetado em todos os logs.
Usa ContextVar para ser async-safe.

Uso:
    from app.observability import correlation_scope, get_correlation_id

    with correlation_scope():
        # tentativas, refresh e retries herdam o mesmo id
        ...

    correlation_id = get_correlation_id()
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


@contextmanager
def correlation_scope() -> Iterator[str]:
    """Garante um correlation_id durante o bloco.

    Reaproveita o id já definido pelo chamador; só gera um novo
    (e o remove ao sair) quando o contexto ainda não tem id.
    """
    existing = _correlation_id.get()
    if existing:
        yield existing
        return

    token = set_correlation_id()
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)
