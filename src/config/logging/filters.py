"""Filters de logging para injeção de contexto e mascaramento.

Filters são responsáveis por adicionar campos contextuais
aos logs sem que o chamador precise informá-los manualmente,
e por garantir que credenciais nunca cheguem ao output.

Campos injetados:
- correlation_id: ID de rastreamento da chamada lógica
- service: Nome do serviço (ex: petsit_client)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

# Atributos de record que nunca podem ser emitidos em claro
SENSITIVE_FIELDS = frozenset({"authorization", "token", "password", "access_token"})
REDACTED = "***"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class SensitiveDataFilter(logging.Filter):
    """Mascara campos sensíveis passados via `extra`.

    Tokens bearer e senhas podem escapar em `extra` por descuido;
    este filter substitui o valor por um marcador fixo.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for field_name in SENSITIVE_FIELDS:
            if getattr(record, field_name, None):
                setattr(record, field_name, REDACTED)
        return True
