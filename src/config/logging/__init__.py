"""Configuração de logging estruturado.

Re-exporta funções e classes para configuração de logging JSON.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (bootstrap)
    configure_logging(level="INFO", service_name="petsit_client")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("api_request_completed", extra={"status_code": 200})

Campos obrigatórios em todo log:
- correlation_id
- service
- level
- logger
- message
- asctime

Tokens, senhas e headers Authorization nunca são emitidos.
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import CorrelationIdFilter, SensitiveDataFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
    create_plain_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    # Filters
    "CorrelationIdFilter",
    "SensitiveDataFilter",
    # Configuração principal
    "configure_logging",
    # Formatters
    "create_json_formatter",
    "create_plain_formatter",
    "get_logger",
    "log_fallback",
]
