"""Bootstrap do cliente — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings
e monta o container que conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import build_client, initialize_app

    # Na inicialização do processo
    initialize_app()

    async with build_client() as client:
        session = await client.auth.login(email, password)
        response = await client.executor.get("/api/pets")
"""

from __future__ import annotations

import logging
import os

from app.bootstrap.container import ApiClientContainer
from app.bootstrap.dependencies import build_client, create_storage
from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_auth_settings,
    get_base_settings,
    get_network_settings,
    get_session_settings,
)

# Nome do serviço para logs e métricas
SERVICE_NAME = "petsit_client"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do processo.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes.

    Configura logging em nível DEBUG sem JSON para facilitar debug.
    """
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
        json_output=False,
    )


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    base = get_base_settings()
    strict_mode = base.environment in STRICT_VALIDATION_ENVS
    errors: list[str] = []

    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"network: {error}" for error in get_network_settings().validate())
    errors.extend(f"session: {error}" for error in get_session_settings().validate(base))
    errors.extend(f"auth: {error}" for error in get_auth_settings().validate())

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": base.environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": base.environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {base.environment}:\n{details}")


__all__ = [
    "ApiClientContainer",
    "build_client",
    "create_storage",
    "initialize_app",
    "initialize_test_app",
    "validate_runtime_settings",
]
