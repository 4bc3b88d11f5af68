"""Agregador de settings do cliente PetSit Connect.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Auth settings
from config.settings.auth import (
    DEFAULT_AUTH_ENDPOINTS,
    UNAUTHENTICATED_SENTINEL,
    AuthSettings,
    get_auth_settings,
)

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    SessionSettings,
    SessionStorageBackend,
    get_base_settings,
    get_session_settings,
)

# Network settings
from config.settings.network import (
    DEFAULT_FALLBACK_HOSTS,
    DEFAULT_PRIORITY_HOSTS,
    NetworkSettings,
    get_network_settings,
)

__all__ = [
    # Constants
    "DEFAULT_AUTH_ENDPOINTS",
    "DEFAULT_FALLBACK_HOSTS",
    "DEFAULT_PRIORITY_HOSTS",
    "UNAUTHENTICATED_SENTINEL",
    # Auth
    "AuthSettings",
    # Base
    "BaseSettings",
    "Environment",
    # Network
    "NetworkSettings",
    "SessionSettings",
    "SessionStorageBackend",
    "get_auth_settings",
    "get_base_settings",
    "get_network_settings",
    "get_session_settings",
]
