"""Protocolos e contratos do core da aplicação."""

from .account_lock import AccountLockNotifierProtocol
from .endpoint_resolver import EndpointResolverProtocol
from .storage import AsyncKeyValueStorageProtocol
from .token_refresher import TokenRefresherProtocol

__all__ = [
    "AccountLockNotifierProtocol",
    "AsyncKeyValueStorageProtocol",
    "EndpointResolverProtocol",
    "TokenRefresherProtocol",
]
