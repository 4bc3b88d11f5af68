"""Serviços de aplicação.

Orquestração de requisições autenticadas, tratamento de conta
bloqueada e fluxos de autenticação.
"""

from app.services.account_lock import AccountLockHandler, LoggingAccountLockNotifier
from app.services.auth_service import (
    AccountLockedError,
    AuthError,
    AuthService,
    InvalidCredentialsError,
    LoginError,
    RegistrationError,
)
from app.services.request_executor import RequestExecutor, RetryBudget

__all__ = [
    "AccountLockHandler",
    "AccountLockedError",
    "AuthError",
    "AuthService",
    "InvalidCredentialsError",
    "LoggingAccountLockNotifier",
    "LoginError",
    "RegistrationError",
    "RequestExecutor",
    "RetryBudget",
]
