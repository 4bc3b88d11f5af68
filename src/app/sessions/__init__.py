"""Módulo de sessão do usuário autenticado.

Exporta modelo, store, ciclo de vida do token e latch de suspensão.
"""

from app.sessions.models import Session, SessionStatus
from app.sessions.store import SessionStore
from app.sessions.suspension import SuspensionGuard
from app.sessions.tokens import TokenLifecycleManager

__all__ = [
    "Session",
    "SessionStatus",
    "SessionStore",
    "SuspensionGuard",
    "TokenLifecycleManager",
]
