"""Serviço de autenticação.

Login, cadastro e logout sobre o RequestExecutor. O resultado de
login/cadastro vira a Session persistida; o logout encerra a sessão
local e marca a flag de logout (que bloqueia chamadas posteriores).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from app.domain.auth_payloads import AccountLock, parse_account_lock
from app.network.errors import ApiClientError
from app.sessions.models import Session

if TYPE_CHECKING:
    from collections.abc import Mapping

    import httpx

    from app.services.request_executor import RequestExecutor
    from app.sessions.store import SessionStore
    from config.settings import AuthSettings

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = (
    "Invalid email or password. Please check your credentials and try again."
)


class AuthError(Exception):
    """Base dos erros do fluxo de autenticação."""


class InvalidCredentialsError(AuthError):
    """Backend recusou email/senha (401)."""


class AccountLockedError(AuthError):
    """Conta suspensa ou banida."""

    def __init__(self, lock: AccountLock) -> None:
        super().__init__(lock.display_message)
        self.lock = lock

    @property
    def status(self) -> str:
        return self.lock.status


class LoginError(AuthError):
    """Login falhou por outro motivo (resposta inválida, erro do servidor)."""


class RegistrationError(AuthError):
    """Cadastro recusado pelo backend."""


class AuthService:
    """Fluxos de login, cadastro e logout.

    Args:
        executor: Executor de requisições
        store: SessionStore
        settings: Endpoints de autenticação
    """

    def __init__(
        self,
        executor: RequestExecutor,
        store: SessionStore,
        settings: AuthSettings,
    ) -> None:
        self._executor = executor
        self._store = store
        self._settings = settings
        self._logging_out = False

    async def login(self, email: str, password: str) -> Session:
        """Autentica e persiste a sessão.

        Raises:
            InvalidCredentialsError: 401.
            AccountLockedError: Conta suspensa/banida.
            LoginError: Resposta inválida ou outro erro.
        """
        response = await self._executor.post(
            self._settings.login_endpoint,
            json={"email": email, "password": password},
        )
        result = _parse_json(response)
        if result is None:
            logger.warning("login_invalid_response", extra={"status_code": response.status_code})
            raise LoginError("Server returned invalid response")

        if not response.is_success:
            logger.info("login_rejected", extra={"status_code": response.status_code})
            if response.status_code == 401:
                raise InvalidCredentialsError(result.get("message") or INVALID_CREDENTIALS_MESSAGE)
            if response.status_code == 403:
                lock = parse_account_lock(result)
                if lock is not None:
                    raise AccountLockedError(lock)
                raise LoginError(result.get("message") or "Access denied")
            raise LoginError(result.get("message") or f"Login failed: {response.status_code}")

        lock = parse_account_lock(result)
        if lock is not None:
            logger.warning("login_account_locked", extra={"lock_status": lock.status})
            raise AccountLockedError(lock)

        if not result.get("success"):
            raise LoginError(result.get("message") or "Login failed")

        session = await self._persist(result.get("user"), result.get("token"), error=LoginError)
        logger.info("login_succeeded", extra={"user_id": session.user_id, "role": session.role})
        return session

    async def register(self, payload: Mapping[str, Any]) -> Session:
        """Cadastra o usuário e persiste a sessão retornada.

        Raises:
            RegistrationError: Cadastro recusado ou resposta inválida.
        """
        body = dict(payload)
        body.setdefault("password_confirmation", body.get("password"))
        response = await self._executor.post(self._settings.register_endpoint, json=body)
        result = _parse_json(response)
        if result is None:
            raise RegistrationError("Server error. Please try again later.")

        if not response.is_success or not result.get("success"):
            logger.info("register_rejected", extra={"status_code": response.status_code})
            raise RegistrationError(result.get("message") or "Registration failed")

        session = await self._persist(
            result.get("user"), result.get("token"), error=RegistrationError
        )
        logger.info("register_succeeded", extra={"user_id": session.user_id, "role": session.role})
        return session

    async def store_user_from_backend(
        self,
        user: Mapping[str, Any],
        token: str | None = None,
    ) -> Session:
        """Persiste um usuário vindo do backend (ex: após verificação).

        Raises:
            ValueError: Se o usuário não tem `id`.
        """
        await self._store.clear_logged_out()
        session = Session.from_backend(dict(user), token)
        await self._store.save(session)
        return session

    async def logout(self, skip_api_calls: bool = False) -> None:
        """Encerra a sessão local.

        Cuidadores são marcados offline no backend antes, salvo quando
        `skip_api_calls` (conta bloqueada: as chamadas falhariam).
        Chamadas concorrentes enquanto um logout está em curso são ignoradas.
        """
        if self._logging_out:
            logger.info("logout_already_in_progress")
            return

        self._logging_out = True
        try:
            session = await self._store.load()
            if session is not None and session.is_pet_sitter and not skip_api_calls:
                await self._set_sitter_offline()
            await self._store.end_session()
            logger.info("logout_completed", extra={"skip_api_calls": skip_api_calls})
        finally:
            self._logging_out = False

    async def is_authenticated(self) -> bool:
        if await self._store.is_logged_out():
            return False
        return await self._store.load() is not None

    async def current_session(self) -> Session | None:
        return await self._store.get()

    async def _persist(
        self,
        user: Any,
        token: str | None,
        *,
        error: type[AuthError],
    ) -> Session:
        try:
            session = Session.from_backend(user, token)
        except ValueError as exc:
            raise error("Invalid user data received from server") from exc
        await self._store.clear_logged_out()
        await self._store.save(session)
        return session

    async def _set_sitter_offline(self) -> None:
        try:
            response = await self._executor.post(
                self._settings.sitter_status_endpoint,
                json={"is_online": False},
            )
        except ApiClientError as exc:
            logger.warning("logout_sitter_offline_failed", extra={"error_type": type(exc).__name__})
            return

        if not response.is_success:
            logger.warning(
                "logout_sitter_offline_rejected",
                extra={"status_code": response.status_code},
            )


def _parse_json(response: httpx.Response) -> dict[str, Any] | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
