"""Testes para config.settings.

Cobre: leitura de variáveis de ambiente e validate() de
BaseSettings, NetworkSettings, SessionSettings e AuthSettings.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from config.settings import (
    AuthSettings,
    BaseSettings,
    NetworkSettings,
    SessionSettings,
    get_auth_settings,
    get_base_settings,
    get_network_settings,
    get_session_settings,
)
from config.settings.base import parse_environment


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    getters = (get_auth_settings, get_base_settings, get_network_settings, get_session_settings)
    for getter in getters:
        getter.cache_clear()
    yield
    for getter in getters:
        getter.cache_clear()


# ──────────────────────────────────────────────────────────────────────────────
# Testes: BaseSettings
# ──────────────────────────────────────────────────────────────────────────────


class TestBaseSettings:
    """Testes de ambiente e validação base."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("prod", "production"), ("STAGE", "staging"), ("qualquer", "development")],
    )
    def test_parse_environment(self, raw: str, expected: str) -> None:
        assert parse_environment(raw) == expected

    def test_load_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")

        settings = get_base_settings()

        assert settings.is_production is True
        assert settings.redis_url == "redis://localhost:6379/0"
        assert settings.validate() == []

    def test_empty_service_name_is_invalid(self) -> None:
        errors = BaseSettings(service_name="").validate()
        assert any("SERVICE_NAME" in error for error in errors)


# ──────────────────────────────────────────────────────────────────────────────
# Testes: NetworkSettings
# ──────────────────────────────────────────────────────────────────────────────


class TestNetworkSettings:
    """Testes de hosts candidatos e timeouts."""

    def test_defaults_are_valid(self) -> None:
        assert NetworkSettings().validate() == []

    def test_base_url_for_host(self) -> None:
        settings = NetworkSettings(scheme="https", port=8443)
        assert settings.base_url_for("10.0.0.5") == "https://10.0.0.5:8443"

    def test_default_base_url_follows_discovery_switch(self) -> None:
        discovery = NetworkSettings(default_host="10.0.0.1")
        fixed = NetworkSettings(discovery_enabled=False, production_base_url="https://api.x/")

        assert discovery.default_base_url == "http://10.0.0.1:8000"
        assert fixed.default_base_url == "https://api.x"

    def test_hosts_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("API_PRIORITY_HOSTS", " 10.0.0.1, ,10.0.0.2 ")
        monkeypatch.setenv("API_FALLBACK_HOSTS", "")
        monkeypatch.setenv("API_PROBE_TIMEOUT_SECONDS", "0.5")

        settings = get_network_settings()

        assert settings.priority_hosts == ("10.0.0.1", "10.0.0.2")
        assert settings.fallback_hosts == ()
        assert settings.probe_timeout_seconds == 0.5

    def test_discovery_off_by_default_in_production(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("API_DISCOVERY_ENABLED", raising=False)

        assert get_network_settings().discovery_enabled is False

    def test_discovery_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("API_DISCOVERY_ENABLED", "yes")

        assert get_network_settings().discovery_enabled is True

    def test_invalid_values(self) -> None:
        errors = NetworkSettings(
            priority_hosts=(),
            fallback_hosts=(),
            scheme="ftp",
            port=0,
            probe_timeout_seconds=0,
            request_timeout_seconds=-1,
            max_reconnect_attempts=0,
            api_prefix="api",
        ).validate()

        assert len(errors) == 8

    def test_production_url_required_without_discovery(self) -> None:
        errors = NetworkSettings(discovery_enabled=False, production_base_url="").validate()
        assert any("API_PRODUCTION_BASE_URL" in error for error in errors)

    def test_malformed_hosts_are_reported(self) -> None:
        errors = NetworkSettings(
            priority_hosts=("10.0.0.1", "bad host"),
            fallback_hosts=("10.0.0.2/api",),
        ).validate()

        assert len(errors) == 1
        assert "'bad host'" in errors[0]
        assert "'10.0.0.2/api'" in errors[0]


# ──────────────────────────────────────────────────────────────────────────────
# Testes: SessionSettings
# ──────────────────────────────────────────────────────────────────────────────


class TestSessionSettings:
    """Testes do backend de storage da sessão."""

    def test_memory_allowed_only_in_development(self) -> None:
        settings = SessionSettings(storage_backend="memory")

        assert settings.validate(BaseSettings()) == []
        assert settings.validate(BaseSettings(environment="staging")) != []

    def test_redis_requires_url(self) -> None:
        settings = SessionSettings(storage_backend="redis")

        assert settings.validate(BaseSettings()) != []
        assert settings.validate(BaseSettings(redis_url="redis://r:6379")) == []

    def test_keys_must_differ(self) -> None:
        settings = SessionSettings(storage_key="user", logged_out_key="user")
        assert any("distintas" in error for error in settings.validate(BaseSettings()))

    def test_unknown_backend_from_env_falls_back_to_memory(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SESSION_STORAGE_BACKEND", "sqlite")
        assert get_session_settings().storage_backend == "memory"

    def test_file_backend_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SESSION_STORAGE_BACKEND", "FILE")
        monkeypatch.setenv("SESSION_STORAGE_PATH", "/tmp/petsit.json")

        settings = get_session_settings()

        assert settings.storage_backend == "file"
        assert settings.storage_path == "/tmp/petsit.json"


# ──────────────────────────────────────────────────────────────────────────────
# Testes: AuthSettings
# ──────────────────────────────────────────────────────────────────────────────


class TestAuthSettings:
    """Testes dos endpoints de autenticação."""

    @pytest.mark.parametrize(
        "endpoint",
        [
            "/api/login",
            "/API/REGISTER",
            "/api/verify-email?code=1",
            "/api/reset-password",
            "/login",
            "forgot-password",
        ],
    )
    def test_auth_endpoints(self, endpoint: str) -> None:
        assert AuthSettings().is_auth_endpoint(endpoint) is True

    @pytest.mark.parametrize("endpoint", ["/api/pets", "/api/refresh-token", "/api/bookings"])
    def test_regular_endpoints(self, endpoint: str) -> None:
        assert AuthSettings().is_auth_endpoint(endpoint) is False

    def test_defaults_are_valid(self) -> None:
        assert AuthSettings().validate() == []

    def test_refresh_cannot_be_auth_endpoint(self) -> None:
        settings = AuthSettings(auth_endpoints=("/api/login", "/api/refresh-token"))
        assert settings.validate() != []

    def test_auth_endpoints_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTH_ENDPOINTS", "/api/Login, /api/otp")

        settings = get_auth_settings()

        assert settings.auth_endpoints == ("/api/login", "/api/otp")
        assert settings.is_auth_endpoint("/api/otp/send") is True

    def test_custom_api_prefix_is_applied(self) -> None:
        settings = AuthSettings(auth_endpoints=("/v2/login",))

        assert settings.is_auth_endpoint("/login", api_prefix="/v2") is True
        assert settings.is_auth_endpoint("/login") is False
