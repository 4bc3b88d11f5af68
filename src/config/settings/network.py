"""Settings de rede e descoberta de endpoint.

Hosts candidatos da API, timeouts de probe/requisição e o
interruptor de descoberta (desligado em produção).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from config.settings.base.core import parse_environment

# Hosts mais prováveis (WiFi atual primeiro), testados em paralelo
DEFAULT_PRIORITY_HOSTS: tuple[str, ...] = (
    "192.168.100.239",
    "192.168.100.225",
    "192.168.100.226",
    "172.20.10.2",
    "172.20.10.1",
    "192.168.100.197",
    "127.0.0.1",
    "localhost",
)

# Hosts de fallback, testados em sequência
DEFAULT_FALLBACK_HOSTS: tuple[str, ...] = (
    "192.168.100.239",
    "192.168.100.225",
    "192.168.100.226",
    "172.20.10.2",
    "172.20.10.1",
    "172.20.10.3",
    "172.20.10.4",
    "192.168.100.197",
    "127.0.0.1",
    "192.168.100.192",
    "192.168.100.184",
    "192.168.100.179",
    "192.168.100.215",
    "192.168.1.100",
    "192.168.0.100",
    "192.168.100.1",
    "192.168.43.1",
    "192.168.137.1",
    "10.0.0.100",
)

DEFAULT_HOST = "192.168.100.239"
DEFAULT_PRODUCTION_BASE_URL = "http://localhost:8000"


@dataclass(frozen=True)
class NetworkSettings:
    """Configurações de rede do cliente.

    Attributes:
        priority_hosts: Hosts testados em paralelo (ordem = prioridade)
        fallback_hosts: Hosts testados em sequência quando nenhum prioritário responde
        port: Porta da API nos hosts candidatos
        scheme: Esquema da URL base (http|https)
        probe_path: Caminho leve usado no teste de alcance
        probe_timeout_seconds: Timeout de cada probe
        request_timeout_seconds: Timeout de cada tentativa de requisição
        default_host: Host usado quando nenhum candidato responde
        production_base_url: Endpoint fixo usado quando a descoberta está desligada
        discovery_enabled: Liga a descoberta de endpoint (dev/test)
        api_prefix: Prefixo adicionado a endpoints que não o possuem
        max_reconnect_attempts: Máximo de tentativas de retry_connection
        reconnect_backoff_seconds: Base do backoff exponencial de retry_connection
    """

    priority_hosts: tuple[str, ...] = DEFAULT_PRIORITY_HOSTS
    fallback_hosts: tuple[str, ...] = DEFAULT_FALLBACK_HOSTS
    port: int = 8000
    scheme: str = "http"
    probe_path: str = "/"
    probe_timeout_seconds: float = 2.0
    request_timeout_seconds: float = 30.0
    default_host: str = DEFAULT_HOST
    production_base_url: str = DEFAULT_PRODUCTION_BASE_URL
    discovery_enabled: bool = True
    api_prefix: str = "/api"
    max_reconnect_attempts: int = 3
    reconnect_backoff_seconds: float = 1.0

    def base_url_for(self, host: str) -> str:
        """Monta a URL base para um host candidato."""
        return f"{self.scheme}://{host}:{self.port}"

    @property
    def default_base_url(self) -> str:
        """URL base usada antes da descoberta ou quando tudo falha."""
        if not self.discovery_enabled:
            return self.production_base_url.rstrip("/")
        return self.base_url_for(self.default_host)

    def validate(self) -> list[str]:
        """Valida configurações de rede.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if self.discovery_enabled and not (self.priority_hosts or self.fallback_hosts):
            errors.append("API_PRIORITY_HOSTS ou API_FALLBACK_HOSTS deve ter ao menos um host")

        if not self.discovery_enabled and not self.production_base_url:
            errors.append("API_PRODUCTION_BASE_URL obrigatório com descoberta desligada")

        if self.scheme not in ("http", "https"):
            errors.append(f"API_SCHEME inválido: {self.scheme}")

        if not 0 < self.port < 65536:
            errors.append("API_PORT deve estar entre 1 e 65535")

        if self.probe_timeout_seconds <= 0:
            errors.append("API_PROBE_TIMEOUT_SECONDS deve ser > 0")

        if self.request_timeout_seconds <= 0:
            errors.append("API_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.max_reconnect_attempts < 1:
            errors.append("API_MAX_RECONNECT_ATTEMPTS deve ser >= 1")

        if not self.api_prefix.startswith("/"):
            errors.append("API_PREFIX deve começar com '/'")

        malformed = [
            host
            for host in (*self.priority_hosts, *self.fallback_hosts, self.default_host)
            if not host or any(char.isspace() or char in "/?#@" for char in host)
        ]
        if malformed:
            errors.append(f"Hosts inválidos: {', '.join(repr(host) for host in malformed)}")

        return errors


def prefixed_path(endpoint: str, api_prefix: str) -> str:
    """Normaliza o endpoint para o caminho enviado: barra inicial + prefixo da API."""
    path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
    if not path.startswith(api_prefix):
        path = f"{api_prefix}{path}"
    return path


def _parse_hosts(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    """Converte lista separada por vírgula em tupla de hosts."""
    if raw is None:
        return default
    return tuple(host.strip() for host in raw.split(",") if host.strip())


def _parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("true", "1", "yes")


def _load_from_env() -> NetworkSettings:
    """Carrega NetworkSettings a partir de variáveis de ambiente."""
    environment = parse_environment(os.getenv("ENVIRONMENT", "development"))
    return NetworkSettings(
        priority_hosts=_parse_hosts(os.getenv("API_PRIORITY_HOSTS"), DEFAULT_PRIORITY_HOSTS),
        fallback_hosts=_parse_hosts(os.getenv("API_FALLBACK_HOSTS"), DEFAULT_FALLBACK_HOSTS),
        port=int(os.getenv("API_PORT", "8000")),
        scheme=os.getenv("API_SCHEME", "http").lower(),
        probe_path=os.getenv("API_PROBE_PATH", "/"),
        probe_timeout_seconds=float(os.getenv("API_PROBE_TIMEOUT_SECONDS", "2")),
        request_timeout_seconds=float(os.getenv("API_REQUEST_TIMEOUT_SECONDS", "30")),
        default_host=os.getenv("API_DEFAULT_HOST", DEFAULT_HOST),
        production_base_url=os.getenv("API_PRODUCTION_BASE_URL", DEFAULT_PRODUCTION_BASE_URL),
        discovery_enabled=_parse_bool(
            os.getenv("API_DISCOVERY_ENABLED"),
            default=environment != "production",
        ),
        api_prefix=os.getenv("API_PREFIX", "/api"),
        max_reconnect_attempts=int(os.getenv("API_MAX_RECONNECT_ATTEMPTS", "3")),
        reconnect_backoff_seconds=float(os.getenv("API_RECONNECT_BACKOFF_SECONDS", "1")),
    )


@lru_cache(maxsize=1)
def get_network_settings() -> NetworkSettings:
    """Retorna instância cacheada de NetworkSettings."""
    return _load_from_env()
