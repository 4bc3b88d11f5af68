"""Hosts candidatos da API e classificação de tipo de rede.

O tipo de rede é apenas diagnóstico (logs/status); a ordem de
teste vem exclusivamente da configuração.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NetworkType(Enum):
    """Tipo de rede inferido pelo prefixo do host."""

    WIFI = "wifi"
    MOBILE_DATA = "mobile_data"
    HOTSPOT = "hotspot"
    LOOPBACK = "loopback"
    UNKNOWN = "unknown"


# Ordem importa: prefixos mais específicos antes de "192.168."
_PREFIX_RULES: tuple[tuple[tuple[str, ...], NetworkType], ...] = (
    (("172.20.10.", "172.20.11.", "172.20.12.", "172.20.13."), NetworkType.MOBILE_DATA),
    (("192.168.43.", "192.168.137."), NetworkType.HOTSPOT),
    (("192.168.", "10.0.0.", "172.16.", "172.17.", "172.18.", "172.19."), NetworkType.WIFI),
)

_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def classify_network_type(host: str) -> NetworkType:
    """Classifica o host em um tipo de rede grosseiro."""
    if host in _LOOPBACK_HOSTS:
        return NetworkType.LOOPBACK
    for prefixes, network_type in _PREFIX_RULES:
        if host.startswith(prefixes):
            return network_type
    return NetworkType.UNKNOWN


@dataclass(frozen=True, slots=True)
class EndpointCandidate:
    """Host candidato a servir a API."""

    host: str
    network_type: NetworkType

    @classmethod
    def from_host(cls, host: str) -> EndpointCandidate:
        return cls(host=host, network_type=classify_network_type(host))


@dataclass(frozen=True, slots=True)
class NetworkStatus:
    """Snapshot de diagnóstico do resolver."""

    base_url: str
    connected: bool
    network_type: NetworkType
    priority_hosts: tuple[str, ...] = ()
    fallback_hosts: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "base_url": self.base_url,
            "connected": self.connected,
            "network_type": self.network_type.value,
            "priority_hosts": list(self.priority_hosts),
            "fallback_hosts": list(self.fallback_hosts),
        }


def build_candidate_lists(
    priority_hosts: tuple[str, ...],
    fallback_hosts: tuple[str, ...],
) -> tuple[tuple[EndpointCandidate, ...], tuple[EndpointCandidate, ...]]:
    """Monta as listas prioritária e de fallback.

    A lista de fallback exclui hosts já presentes na prioritária
    e remove duplicatas preservando a ordem configurada.

    Returns:
        (candidatos prioritários, candidatos de fallback)
    """
    priority = tuple(dict.fromkeys(priority_hosts))
    seen = set(priority)
    fallback: list[str] = []
    for host in fallback_hosts:
        if host not in seen:
            seen.add(host)
            fallback.append(host)
    return (
        tuple(EndpointCandidate.from_host(host) for host in priority),
        tuple(EndpointCandidate.from_host(host) for host in fallback),
    )


def host_of(base_url: str) -> str:
    """Extrai o host de uma URL base (scheme://host:port)."""
    without_scheme = base_url.split("://", 1)[-1]
    return without_scheme.split("/", 1)[0].rsplit(":", 1)[0]
