"""Camada de rede — resolução de endpoint e erros do cliente de API."""

from app.network.candidates import (
    EndpointCandidate,
    NetworkStatus,
    NetworkType,
    build_candidate_lists,
    classify_network_type,
)
from app.network.errors import (
    ApiClientError,
    AuthenticationExpired,
    EndpointUnavailableError,
    LoggedOutError,
    NetworkFailure,
    RequestAborted,
    TokenRefreshError,
)
from app.network.resolver import (
    BaseEndpointResolver,
    DiscoveredEndpointResolver,
    StaticEndpointResolver,
    create_endpoint_resolver,
)

__all__ = [
    "ApiClientError",
    "AuthenticationExpired",
    "BaseEndpointResolver",
    "DiscoveredEndpointResolver",
    "EndpointCandidate",
    "EndpointUnavailableError",
    "LoggedOutError",
    "NetworkFailure",
    "NetworkStatus",
    "NetworkType",
    "RequestAborted",
    "StaticEndpointResolver",
    "TokenRefreshError",
    "build_candidate_lists",
    "classify_network_type",
    "create_endpoint_resolver",
]
