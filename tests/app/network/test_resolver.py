"""Testes para resolução de endpoint.

Testa:
    - Vencedor = primeiro prioritário alcançável na ordem da lista
    - Fallback sequencial e URL padrão quando tudo falha
    - Idempotência de resoluções concorrentes (single-flight)
    - Estratégia estática e montagem de URLs
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from app.network.candidates import NetworkType
from app.network.errors import EndpointUnavailableError
from app.network.resolver import (
    DiscoveredEndpointResolver,
    StaticEndpointResolver,
    create_endpoint_resolver,
)
from config.settings import NetworkSettings
from tests.fakes.fake_backend import FakeBackend

# ──────────────────────────────────────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────────────────────────────────────

HOST_A = "192.168.1.10"
HOST_B = "192.168.1.11"
HOST_C = "172.20.10.2"
FALLBACK_1 = "10.0.0.5"
FALLBACK_2 = "10.0.0.6"
FALLBACK_3 = "10.0.0.7"


@pytest.fixture
def settings() -> NetworkSettings:
    return NetworkSettings(
        priority_hosts=(HOST_A, HOST_B, HOST_C),
        fallback_hosts=(FALLBACK_1, FALLBACK_2, FALLBACK_3),
        default_host="192.168.100.239",
        probe_timeout_seconds=0.2,
        request_timeout_seconds=1.0,
        reconnect_backoff_seconds=0.0,
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


def _resolver(settings: NetworkSettings, backend: FakeBackend) -> DiscoveredEndpointResolver:
    return DiscoveredEndpointResolver(settings, backend.client())


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Prioritários
# ──────────────────────────────────────────────────────────────────────────────


class TestPriorityProbing:
    """Testes da fase paralela."""

    @pytest.mark.asyncio
    async def test_first_reachable_in_list_order_wins(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """A caiu, B e C respondem: vence B."""
        backend.unreachable_hosts.add(HOST_A)
        backend.host_status.update({HOST_B: 200, HOST_C: 200})
        resolver = _resolver(settings, backend)

        base_url = await resolver.resolve()

        assert base_url == f"http://{HOST_B}:8000"
        assert resolver.is_connected() is True
        assert resolver.current() == base_url

    @pytest.mark.asyncio
    async def test_list_order_beats_response_speed(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """A responde depois de B, mas A vem antes na lista."""
        backend.host_status.update({HOST_A: 200, HOST_B: 200})
        backend.host_delay[HOST_A] = 0.05
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{HOST_A}:8000"

    @pytest.mark.asyncio
    async def test_priority_success_skips_fallback(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Prioritário alcançável: nenhum host de fallback é testado."""
        backend.unreachable_hosts.add(HOST_A)
        backend.host_status.update({HOST_B: 200, FALLBACK_1: 200})
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{HOST_B}:8000"
        assert FALLBACK_1 not in backend.probed_hosts()

    @pytest.mark.asyncio
    async def test_priority_hosts_are_probed_concurrently(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Três hosts lentos levam ~1 atraso, não a soma dos atrasos."""
        backend.unreachable_hosts.update({HOST_A, HOST_B})
        backend.host_status[HOST_C] = 200
        for host in (HOST_A, HOST_B, HOST_C):
            backend.host_delay[host] = 0.1
        resolver = _resolver(settings, backend)

        loop = asyncio.get_running_loop()
        start = loop.time()
        base_url = await resolver.resolve()
        elapsed = loop.time() - start

        assert base_url == f"http://{HOST_C}:8000"
        assert elapsed < 0.25

    @pytest.mark.asyncio
    async def test_not_found_counts_as_reachable(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """404 prova alcance; 500 não."""
        backend.host_status.update({HOST_A: 500, HOST_B: 404})
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{HOST_B}:8000"

    @pytest.mark.asyncio
    async def test_probe_timeout_counts_as_failure(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Host que não responde dentro do timeout de probe é descartado."""
        backend.host_status.update({HOST_A: 200, HOST_B: 200})
        backend.host_delay[HOST_A] = 1.0
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{HOST_B}:8000"


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Fallback e padrão
# ──────────────────────────────────────────────────────────────────────────────


class TestFallbackProbing:
    """Testes da fase sequencial e do resultado padrão."""

    @pytest.mark.asyncio
    async def test_fallback_probed_sequentially_until_success(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Para no primeiro fallback alcançável; os seguintes não são testados."""
        backend.unreachable_hosts.update({HOST_A, HOST_B, HOST_C, FALLBACK_1})
        backend.host_status[FALLBACK_2] = 200
        backend.host_status[FALLBACK_3] = 200
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{FALLBACK_2}:8000"
        probed = backend.probed_hosts()
        assert FALLBACK_3 not in probed
        assert probed.index(FALLBACK_1) < probed.index(FALLBACK_2)

    @pytest.mark.asyncio
    async def test_fallback_skips_priority_hosts(self, backend: FakeBackend) -> None:
        """Host prioritário repetido no fallback não é testado duas vezes."""
        settings = NetworkSettings(
            priority_hosts=(HOST_A,),
            fallback_hosts=(HOST_A, FALLBACK_1, FALLBACK_1),
            probe_timeout_seconds=0.2,
        )
        backend.unreachable_hosts.update({HOST_A, FALLBACK_1})
        resolver = _resolver(settings, backend)

        await resolver.resolve()

        assert backend.probed_hosts().count(HOST_A) == 1
        assert backend.probed_hosts().count(FALLBACK_1) == 1
        assert resolver.status().fallback_hosts == (FALLBACK_1,)

    @pytest.mark.asyncio
    async def test_all_unreachable_returns_default_disconnected(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Sem nenhum host: URL padrão, desconectado, sem exceção."""
        backend.unreachable_hosts.update(
            {HOST_A, HOST_B, HOST_C, FALLBACK_1, FALLBACK_2, FALLBACK_3}
        )
        resolver = _resolver(settings, backend)

        base_url = await resolver.resolve()

        assert base_url == "http://192.168.100.239:8000"
        assert resolver.is_connected() is False

    @pytest.mark.asyncio
    async def test_malformed_host_counts_as_unreachable(self, backend: FakeBackend) -> None:
        """Host inválido na configuração não derruba a resolução."""
        settings = NetworkSettings(
            priority_hosts=("bad\x00host", HOST_B),
            fallback_hosts=("also bad",),
            default_host="192.168.100.239",
            probe_timeout_seconds=0.2,
        )
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == f"http://{HOST_B}:8000"

    @pytest.mark.asyncio
    async def test_only_malformed_hosts_fall_back_to_default(self, backend: FakeBackend) -> None:
        settings = NetworkSettings(
            priority_hosts=("bad\x00host",),
            fallback_hosts=("bad\thost",),
            default_host="192.168.100.239",
            probe_timeout_seconds=0.2,
        )
        resolver = _resolver(settings, backend)

        assert await resolver.resolve() == "http://192.168.100.239:8000"
        assert resolver.is_connected() is False

    def test_current_before_resolution_is_default(self, settings: NetworkSettings) -> None:
        resolver = DiscoveredEndpointResolver(settings)
        assert resolver.current() == "http://192.168.100.239:8000"
        assert resolver.is_connected() is False


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Single-flight
# ──────────────────────────────────────────────────────────────────────────────


class TestResolutionIdempotence:
    """Resoluções concorrentes compartilham o mesmo resultado."""

    @pytest.mark.asyncio
    async def test_concurrent_resolves_share_one_resolution(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        backend.unreachable_hosts.add(HOST_A)
        backend.host_status.update({HOST_B: 200, HOST_C: 200})
        backend.host_delay[HOST_B] = 0.02
        resolver = _resolver(settings, backend)

        results = await asyncio.gather(*(resolver.resolve() for _ in range(5)))

        assert set(results) == {f"http://{HOST_B}:8000"}
        assert backend.probed_hosts().count(HOST_B) == 1

    @pytest.mark.asyncio
    async def test_force_reresolve_picks_up_network_change(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        """Após trocar de rede, force_reresolve encontra o novo host."""
        backend.host_status[HOST_A] = 200
        resolver = _resolver(settings, backend)
        assert await resolver.resolve() == f"http://{HOST_A}:8000"

        backend.unreachable_hosts.add(HOST_A)
        backend.host_status[HOST_C] = 200

        assert await resolver.force_reresolve() == f"http://{HOST_C}:8000"
        assert resolver.status().network_type is NetworkType.MOBILE_DATA

    @pytest.mark.asyncio
    async def test_url_for_resolves_only_once(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        backend.host_status[HOST_A] = 200
        resolver = _resolver(settings, backend)

        first = await resolver.url_for("/api/pets")
        second = await resolver.url_for("/api/pets")

        assert first == second == f"http://{HOST_A}:8000/api/pets"
        assert backend.probed_hosts().count(HOST_A) == 1


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Reconexão
# ──────────────────────────────────────────────────────────────────────────────


class TestRetryConnection:
    """Testes de reconexão com backoff."""

    @pytest.mark.asyncio
    async def test_raises_after_max_attempts(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        backend.unreachable_hosts.update(
            {HOST_A, HOST_B, HOST_C, FALLBACK_1, FALLBACK_2, FALLBACK_3}
        )
        resolver = _resolver(replace(settings, max_reconnect_attempts=2), backend)

        with pytest.raises(EndpointUnavailableError):
            await resolver.retry_connection()

        assert backend.probed_hosts().count(HOST_A) == 2

    @pytest.mark.asyncio
    async def test_returns_once_host_is_reachable(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        backend.host_status[HOST_B] = 200
        resolver = _resolver(settings, backend)

        assert await resolver.retry_connection() == f"http://{HOST_B}:8000"

    @pytest.mark.asyncio
    async def test_attempt_beyond_max_raises_immediately(
        self, settings: NetworkSettings, backend: FakeBackend
    ) -> None:
        resolver = _resolver(settings, backend)

        with pytest.raises(EndpointUnavailableError):
            await resolver.retry_connection(attempt=4)

        assert backend.requests == []


# ──────────────────────────────────────────────────────────────────────────────
# Testes: Estratégia estática e URLs
# ──────────────────────────────────────────────────────────────────────────────


class TestStaticAndUrls:
    """Testes da estratégia estática e helpers de URL."""

    @pytest.mark.asyncio
    async def test_static_never_probes(self, settings: NetworkSettings) -> None:
        resolver = StaticEndpointResolver(settings, "https://api.petsit.example/")

        assert await resolver.resolve() == "https://api.petsit.example"
        assert await resolver.force_reresolve() == "https://api.petsit.example"
        assert resolver.is_connected() is True

    def test_factory_selects_static_when_discovery_disabled(
        self, settings: NetworkSettings
    ) -> None:
        production = replace(
            settings,
            discovery_enabled=False,
            production_base_url="https://api.petsit.example",
        )
        assert isinstance(create_endpoint_resolver(production), StaticEndpointResolver)
        assert isinstance(create_endpoint_resolver(settings), DiscoveredEndpointResolver)

    def test_build_url_adds_api_prefix(self, settings: NetworkSettings) -> None:
        resolver = StaticEndpointResolver(settings, "http://localhost:8000")

        assert resolver.build_url("/pets") == "http://localhost:8000/api/pets"
        assert resolver.build_url("pets") == "http://localhost:8000/api/pets"
        assert resolver.build_url("/api/pets") == "http://localhost:8000/api/pets"

    def test_media_url(self, settings: NetworkSettings) -> None:
        resolver = StaticEndpointResolver(settings, "http://localhost:8000")

        assert resolver.media_url("/storage/a.png") == "http://localhost:8000/storage/a.png"
        assert resolver.media_url("https://cdn/x.png") == "https://cdn/x.png"
        assert resolver.media_url("") == ""
