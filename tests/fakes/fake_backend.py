"""Backend HTTP fake para testes deterministas (via httpx.MockTransport).

Rotas são roteirizadas por (método, path): cada chamada consome a
próxima resposta da fila; a última resposta fica fixa. Hosts podem ser
marcados como inalcançáveis ou lentos para simular redes instáveis.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

Responder = (
    tuple[int, Any]
    | Exception
    | Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]
)


class FakeBackend:
    """Servidor fake: registra requisições e responde conforme roteiro."""

    def __init__(self, probe_path: str = "/") -> None:
        self.requests: list[httpx.Request] = []
        self.unreachable_hosts: set[str] = set()
        self.host_status: dict[str, int] = {}
        self.host_delay: dict[str, float] = {}
        self._probe_path = probe_path
        self._routes: dict[tuple[str, str], list[Responder]] = {}

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport())

    def add(self, method: str, path: str, *responders: Responder) -> None:
        """Enfileira respostas para (método, path)."""
        self._routes.setdefault((method.upper(), path), []).extend(responders)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests if r.method == method.upper() and r.url.path == path
        ]

    def probed_hosts(self) -> list[str]:
        return [r.url.host for r in self.requests if r.url.path == self._probe_path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        delay = self.host_delay.get(host)
        if delay:
            await asyncio.sleep(delay)

        if host in self.unreachable_hosts:
            raise httpx.ConnectError("host unreachable", request=request)

        if request.url.path == self._probe_path and host in self.host_status:
            return httpx.Response(self.host_status[host], request=request)

        queue = self._routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"message": "Not Found"}, request=request)

        responder = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(responder, Exception):
            raise responder
        if isinstance(responder, tuple):
            status, body = responder
            return httpx.Response(status, json=body, request=request)

        result = responder(request)
        if inspect.isawaitable(result):
            result = await result
        return result
