"""Storage em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
"""

from __future__ import annotations

from app.protocols.storage import AsyncKeyValueStorageProtocol


class MemoryKeyValueStorage(AsyncKeyValueStorageProtocol):
    """Storage chave-valor em memória — apenas para dev/test."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def snapshot(self) -> dict[str, str]:
        """Cópia do conteúdo (inspeção em testes)."""
        return dict(self._data)
