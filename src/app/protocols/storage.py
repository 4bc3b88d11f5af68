"""Protocolo de storage durável chave-valor (assíncrono).

Equivalente ao storage local do dispositivo: valores string
sob chaves fixas, sobrevivendo a reinícios do processo.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AsyncKeyValueStorageProtocol(ABC):
    """Contrato mínimo assíncrono para storage durável.

    Implementações não interpretam os valores; a serialização
    fica a cargo de quem grava (ex: SessionStore grava JSON).
    """

    @abstractmethod
    async def get_item(self, key: str) -> str | None: ...

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def remove_item(self, key: str) -> bool: ...
