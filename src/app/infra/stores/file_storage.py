"""Storage durável em arquivo JSON local.

Todas as chaves ficam em um único objeto JSON. IO de disco roda em
thread (asyncio.to_thread) e a gravação é atômica (arquivo temporário
+ os.replace), então uma queda no meio da escrita não corrompe o arquivo.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from app.protocols.storage import AsyncKeyValueStorageProtocol

logger = logging.getLogger(__name__)


class FileKeyValueStorage(AsyncKeyValueStorageProtocol):
    """Storage chave-valor persistido em um arquivo JSON.

    Args:
        path: Caminho do arquivo (diretórios são criados na primeira escrita)
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def get_item(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            data[key] = value
            await asyncio.to_thread(self._write_all, data)

    async def remove_item(self, key: str) -> bool:
        async with self._lock:
            data = await asyncio.to_thread(self._read_all)
            if key not in data:
                return False
            del data[key]
            await asyncio.to_thread(self._write_all, data)
            return True

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.error("file_storage_corrupt", extra={"path": str(self._path)})
            return {}

        if not isinstance(data, dict):
            logger.error("file_storage_corrupt", extra={"path": str(self._path)})
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, self._path)
