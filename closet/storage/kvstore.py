"""Local key-value store: one JSON document per key on disk."""

from __future__ import annotations

import asyncio
import json
import os
import re
from pathlib import Path
from typing import Any

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class StorageError(RuntimeError):
    """Raised when the local store cannot be read or written."""


def dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)


class KeyValueStore:
    """String values keyed by name, persisted under ``root``.

    Writes to a single key are serialised; there is no locking across a
    caller's read-modify-write cycle.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self._locks: dict[str, asyncio.Lock] = {}

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._root / f"{key}.json"

    def _lock_for(self, key: str) -> asyncio.Lock:
        if key not in self._locks:
            self._locks[key] = asyncio.Lock()
        return self._locks[key]

    async def get_item(self, key: str) -> str | None:
        """Return the stored value or ``None`` when the key is absent."""

        path = self._path(key)
        try:
            return await asyncio.to_thread(self._read_file, path)
        except OSError as exc:
            raise StorageError(f"Could not read {key}: {exc}") from exc

    async def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        async with self._lock_for(key):
            try:
                await asyncio.to_thread(self._write_file, path, value)
            except OSError as exc:
                raise StorageError(f"Could not write {key}: {exc}") from exc

    async def remove_item(self, key: str) -> None:
        path = self._path(key)
        async with self._lock_for(key):
            try:
                await asyncio.to_thread(path.unlink, missing_ok=True)
            except OSError as exc:
                raise StorageError(f"Could not remove {key}: {exc}") from exc

    @staticmethod
    def _read_file(path: Path) -> str | None:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    @staticmethod
    def _write_file(path: Path, body: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_name(f"{path.name}.tmp")
        tmp_path.write_text(body, encoding="utf-8")
        os.replace(tmp_path, path)
