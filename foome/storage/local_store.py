"""Filesystem-backed object store for development and tests."""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from foome.exceptions import StorageError
from foome.storage.object_store import ObjectStore

logger = structlog.get_logger(__name__)


class LocalObjectStore(ObjectStore):
    """Stores each object as a file under ``root``; keys may not escape it."""

    def __init__(self, root: Path, public_base_url: str = "/files") -> None:
        self._root = root.resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._public_base = public_base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if path == self._root or not path.is_relative_to(self._root):
            msg = f"Object key outside storage root: {key}"
            raise StorageError(msg)
        return path

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> None:
        path = self._path_for(key)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        await asyncio.to_thread(_write)
        logger.debug("object_stored", key=key, size=len(data), content_type=content_type)

    async def get(self, key: str) -> bytes | None:
        path = self._path_for(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            return None

    async def delete(self, key: str) -> None:
        path = self._path_for(key)
        await asyncio.to_thread(path.unlink, missing_ok=True)
        logger.debug("object_deleted", key=key)

    def public_url(self, key: str) -> str:
        return f"{self._public_base}/{key}"
