"""File-backed storage: one file per key inside a directory.

Blocking file I/O runs in a worker thread so the event loop driving the
simulation is never stalled by a save.

Usage:
    storage = FileStorage("~/.idlegame")
    await storage.write("Settings", state)
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

from idlecore.storage.codec import decode, encode

logger = logging.getLogger(__name__)


class FileStorage:
    """Stores each key as ``<directory>/<key>.json``.

    Args:
        directory: Target directory, created on first write.
        suffix: File name suffix.
    """

    def __init__(self, directory: str | Path, suffix: str = ".json") -> None:
        self.directory = Path(directory).expanduser()
        self.suffix = suffix

    def path_for(self, key: str) -> Path:
        """File that holds key. Rejects keys that would escape the directory."""
        if not key or "/" in key or "\\" in key or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{self.suffix}"

    def _read(self, path: Path) -> str | None:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, path: Path, data: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(data, encoding="utf-8")
        tmp.replace(path)

    def _clear(self) -> None:
        if not self.directory.exists():
            return
        for path in self.directory.glob(f"*{self.suffix}"):
            path.unlink()

    async def read(self, key: str) -> Any | None:
        """Read and decode the value under key."""
        data = await asyncio.to_thread(self._read, self.path_for(key))
        if data is None:
            return None
        return decode(data)

    async def write(self, key: str, value: Any, pretty: bool = False) -> bool:
        """Encode value and atomically replace the file for key."""
        path = self.path_for(key)
        await asyncio.to_thread(self._write, path, encode(value, pretty))
        logger.debug("Wrote %s", path)
        return True

    async def clear(self) -> None:
        """Delete every stored file."""
        await asyncio.to_thread(self._clear)
