"""Local in-memory storage implementation.

Dict-based storage suitable for single-process use and testing. Values are
kept encoded, exactly as a persistent backend would hold them, so a read
always returns a fresh decoded copy.

Usage:
    storage = LocalStorage()
    game = Game(storage=storage)
"""

from __future__ import annotations

from typing import Any

from idlecore.storage.codec import decode, encode


class LocalStorage:
    """Simple in-memory key-value storage.

    Structure:
        _data[key] = encoded text
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def read(self, key: str) -> Any | None:
        """Read and decode the value under key."""
        data = self._data.get(key)
        if data is None:
            return None
        return decode(data)

    async def write(self, key: str, value: Any, pretty: bool = False) -> bool:
        """Encode and store value under key."""
        self._data[key] = encode(value, pretty)
        return True

    async def clear(self) -> None:
        """Drop every stored value."""
        self._data.clear()

    def raw(self, key: str) -> str | None:
        """Encoded text stored under key (for export/debugging)."""
        return self._data.get(key)

    def keys(self) -> list[str]:
        return list(self._data)
