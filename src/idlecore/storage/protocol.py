"""Storage protocol for swappable persistence backends.

The storage layer is a small async key-value interface, enabling:
- Local in-memory (default, tests)
- JSON files on disk
- Anything else offering read/write/clear (browser storage, databases, ...)

Values handed to ``write`` are plain nested mappings; backends encode them
however they like and hand back the decoded mapping from ``read``.

Usage:
    storage = LocalStorage()
    game = Game(storage=storage)
    await game.save()
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Abstract persistence interface. Implementations handle the medium."""

    async def read(self, key: str) -> Any | None:
        """Read and decode the value stored under key, or None if absent."""
        ...

    async def write(self, key: str, value: Any, pretty: bool = False) -> bool:
        """Encode and store value under key. Returns True once stored."""
        ...

    async def clear(self) -> None:
        """Remove every stored value."""
        ...
