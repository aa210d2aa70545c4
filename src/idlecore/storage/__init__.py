"""Persistence backends and the state codec."""

from idlecore.storage.codec import decode, encode, stringify
from idlecore.storage.file import FileStorage
from idlecore.storage.local import LocalStorage
from idlecore.storage.protocol import Storage

__all__ = [
    "Storage",
    "LocalStorage",
    "FileStorage",
    "decode",
    "encode",
    "stringify",
]
