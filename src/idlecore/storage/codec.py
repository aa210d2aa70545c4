"""Encoding of persisted state.

``stringify`` produces JSON with internal (underscore-prefixed) keys and empty
mappings removed. ``encode`` wraps it in a compact, copy-paste friendly form:
base64 of the URL-quoted JSON text. ``decode`` accepts either form, and hands
back anything it cannot parse unchanged.

Usage:
    data = encode({"count": Decimal("1.5")})   # 'JTdCJTIyY291bnQlMjIl...'
    decode(data)                               # {'count': '1.5'}
    decode(encode(state, pretty=True))         # plain JSON also decodes
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import quote, unquote

# Characters left alone by JavaScript's encodeURIComponent.
_URI_SAFE = "-_.!~*'()"

_OMIT = object()


def _prune(value: Any, seen: set[int]) -> Any:
    if isinstance(value, Mapping):
        if not value or id(value) in seen:
            return _OMIT
        seen.add(id(value))
        pruned = {}
        for key, item in value.items():
            key = str(key)
            if key.startswith("_"):
                continue
            item = _prune(item, seen)
            if item is not _OMIT:
                pruned[key] = item
        seen.discard(id(value))
        return pruned
    if isinstance(value, list | tuple):
        return [item for item in (_prune(v, seen) for v in value) if item is not _OMIT]
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime | date):
        return value.isoformat()
    return value


def stringify(value: Any, indent: int | None = None) -> str:
    """Serialize value to JSON, dropping internal keys and empty mappings.

    Args:
        value: Nested mappings, lists and scalars. Decimals become strings.
        indent: JSON indentation, None for the compact form.

    Returns:
        JSON text.
    """
    pruned = _prune(value, set())
    if pruned is _OMIT:
        pruned = {}
    separators = None if indent is not None else (",", ":")
    return json.dumps(pruned, indent=indent, separators=separators)


def encode(value: Any, pretty: bool = False) -> str:
    """Encode value for storage.

    Args:
        value: Value to encode.
        pretty: Store indented JSON instead of the compact base64 form.

    Returns:
        Encoded text.
    """
    data = stringify(value, 2 if pretty else None)
    if pretty:
        return data
    return base64.b64encode(quote(data, safe=_URI_SAFE).encode("ascii")).decode("ascii")


def decode(data: Any) -> Any:
    """Decode text produced by ``encode`` (either form).

    Non-string input is returned unchanged, as is text that is neither
    encoded form.
    """
    if not data or not isinstance(data, str):
        return data

    try:
        parsed = json.loads(unquote(base64.b64decode(data, validate=True).decode("ascii")))
        if parsed:
            return parsed
    except (binascii.Error, UnicodeDecodeError, ValueError):
        pass
    try:
        parsed = json.loads(data)
        if parsed:
            return parsed
    except ValueError:
        pass
    return data
