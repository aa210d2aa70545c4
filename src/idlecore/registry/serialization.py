"""Resource <-> plain mapping conversion for persistence.

Persisted form rules:
- underscore-prefixed (internal) fields are omitted
- Decimal fields are written as strings
- an empty ``extra`` map is omitted
- a non-finite ``priority`` is omitted
- unset (None) fields are omitted
- hooks are written as their source text when they have one; plain Python
  callables cannot be persisted and are omitted
"""

from __future__ import annotations

import dataclasses
import math
from decimal import Decimal
from enum import Enum
from typing import Any

from idlecore.core.resource import HOOK_PARAMS, Resource


def hook_source(hook: Any) -> str | None:
    """Return the text a hook was compiled from, if any."""
    source = getattr(hook, "source", None)
    return source if isinstance(source, str) else None


def resource_to_dict(resource: Resource) -> dict[str, Any]:
    """Serialize a resource to a JSON-compatible mapping.

    Args:
        resource: Resource to serialize.

    Returns:
        Mapping of field name to plain value.
    """
    data: dict[str, Any] = {}
    for f in dataclasses.fields(resource):
        key = f.name
        if key.startswith("_"):
            continue
        value = getattr(resource, key)
        if value is None:
            continue

        if key == "extra":
            if value:
                data[key] = value.to_dict()
        elif key == "priority":
            if math.isfinite(value):
                data[key] = value
        elif key in HOOK_PARAMS:
            source = hook_source(value)
            if source is not None:
                data[key] = source
        elif isinstance(value, Decimal):
            data[key] = str(value)
        elif isinstance(value, Enum):
            data[key] = value.value
        else:
            data[key] = value
    return data
