"""Resource registry: owns resources and cross-resource economy operations."""

from idlecore.registry.registry import CostEntry, ResourceRegistry
from idlecore.registry.serialization import hook_source, resource_to_dict

__all__ = [
    "CostEntry",
    "ResourceRegistry",
    "hook_source",
    "resource_to_dict",
]
