"""Resource entity, transaction descriptors and pure count operations."""

from idlecore.core.resource.models import (
    DisplayStyle,
    ExtraValues,
    PurchaseAmount,
    PurchaseCost,
    PurchaseRange,
    PurchaseStyle,
    ResourceCount,
    ResourceRef,
)
from idlecore.core.resource.operations import combine, merge_deltas, total
from idlecore.core.resource.resource import (
    DECIMAL_FIELDS,
    HOOK_PARAMS,
    MAX_PURCHASE_STEPS,
    Resource,
)

__all__ = [
    # Models
    "DisplayStyle",
    "ExtraValues",
    "PurchaseAmount",
    "PurchaseCost",
    "PurchaseRange",
    "PurchaseStyle",
    "ResourceCount",
    "ResourceRef",
    # Operations
    "combine",
    "merge_deltas",
    "total",
    # Entity
    "Resource",
    "DECIMAL_FIELDS",
    "HOOK_PARAMS",
    "MAX_PURCHASE_STEPS",
]
