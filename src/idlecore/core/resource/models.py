"""Resource models: purchase styles, transaction descriptors and the extra map.

Transactions are created per call and never persisted. A resolved transaction
references registered Resource instances and holds Decimal amounts; an
unresolved one (as returned by hooks) may use names and plain numbers.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Union

from idlecore.core.numeric import ZERO, DecimalSource, to_decimal

if TYPE_CHECKING:
    from idlecore.core.resource.resource import Resource

ResourceRef = Union["Resource", str, Mapping[str, Any]]
"""A resource instance, its name, or a partial descriptor with a ``name`` key."""


class PurchaseStyle(str, Enum):
    """How a purchase is allowed to complete."""

    FULL = "full"  # All or nothing
    PARTIAL = "partial"  # As many as affordable
    FREE = "free"  # No cost, no affordability check
    DRY_FULL = "dry-full"  # Preview of FULL, no mutation
    DRY_PARTIAL = "dry-partial"  # Preview of PARTIAL, no mutation

    @property
    def is_dry(self) -> bool:
        return self in (PurchaseStyle.DRY_FULL, PurchaseStyle.DRY_PARTIAL)

    @property
    def is_partial(self) -> bool:
        return self in (PurchaseStyle.PARTIAL, PurchaseStyle.DRY_PARTIAL)

    @property
    def is_full(self) -> bool:
        return self in (PurchaseStyle.FULL, PurchaseStyle.DRY_FULL)


class DisplayStyle(str, Enum):
    """Hint for formatters on how to render a resource value."""

    NONE = "none"
    NUMBER = "number"
    TIME = "time"
    PERCENTAGE = "percentage"


@dataclass(slots=True)
class ResourceCount:
    """A resource paired with a signed amount."""

    resource: Resource | ResourceRef
    count: Decimal | DecimalSource


@dataclass(slots=True)
class PurchaseCost:
    """Outcome of a purchase or sale attempt.

    Attributes:
        count: Signed number of units bought (negative for sales, zero on rejection).
        style: Style the purchase was priced with.
        gain: What is (or would be) received, deduplicated by resource.
        cost: What is (or would be) spent, deduplicated by resource.
    """

    count: Decimal
    style: PurchaseStyle
    gain: list[ResourceCount] = field(default_factory=list)
    cost: list[ResourceCount] = field(default_factory=list)

    @classmethod
    def empty(cls, style: PurchaseStyle) -> PurchaseCost:
        """No-op transaction used for every rejected purchase."""
        return cls(count=ZERO, style=style)

    def is_empty(self) -> bool:
        """Check if nothing was (or would be) bought."""
        return self.count == 0 and not self.gain and not self.cost


@dataclass(frozen=True, slots=True)
class PurchaseRange:
    """Variable purchase amount for ranged buys and sells.

    The purchase converges on the largest multiple of ``increments`` between
    ``min_amount`` and ``max_amount`` that is actually affordable.
    """

    min_amount: Decimal | DecimalSource
    max_amount: Decimal | DecimalSource
    increments: Decimal | DecimalSource = 1

    def negated(self) -> PurchaseRange:
        """Mirror the range for selling."""
        return PurchaseRange(
            min_amount=-to_decimal(self.min_amount),
            max_amount=-to_decimal(self.max_amount),
            increments=-to_decimal(self.increments),
        )


PurchaseAmount = Union[Decimal, int, float, str, PurchaseRange]


class ExtraValues(MutableMapping[str, Decimal]):
    """Open map of named auxiliary decimal quantities attached to a resource.

    Values are converted to Decimal on assignment. Keys can be used as count
    overrides when pricing purchases.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, DecimalSource] | None = None) -> None:
        self._values: dict[str, Decimal] = {}
        if values:
            self.update(values)

    def __getitem__(self, key: str) -> Decimal:
        return self._values[key]

    def __setitem__(self, key: str, value: DecimalSource) -> None:
        self._values[key] = to_decimal(value)

    def __delitem__(self, key: str) -> None:
        del self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ExtraValues({self._values!r})"

    def get_value(self, key: str, default: DecimalSource = ZERO) -> Decimal:
        """Get a value as Decimal, falling back to default."""
        return self._values.get(key, to_decimal(default))

    def set_value(self, key: str, value: DecimalSource) -> Decimal:
        """Set a value and return the stored Decimal."""
        self[key] = value
        return self._values[key]

    def to_dict(self) -> dict[str, str]:
        """Serialize values as strings."""
        return {key: str(value) for key, value in self._values.items()}
