"""Pure functions over resolved resource counts.

``combine`` is the only deduplication primitive: any time two gain or cost
lists are merged, the merge goes through it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING

from idlecore.core.numeric import ZERO
from idlecore.core.resource.models import PurchaseCost, PurchaseStyle, ResourceCount

if TYPE_CHECKING:
    from idlecore.core.resource.resource import Resource


def combine(counts: Iterable[ResourceCount]) -> list[ResourceCount]:
    """Sum amounts per resource and drop entries that net to zero.

    Args:
        counts: Resolved resource counts, possibly with repeated resources.

    Returns:
        One entry per resource, in first-seen order, none of them zero.
    """
    merged: dict[str, ResourceCount] = {}
    for rc in counts:
        resource: Resource = rc.resource  # type: ignore[assignment]
        entry = merged.get(resource.name)
        if entry is None:
            merged[resource.name] = ResourceCount(resource, rc.count)
        else:
            entry.count = entry.count + rc.count
    return [rc for rc in merged.values() if rc.count != 0]


def total(costs: Iterable[PurchaseCost], style: PurchaseStyle) -> PurchaseCost:
    """Fold several per-resource transactions into one.

    Args:
        costs: Transactions to fold.
        style: Style reported on the folded transaction.

    Returns:
        Transaction with summed count and combined gain and cost lists.
    """
    costs = list(costs)
    count = sum((c.count for c in costs), ZERO)
    return PurchaseCost(
        count=count,
        style=style,
        gain=combine(rc for c in costs for rc in c.gain),
        cost=combine(rc for c in costs for rc in c.cost),
    )


def merge_deltas(
    cumulative: dict[str, Decimal],
    deltas: Mapping[str, Decimal],
) -> dict[str, Decimal]:
    """Add per-resource deltas into a cumulative result map in place.

    Zero deltas are ignored and entries that net to zero are removed, so the
    map only ever lists resources that actually changed.

    Args:
        cumulative: Map to update.
        deltas: Changes from one tick.

    Returns:
        The updated cumulative map.
    """
    for name, delta in deltas.items():
        if delta == 0:
            continue
        summed = cumulative.get(name, ZERO) + delta
        if summed == 0:
            cumulative.pop(name, None)
        else:
            cumulative[name] = summed
    return cumulative
