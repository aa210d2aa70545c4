"""Resource registry: the explicit economy context.

The registry owns every Resource of one simulation and hosts the operations
that span several resources (affordability, purchasing, batch ticking,
persistence). Independent registries never share state, so several
simulations can run side by side.

Usage:
    registry = ResourceRegistry()
    registry.upsert({"name": "gold", "count": 10})
    registry.upsert({"name": "mine", "purchase_cost": "[('gold', 2)]"})

    registry.purchase([("mine", 3)], "full")
    deltas = registry.tick_all(0.1, "tick")
    saved = registry.save_all()
"""

from __future__ import annotations

import dataclasses
import logging
import warnings
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from idlecore.config import EconomySettings
from idlecore.core.formula import FormulaCompiler, compile_formula
from idlecore.core.numeric import ONE, ZERO, DecimalSource, to_decimal
from idlecore.core.resource import (
    DECIMAL_FIELDS,
    HOOK_PARAMS,
    DisplayStyle,
    PurchaseAmount,
    PurchaseCost,
    PurchaseStyle,
    Resource,
    ResourceCount,
    ResourceRef,
    combine,
    merge_deltas,
    total,
)
from idlecore.registry.serialization import resource_to_dict

logger = logging.getLogger(__name__)

_PLAIN_FIELDS = frozenset(
    f.name
    for f in dataclasses.fields(Resource)
    if not f.name.startswith("_")
    and f.name not in HOOK_PARAMS
    and f.name not in DECIMAL_FIELDS
    and f.name not in ("name", "extra", "display")
)

CostEntry = ResourceCount | tuple[ResourceRef, DecimalSource] | Mapping[str, Any]
"""Cost entry as returned by hooks: a ResourceCount, a pair or a mapping."""


def _unpack(entry: Any) -> tuple[Any, Any]:
    if isinstance(entry, ResourceCount):
        return entry.resource, entry.count
    if isinstance(entry, Mapping):
        return entry["resource"], entry["count"]
    if isinstance(entry, tuple | list) and len(entry) == 2:
        return entry[0], entry[1]
    raise TypeError(f"Cannot resolve cost entry {entry!r}")


class ResourceRegistry:
    """Name -> Resource mapping plus cross-resource economy operations.

    Args:
        settings: Global multipliers and rate sampling parameters.
        compiler: Turns hook text into callables during upsert.
    """

    combine = staticmethod(combine)

    def __init__(
        self,
        settings: EconomySettings | None = None,
        compiler: FormulaCompiler | None = None,
    ) -> None:
        self.settings = settings or EconomySettings()
        self._compiler: FormulaCompiler = compiler or compile_formula
        self._resources: dict[str, Resource] = {}

    # Lookup

    def get_or_create(self, name: str) -> Resource:
        """Return the resource registered under name, creating it if needed."""
        if not name:
            raise ValueError("Resource name must be a non-empty string")
        resource = self._resources.get(name)
        if resource is None:
            resource = Resource(name=name)
            resource._registry = self
            self._resources[name] = resource
        return resource

    def get(self, ref: ResourceRef) -> Resource:
        """Resolve a reference to its registered resource.

        Args:
            ref: A Resource, a name, or a mapping with a ``name`` key. Unknown
                names are registered, mappings are upserted on first sight.

        Returns:
            The canonical Resource instance.
        """
        if isinstance(ref, Resource):
            return ref
        if isinstance(ref, str):
            return self._resources.get(ref) or self.get_or_create(ref)
        if isinstance(ref, Mapping):
            existing = self._resources.get(ref.get("name", ""))
            return existing if existing is not None else self.upsert(ref)
        raise TypeError(f"Cannot resolve resource reference {ref!r}")

    def has(self, name: str) -> bool:
        return name in self._resources

    def names(self) -> list[str]:
        return list(self._resources)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)

    def upsert(self, props: Mapping[str, Any] | str) -> Resource:
        """Create or update a resource from a partial description.

        ``extra`` is merged key-wise, quantity fields are converted to Decimal,
        hook fields given as text are compiled. ``None`` values are skipped and
        the name is never reassigned.

        Args:
            props: Field values keyed by field name, or just a name.

        Returns:
            The created or updated resource.
        """
        if isinstance(props, str):
            return self.get_or_create(props)

        resource = self.get_or_create(props.get("name", ""))
        for key, value in props.items():
            if key == "name" or value is None:
                continue
            if key == "extra":
                resource.extra.update(value)
            elif key in DECIMAL_FIELDS:
                setattr(resource, key, to_decimal(value))
            elif key in HOOK_PARAMS:
                setattr(resource, key, self._resolve_hook(resource, key, value))
            elif key == "display":
                resource.display = DisplayStyle(value)
            elif key in _PLAIN_FIELDS:
                setattr(resource, key, value)
            else:
                warnings.warn(
                    f"Ignoring unknown field {key!r} for resource {resource.name!r}",
                    stacklevel=2,
                )
        return resource

    def _resolve_hook(self, resource: Resource, key: str, value: Any) -> Callable[..., Any]:
        if isinstance(value, str):
            return self._compiler(
                value, HOOK_PARAMS[key], bind=resource, namespace={"registry": self}
            )
        if callable(value):
            return value  # type: ignore[no-any-return]
        raise TypeError(f"Hook {key!r} must be callable or text, got {type(value).__name__}")

    def remove(self, name: str) -> Resource:
        """Unregister a resource. Raises KeyError for unknown names."""
        resource = self._resources.pop(name)
        resource._registry = None
        return resource

    def reset(self) -> None:
        """Drop every resource."""
        logger.debug("Resetting registry with %d resources", len(self._resources))
        for resource in self._resources.values():
            resource._registry = None
        self._resources.clear()

    # Pricing

    def resolve_all(self, counts: Iterable[CostEntry] | None) -> list[ResourceCount]:
        """Resolve references to registered resources and amounts to Decimal.

        Entries whose amount is zero are dropped. Every returned
        ResourceCount is a new object.
        """
        resolved: list[ResourceCount] = []
        for entry in counts or []:
            ref, amount = _unpack(entry)
            count = to_decimal(amount)
            if count == 0:
                continue
            resolved.append(ResourceCount(self.get(ref), count))
        return resolved

    def can_afford(self, cost: Iterable[CostEntry] | None, to_spend: bool = True) -> bool:
        """Check whether a cost could be paid.

        Args:
            cost: Cost entries, resolved or not.
            to_spend: Respect each resource's ``min_count`` as the floor.
                Exploratory checks pass False and use a floor of zero.

        Returns:
            False if any resource is locked or would drop below its floor.
        """
        for rc in combine(self.resolve_all(cost)):
            resource: Resource = rc.resource  # type: ignore[assignment]
            if resource.locked:
                return False
            floor = ZERO
            if to_spend and resource.min_count is not None:
                floor = resource.min_count
            if resource.count - to_decimal(rc.count) < floor:
                return False
        return True

    def purchase(
        self,
        to_buy: Iterable[CostEntry],
        style: PurchaseStyle | str = PurchaseStyle.PARTIAL,
        gain_factor: DecimalSource = 1,
        cost_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Price and (for live styles) apply purchases of several resources.

        Each resource is priced and applied in order, so a later entry sees the
        counts left by an earlier one. A locked resource is unlocked as soon as
        its gain is realized if it declares an ``unlock_cost``; otherwise its
        purchase yields nothing.

        Args:
            to_buy: Resources and signed amounts.
            style: Purchase style.
            gain_factor: Multiplier on units received.
            cost_factor: Multiplier on costs.
            count_override: See Resource.get_count.

        Returns:
            The combined transaction.
        """
        style = PurchaseStyle(style)
        base_gain = to_decimal(gain_factor) * to_decimal(self.settings.gain_factor)
        base_cost = to_decimal(cost_factor) * to_decimal(self.settings.cost_factor)

        results: list[PurchaseCost] = []
        for rc in self.resolve_all(to_buy):
            resource: Resource = rc.resource  # type: ignore[assignment]
            gain = base_gain
            if resource.gain_factor is not None:
                gain = to_decimal(resource.gain_factor(gain))
            cost = base_cost
            if resource.cost_factor is not None:
                cost = to_decimal(resource.cost_factor(cost))

            priced = resource.get_purchase_cost(rc.count, style, gain, cost, count_override)
            if style.is_dry or priced.count == 0:
                results.append(priced)
                continue

            if resource.locked:
                if resource.unlock_cost is None:
                    results.append(PurchaseCost.empty(style))
                    continue
                resource.locked = False

            applied = PurchaseCost(
                count=priced.count,
                style=style,
                gain=resource.apply(priced.gain),
                cost=[],
            )
            for spent in priced.cost:
                payer: Resource = spent.resource  # type: ignore[assignment]
                applied.cost.extend(
                    ResourceCount(r.resource, -to_decimal(r.count))
                    for r in payer.apply([ResourceCount(payer, -to_decimal(spent.count))])
                )
            applied.cost = combine(applied.cost)

            if resource.on_purchase is not None:
                resource.on_purchase(applied)
            results.append(applied)

        return total(results, style)

    def purchase_all(
        self,
        resources: Mapping[str, DecimalSource | None] | Iterable[str] | None = None,
        amount: PurchaseAmount = 1,
        style: PurchaseStyle | str = PurchaseStyle.PARTIAL,
        gain_factor: DecimalSource = 1,
        cost_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Buy the same amount of every unlocked, enabled resource.

        Args:
            resources: Optional subset of names, or a single name. A mapping
                additionally gives a per-resource count override.
            amount: Amount (or PurchaseRange) bought of each resource.
            style: Purchase style.
            gain_factor: Multiplier on units received.
            cost_factor: Multiplier on costs.
            count_override: Override used where no per-resource one is given.

        Returns:
            The combined transaction.
        """
        style = PurchaseStyle(style)
        overrides: Mapping[str, DecimalSource | None] = {}
        if isinstance(resources, str):
            resources = [resources]
        elif isinstance(resources, Mapping):
            overrides = resources
        selected = set(resources) if resources is not None else None

        results = []
        for resource in self:
            if resource.locked or resource.disabled:
                continue
            if selected is not None and resource.name not in selected:
                continue
            override = overrides.get(resource.name)
            results.append(
                resource.buy(
                    amount,
                    style,
                    gain_factor,
                    cost_factor,
                    override if override is not None else count_override,
                )
            )
        return total(results, style)

    # Ticking

    def tick_all(
        self,
        dt: float,
        source: str | None = None,
        cumulative: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Advance every active resource by dt simulated seconds.

        Args:
            dt: Simulated seconds.
            source: Tag forwarded to tick hooks.
            cumulative: Result map from earlier sub-ticks to accumulate into.

        Returns:
            Map of resource name to net count change, without zero entries.
        """
        results = cumulative if cumulative is not None else {}
        resources = list(self._resources.values())

        for resource in resources:
            if not (resource.auto_unlock and resource.locked and not resource.disabled):
                continue
            if resource.unlock_cost is not None:
                cost = resource.unlock_cost()
            elif resource.purchase_cost is not None:
                cost = resource.purchase_cost(ONE)
            else:
                cost = []
            if self.can_afford(cost, to_spend=False):
                logger.debug("Auto-unlocking resource %r", resource.name)
                resource.locked = False

        active = [r for r in resources if not r.locked and not r.disabled]
        before = {r.name: r.count for r in active}

        for resource in active:
            if resource.should_tick is not None and not resource.should_tick(dt, source):
                continue
            if resource.on_tick is not None:
                resource.on_tick(dt, source)

        for resource in active:
            if not resource.auto_award or resource.max_count is None:
                continue
            if resource.count >= resource.max_count:
                continue
            next_cost = (
                resource.purchase_cost(resource.count + 1)
                if resource.purchase_cost is not None
                else []
            )
            if self.can_afford(next_cost, to_spend=False):
                resource.award(1)

        for resource in active:
            resource.update_rate(dt)

        return merge_deltas(results, {r.name: r.count - before[r.name] for r in active})

    # Persistence

    def save_all(self) -> dict[str, dict[str, Any]]:
        """Serialize every resource, keyed by name."""
        return {name: resource_to_dict(r) for name, r in self._resources.items()}

    def load_all(self, data: Mapping[str, Mapping[str, Any]]) -> list[Resource]:
        """Upsert every serialized resource in data.

        Entries default their name to the mapping key.
        """
        loaded = [self.upsert({"name": name, **props}) for name, props in data.items()]
        logger.debug("Loaded %d resources", len(loaded))
        return loaded
