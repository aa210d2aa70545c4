"""Resource: one named stock/flow quantity with purchase and tick hooks.

Usage:
    registry = ResourceRegistry()
    gold = registry.upsert({"name": "gold", "count": 10})
    mine = registry.upsert({"name": "mine"})
    mine.purchase_cost = lambda n: [("gold", n * 2)]

    mine.buy(1)          # spends 2 gold
    mine.can_buy(5)      # dry-run preview, no mutation
    mine.sell(1)         # refunds via the same stepping walk

Resources are created and owned by a ResourceRegistry. Constructing one
directly never registers it; pricing a purchase requires the registry
back-reference that ``ResourceRegistry.get_or_create`` sets.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any

from idlecore.core.numeric import (
    INFINITY,
    ZERO,
    DecimalSource,
    clamp,
    floor,
    floor_int,
    is_finite,
    sign,
    to_decimal,
)
from idlecore.core.resource.models import (
    DisplayStyle,
    ExtraValues,
    PurchaseAmount,
    PurchaseCost,
    PurchaseRange,
    PurchaseStyle,
    ResourceCount,
)
from idlecore.core.resource.operations import combine

if TYPE_CHECKING:
    from idlecore.registry.registry import ResourceRegistry

MAX_PURCHASE_STEPS = 1000
"""Hard cap on the number of unit steps a single cost walk may take."""

HOOK_PARAMS: dict[str, tuple[str, ...]] = {
    "validate_count": ("count",),
    "purchase_cost": ("count",),
    "unlock_cost": (),
    "gain_factor": ("n",),
    "cost_factor": ("n",),
    "should_tick": ("dt", "source"),
    "on_tick": ("dt", "source"),
    "on_change": ("count", "source"),
    "on_purchase": ("transaction",),
}
"""Hook attribute names and the parameter names they are invoked with."""

DECIMAL_FIELDS = ("count", "max_count", "min_count", "rate")

_DEFAULT_RATE_UPDATE_SECS = 0.25
_DEFAULT_RATE_EMA_FACTOR = 0.25


@dataclass(eq=False)
class Resource:
    """Named, bounded, arbitrary-precision quantity.

    Identity is the name: two resources with the same name never coexist in
    one registry. Equality is identity.

    Attributes:
        name: Immutable registry key.
        count: Current stock.
        max_count: Upper bound enforced by set_value (None = unbounded).
        min_count: Lower bound enforced by set_value (None = unbounded).
        rate: Exponential moving average of count change per second.
        last_tick: Cumulative simulation seconds this resource has observed.
        extra: Auxiliary named quantities, usable as count overrides.
    """

    name: str
    description: str | None = None
    display: DisplayStyle | None = None
    icon: str | None = None
    singular_name: str | None = None
    plural_name: str | None = None
    priority: float = math.inf

    locked: bool = False
    disabled: bool = False
    hidden: bool = False
    auto_unlock: bool = False
    auto_award: bool = False

    extra: ExtraValues = field(default_factory=ExtraValues)

    count: Decimal = ZERO
    max_count: Decimal | None = None
    min_count: Decimal | None = None
    rate: Decimal = ZERO
    last_tick: float = 0.0

    validate_count: Callable[[Decimal], DecimalSource] | None = None
    purchase_cost: Callable[[Decimal], list[Any]] | None = None
    unlock_cost: Callable[[], list[Any]] | None = None
    gain_factor: Callable[[Decimal], DecimalSource] | None = None
    cost_factor: Callable[[Decimal], DecimalSource] | None = None
    should_tick: Callable[[float, str | None], bool] | None = None
    on_tick: Callable[[float, str | None], Any] | None = None
    on_change: Callable[[Decimal, str | None], Any] | None = None
    on_purchase: Callable[[PurchaseCost], Any] | None = None

    _registry: ResourceRegistry | None = field(default=None, repr=False)
    _rate_last_time: float | None = field(default=None, repr=False)
    _rate_last_count: Decimal = field(default=ZERO, repr=False)

    def __setattr__(self, key: str, value: Any) -> None:
        if key == "name" and "name" in self.__dict__:
            raise AttributeError("Resource name is immutable")
        super().__setattr__(key, value)

    @property
    def registry(self) -> ResourceRegistry:
        """Owning registry. Raises RuntimeError for unregistered resources."""
        if self._registry is None:
            raise RuntimeError(f"Resource {self.name!r} is not attached to a registry")
        return self._registry

    # Counting

    def get_count(self, override: DecimalSource | None = None) -> Decimal:
        """Count used for pricing.

        Args:
            override: None for the live count, the name of an ``extra`` entry,
                or a literal amount.

        Returns:
            The resolved count.
        """
        if override is None:
            return self.count
        if isinstance(override, str) and override in self.extra:
            return self.extra[override]
        try:
            return to_decimal(override)
        except InvalidOperation:
            # Unknown names price as NaN so pricing rejects them.
            return Decimal("NaN")

    def set_value(self, value: DecimalSource, source: str | None = None) -> Decimal:
        """Set the count, enforcing validation and bounds.

        This is the only place bounds are enforced. ``on_change`` fires after
        every assignment, even when the value did not change.

        Args:
            value: Requested new count.
            source: Optional tag forwarded to ``on_change``.

        Returns:
            The count actually stored.
        """
        if self.validate_count is not None:
            value = self.validate_count(to_decimal(value))
        value = to_decimal(value)
        if self.max_count is not None:
            value = min(value, self.max_count)
        if self.min_count is not None:
            value = max(value, self.min_count)
        self.count = value
        if self.on_change is not None:
            self.on_change(self.count, source)
        return self.count

    def apply(self, counts: list[ResourceCount]) -> list[ResourceCount]:
        """Apply the entries that target this resource.

        Args:
            counts: Resolved counts; entries for other resources are ignored.

        Returns:
            The realized deltas after bounds were enforced.
        """
        realized: list[ResourceCount] = []
        for rc in counts:
            if rc.resource is not self:
                continue
            previous = self.count
            current = self.set_value(self.count + to_decimal(rc.count))
            realized.append(ResourceCount(self, current - previous))
        return combine(realized)

    # Pricing

    def get_purchase_cost(
        self,
        amount: DecimalSource,
        style: PurchaseStyle | str = PurchaseStyle.PARTIAL,
        gain_factor: DecimalSource = 1,
        cost_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Price buying (positive amount) or selling (negative amount) units.

        Sales are reframed as a purchase walk in the increasing direction with
        both factors negated, the cost factor scaled by the registry sell
        ratio. Nothing is mutated.

        Args:
            amount: Signed number of units.
            style: Purchase style.
            gain_factor: Multiplier on units received.
            cost_factor: Multiplier on each step's cost.
            count_override: See get_count.

        Returns:
            The priced transaction, or an empty one if rejected.
        """
        style = PurchaseStyle(style)
        amount = to_decimal(amount)
        if not is_finite(amount) or amount == 0:
            return PurchaseCost.empty(style)

        registry = self.registry
        gain = to_decimal(gain_factor)
        cost_scale = to_decimal(cost_factor)

        start = self.get_count(count_override)
        if not is_finite(start):
            return PurchaseCost.empty(style)
        target = clamp(
            start + amount,
            self.min_count if self.min_count is not None else ZERO,
            self.max_count if self.max_count is not None else INFINITY,
        )

        if style is PurchaseStyle.FREE:
            diff = target - start
            return PurchaseCost(
                count=diff,
                style=style,
                gain=combine([ResourceCount(self, diff * gain)]),
            )

        if start > target:
            start, target = target, start
            gain = -gain
            cost_scale = -cost_scale * to_decimal(registry.settings.sell_ratio)

        cost: list[ResourceCount] = []
        if self.locked and self.unlock_cost is not None:
            cost = registry.resolve_all(self.unlock_cost())

        if not (is_finite(start) and is_finite(target)):
            return PurchaseCost.empty(style)
        first, last = floor_int(start), floor_int(target)
        if abs(last - first) > MAX_PURCHASE_STEPS:
            return PurchaseCost.empty(style)

        steps = 0
        for i in range(first, last):
            step_cost = registry.resolve_all(
                self.purchase_cost(Decimal(i + 1)) if self.purchase_cost is not None else []
            )
            for rc in step_cost:
                rc.count = rc.count * cost_scale
            running = combine([*cost, *step_cost])

            if style.is_partial and not registry.can_afford(running):
                break
            steps += 1
            cost = running

        if steps == 0:
            return PurchaseCost.empty(style)
        if (not style.is_dry and not registry.can_afford(cost)) or (
            style.is_full and steps != last - first
        ):
            return PurchaseCost.empty(style)

        return PurchaseCost(
            count=Decimal(steps) * sign(gain),
            style=style,
            gain=combine([ResourceCount(self, gain * steps)]),
            cost=cost,
        )

    # Buying and selling

    def buy(
        self,
        amount: PurchaseAmount = 1,
        style: PurchaseStyle | str = PurchaseStyle.PARTIAL,
        gain_factor: DecimalSource = 1,
        cost_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Buy a fixed amount or the best affordable amount within a range.

        For a PurchaseRange the amount converges on the nearest increment
        boundary that is actually affordable. A live purchase that converges
        on nothing is rejected; a dry one instead reports whether a single
        increment could be bought (as a ``dry-full`` preview).

        Args:
            amount: Signed amount, or a PurchaseRange.
            style: Purchase style.
            gain_factor: Multiplier on units received.
            cost_factor: Multiplier on each step's cost.
            count_override: See get_count.

        Returns:
            The transaction that took place (or would, for dry styles).
        """
        style = PurchaseStyle(style)
        registry = self.registry
        if not isinstance(amount, PurchaseRange):
            return registry.purchase(
                [ResourceCount(self, to_decimal(amount))],
                style,
                gain_factor,
                cost_factor,
                count_override,
            )

        current = self.get_count(count_override)
        min_amount = to_decimal(amount.min_amount)
        max_amount = to_decimal(amount.max_amount)
        increment = to_decimal(amount.increments)
        if (
            not all(is_finite(value) for value in (current, min_amount, max_amount, increment))
            or abs(min_amount) > abs(max_amount)
            or abs(max_amount) > MAX_PURCHASE_STEPS
            or increment == 0
        ):
            return PurchaseCost.empty(style)

        lower = self.min_count if self.min_count is not None else ZERO
        upper = self.max_count if self.max_count is not None else INFINITY

        def align(delta: Decimal) -> Decimal:
            aligned = floor((current + delta) / increment) * increment
            return clamp(aligned, lower, upper) - current

        def preview(delta: Decimal, preview_style: PurchaseStyle) -> PurchaseCost:
            return registry.purchase(
                [ResourceCount(self, delta)],
                preview_style,
                gain_factor,
                cost_factor,
                count_override,
            )

        to_buy = preview(align(max_amount), PurchaseStyle.DRY_PARTIAL)
        bought = to_buy.count
        if bought % increment != 0:
            to_buy = preview(align(bought), PurchaseStyle.DRY_PARTIAL)
            bought = to_buy.count

        if (
            bought == 0
            or (min_amount >= 0 and bought < min_amount)
            or (min_amount < 0 and bought > min_amount)
        ):
            if not style.is_dry:
                return PurchaseCost.empty(style)
            adjusted = align(
                clamp(increment, min(min_amount, max_amount), max(min_amount, max_amount))
            )
            to_buy = preview(adjusted if adjusted != 0 else sign(increment), PurchaseStyle.DRY_FULL)
            bought = to_buy.count

        if style.is_dry:
            return to_buy
        return registry.purchase(
            [ResourceCount(self, bought)],
            style,
            gain_factor,
            cost_factor,
            count_override,
        )

    def sell(
        self,
        amount: PurchaseAmount = 1,
        style: PurchaseStyle | str = PurchaseStyle.FULL,
        gain_factor: DecimalSource = 1,
        sell_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Sell an amount (or range) of this resource. Mirror image of buy."""
        if isinstance(amount, PurchaseRange):
            negated: PurchaseAmount = amount.negated()
        else:
            negated = -to_decimal(amount)
        return self.buy(negated, style, gain_factor, sell_factor, count_override)

    def can_buy(
        self,
        amount: PurchaseAmount = 1,
        cost_factor: DecimalSource = 1,
        count_override: DecimalSource | None = None,
    ) -> PurchaseCost:
        """Preview how much of amount could be bought right now."""
        return self.buy(amount, PurchaseStyle.DRY_PARTIAL, 1, cost_factor, count_override)

    def award(self, amount: PurchaseAmount = 1) -> PurchaseCost:
        """Add amount of this resource for free."""
        return self.buy(amount, PurchaseStyle.FREE)

    # Rates

    def update_rate(self, dt: float) -> None:
        """Advance simulated time and refresh the smoothed rate.

        Called once per tick. Every ``rate_update_secs`` of simulated time the
        instantaneous rate since the last sample is blended into ``rate`` with
        the configured EMA factor.

        Args:
            dt: Simulated seconds in this tick.
        """
        if self._registry is not None:
            interval = self._registry.settings.rate_update_secs
            alpha = to_decimal(self._registry.settings.rate_update_ema_factor)
        else:
            interval = _DEFAULT_RATE_UPDATE_SECS
            alpha = to_decimal(_DEFAULT_RATE_EMA_FACTOR)

        self.last_tick += dt
        if self._rate_last_time is None:
            self._rate_last_time = self.last_tick
            self._rate_last_count = self.count

        elapsed = self.last_tick - self._rate_last_time
        if elapsed >= interval and elapsed > 0:
            instant = (self.count - self._rate_last_count) / to_decimal(elapsed)
            self.rate = self.rate * (1 - alpha) + instant * alpha
            self._rate_last_time = self.last_tick
            self._rate_last_count = self.count
