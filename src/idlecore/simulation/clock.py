"""Simulation clock: turns wall-clock time into bounded simulation sub-ticks.

Usage:
    registry = ResourceRegistry()
    clock = SimulationClock(registry, SimulationSettings(max_tick_secs=1))

    clock.tick(source="tick")          # first call only records the start
    changes = clock.tick(source="tick")
    state = clock.save()
    clock.load(state)

Timestamps are epoch milliseconds. Every call covers the real time since the
previous call (bounded by ``max_update_secs``) and hands it to the registry in
slices of at most ``max_tick_secs``.
"""

from __future__ import annotations

import json
import logging
import time
import warnings
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from idlecore.config import EconomySettings, SimulationSettings
from idlecore.registry import ResourceRegistry
from idlecore.simulation.models import ExecutionRecord, TickSource

logger = logging.getLogger(__name__)

_TIMESTAMP_FIELDS = ("last_reset", "last_saved", "last_loaded", "last_render", "last_tick")


def epoch_ms() -> float:
    """Current wall-clock time in milliseconds."""
    return time.time() * 1000


class SimulationClock:
    """Drives a ResourceRegistry from wall-clock time.

    Args:
        registry: Registry ticked by this clock.
        settings: Timing parameters.
        now: Time source returning epoch milliseconds.

    Attributes:
        last_tick: Timestamp of the latest effective tick (None before the first).
        execution: Per-source statistics of the latest tick.
        on_tick: Whole-state callback run once per sub-tick of ``"tick"`` calls
            with the simulated seconds of that sub-tick.
        on_tick_complete: Callback run after every effective tick with the
            real seconds covered and the source.
    """

    def __init__(
        self,
        registry: ResourceRegistry,
        settings: SimulationSettings | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or SimulationSettings()
        self._now = now or epoch_ms

        created = self._now()
        self.last_reset: float = created
        self.last_saved: float = 0.0
        self.last_loaded: float = created
        self.last_render: float = 0.0
        self.last_tick: float | None = None

        self.execution: dict[str, ExecutionRecord] = {}
        self.on_tick: Callable[[float], Any] | None = None
        self.on_tick_complete: Callable[[float, str], Any] | None = None

    def now(self) -> float:
        return self._now()

    def tick(
        self,
        now: float | None = None,
        source: str = TickSource.UNKNOWN,
        on_save: Callable[[SimulationClock], Any] | None = None,
        on_render: Callable[[SimulationClock], Any] | None = None,
    ) -> dict[str, Decimal]:
        """Advance the simulation to ``now``.

        Args:
            now: Epoch milliseconds, defaults to the clock's time source.
            source: Tag identifying the caller. Each source keeps its own
                execution record.
            on_save: Called when ``save_frequency_secs`` have passed since
                both the last save and the last load.
            on_render: Called at most ``renders_per_sec`` times a second.

        Returns:
            Resource name -> net count change over this call. Empty when the
            call came too soon after the previous one.
        """
        now = self.now() if now is None else float(now)
        settings = self.settings

        last = self.last_tick if self.last_tick is not None else now
        dt = min(max((now - last) / 1000, 0.0), settings.max_update_secs)
        epoch = now - dt * 1000
        if dt < settings.min_update_secs and self.last_tick is not None:
            return {}

        results: dict[str, Decimal] = {}
        scale = 1 / settings.time_dilation
        while dt > 0:
            step = min(max(dt, settings.min_update_secs), settings.max_tick_secs)
            dt -= step
            sim_dt = 0.0 if settings.simulation_paused else step * scale
            results = self.registry.tick_all(sim_dt, source, results)
            if source == TickSource.TICK and self.on_tick is not None:
                self.on_tick(sim_dt)

        elapsed = (now - epoch) / 1000
        alpha = self.registry.settings.rate_update_ema_factor or 0.25
        previous = self.execution.get(source)
        tps = previous.tps if previous is not None else 0.0
        if elapsed > 0:
            tps = tps * (1 - alpha) + (1 / elapsed) * alpha

        self.last_tick = now
        record = ExecutionRecord(
            last_tick=now,
            last_delta=elapsed,
            last_result=results,
            tps=tps,
            fps=previous.fps if previous is not None else 0.0,
        )
        self.execution[source] = record

        if self.on_tick_complete is not None:
            self.on_tick_complete(elapsed, source)

        save_interval = settings.save_frequency_secs * 1000
        if (
            on_save is not None
            and now - self.last_saved >= save_interval
            and now - self.last_loaded >= save_interval
        ):
            self.last_saved = now
            on_save(self)

        if on_render is not None and now - self.last_render >= 1000 / settings.renders_per_sec:
            record.fps = record.fps * (1 - alpha) + (1000 / (now - self.last_render)) * alpha
            self.last_render = now
            on_render(self)

        return record.last_result

    # State

    def set(self, state: Mapping[str, Any]) -> SimulationClock:
        """Merge a partial state into the clock, its settings and the registry.

        Mapping-valued fields merge shallowly, scalar fields overwrite and
        ``resources`` is upserted into the registry. ``None`` values are
        skipped.
        """
        for key, value in state.items():
            if value is None:
                continue
            if key == "resources":
                self.registry.load_all(value)
            elif key == "execution":
                for source, record in value.items():
                    self.execution[source] = (
                        record
                        if isinstance(record, ExecutionRecord)
                        else ExecutionRecord.from_dict(record)
                    )
            elif key in _TIMESTAMP_FIELDS:
                setattr(self, key, float(value))
            elif key in SimulationSettings.model_fields:
                setattr(self.settings, key, value)
            elif key in EconomySettings.model_fields:
                current = getattr(self.registry.settings, key)
                if isinstance(current, dict) and isinstance(value, Mapping):
                    value = {**current, **value}
                setattr(self.registry.settings, key, value)
            else:
                warnings.warn(f"Ignoring unknown state field {key!r}", stacklevel=2)
        return self

    def load(self, state: Mapping[str, Any] | str | None = None) -> SimulationClock:
        """Merge saved state (mapping or JSON text) and stamp ``last_loaded``."""
        if isinstance(state, str):
            return self.load(json.loads(state))
        if state is None:
            state = {}
        elif not isinstance(state, Mapping):
            logger.warning("Ignoring state of type %s", type(state).__name__)
            return self

        self.set(state)
        self.last_loaded = self.now()
        return self

    def save(self) -> dict[str, Any]:
        """Stamp ``last_saved`` and snapshot clock, settings and resources."""
        self.last_saved = self.now()
        return {
            **self.settings.model_dump(mode="json"),
            **self.registry.settings.model_dump(mode="json"),
            **{key: getattr(self, key) for key in _TIMESTAMP_FIELDS},
            "execution": {source: record.to_dict() for source, record in self.execution.items()},
            "resources": self.registry.save_all(),
        }
