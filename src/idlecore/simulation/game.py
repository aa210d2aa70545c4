"""Game: one complete simulation (registry, clock, storage and listeners).

Usage:
    game = Game(storage=FileStorage("~/.mygame"))
    await game.load()

    game.registry.upsert({"name": "gold", "on_tick": "self.set_value(self.count + D(dt))"})
    game.subscribe(lambda g: redraw(g))
    game.add_tick_timer()     # inside a running event loop

    # Or drive it manually
    game.tick(source="tick")

    # Retry configuration (requires tenacity: pip install idlecore[retry])
    game = Game(retry_policy=SaveRetryPolicy(max_attempts=3, backoff="exponential"))
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable, Mapping
from decimal import Decimal
from typing import Any

from idlecore.config import EconomySettings, SimulationSettings
from idlecore.core.formula import FormulaCompiler
from idlecore.registry import ResourceRegistry
from idlecore.simulation.clock import SimulationClock
from idlecore.simulation.models import SaveRetryPolicy, TickSource
from idlecore.simulation.timer import TickTimer
from idlecore.storage import LocalStorage, Storage

# Optional tenacity import for retry functionality
try:
    import tenacity

    TENACITY_AVAILABLE = True
except ImportError:
    TENACITY_AVAILABLE = False

logger = logging.getLogger(__name__)

Listener = Callable[["Game"], Any]


class Game:
    """Explicit simulation context.

    Owns the resource registry and the clock driving it, persists state
    through a Storage backend and notifies listeners whenever the state
    should be re-rendered.

    Args:
        state: Optional initial state (mapping or JSON text), see
            SimulationClock.load.
        storage: Persistence backend. Defaults to in-memory storage.
        key: Storage key the state is saved under.
        retry_policy: Retry policy for storage writes.
        economy: Economy settings for the registry.
        simulation: Timing settings for the clock.
        compiler: Formula compiler for hook text.
        now: Time source returning epoch milliseconds.
    """

    def __init__(
        self,
        state: Mapping[str, Any] | str | None = None,
        storage: Storage | None = None,
        key: str = "Settings",
        retry_policy: SaveRetryPolicy | None = None,
        economy: EconomySettings | None = None,
        simulation: SimulationSettings | None = None,
        compiler: FormulaCompiler | None = None,
        now: Callable[[], float] | None = None,
    ) -> None:
        self.storage: Storage = storage or LocalStorage()
        self.key = key
        self.retry_policy = retry_policy or SaveRetryPolicy()
        self._economy = economy or EconomySettings()
        self._simulation = simulation or SimulationSettings()
        self._compiler = compiler
        self._now = now
        self._listeners: dict[str, Listener] = {}
        self._timer: TickTimer | None = None

        self.registry, self.clock = self._build()
        self.clock.load(state)

    def _build(self) -> tuple[ResourceRegistry, SimulationClock]:
        registry = ResourceRegistry(self._economy.model_copy(), self._compiler)
        clock = SimulationClock(registry, self._simulation.model_copy(), now=self._now)
        return registry, clock

    # Ticking

    async def tick_async(
        self, now: float | None = None, source: str = TickSource.UNKNOWN
    ) -> dict[str, Decimal]:
        """Tick the clock, rendering and saving when due.

        A save requested by the clock is awaited before returning.
        """
        save_requested = False

        def request_save(_clock: SimulationClock) -> None:
            nonlocal save_requested
            save_requested = True

        result = self.clock.tick(
            now,
            source,
            on_save=request_save,
            on_render=lambda _clock: self.signal(),
        )
        if save_requested:
            await self.save()
        return result

    def tick(self, now: float | None = None, source: str = TickSource.UNKNOWN) -> dict[str, Decimal]:
        """Synchronous wrapper for tick_async."""
        return asyncio.run(self.tick_async(now, source))

    def add_tick_timer(self, interval: float | None = None) -> TickTimer:
        """Start ticking periodically on the running event loop.

        Any previously active timer, of this game or another, is stopped first.
        """
        self.remove_tick_timer()
        self._timer = TickTimer(self, interval)
        self._timer.start()
        return self._timer

    def remove_tick_timer(self) -> None:
        """Stop this game's tick timer, if any."""
        if self._timer is not None:
            self._timer.stop()
        self._timer = None

    @property
    def timer(self) -> TickTimer | None:
        return self._timer

    # State

    def set(self, state: Mapping[str, Any]) -> Game:
        """Merge partial state and notify listeners."""
        self.clock.set(state)
        self.signal()
        return self

    def reset(self, state: Mapping[str, Any] | str | None = None) -> Game:
        """Discard all resources and clock state, starting over from state."""
        logger.debug("Resetting game")
        self.registry.reset()
        self.registry, self.clock = self._build()
        self.clock.load(state)
        self.signal()
        return self

    async def save(self) -> bool:
        """Bring resources up to date and write the state to storage.

        Returns:
            True once written. False only when retries are exhausted and the
            policy says to skip.
        """
        self.clock.tick(None, TickSource.SAVE)
        state = self.clock.save()
        self.signal()
        written = await self._write_with_retry(state)
        logger.debug("Saved state under %r", self.key)
        return written

    async def load(self) -> Game:
        """Read state from storage, then catch up on the time since it was saved."""
        state = await self.storage.read(self.key)
        self.clock.load(state)
        self.signal()
        self.clock.tick(None, TickSource.LOAD)
        logger.debug("Loaded state from %r", self.key)
        return self

    async def _write_with_retry(self, state: dict[str, Any]) -> bool:
        """Write state with retry policy.

        Uses tenacity for retry logic when max_attempts > 1.
        Requires tenacity to be installed: pip install idlecore[retry]
        """
        policy = self.retry_policy

        if policy.max_attempts <= 1:
            return await self.storage.write(self.key, state)

        if not TENACITY_AVAILABLE:
            msg = "Retry policy requires tenacity. Install with: pip install idlecore[retry]"
            raise ImportError(msg)

        retryer = self._build_retryer(policy)

        try:
            async for attempt in retryer:
                with attempt:
                    return await self.storage.write(self.key, state)
        except tenacity.RetryError as e:
            if policy.on_exhausted == "skip":
                logger.warning("Skipping save after %d attempts", policy.max_attempts)
                return False
            msg = f"Saving {self.key!r} failed after {policy.max_attempts} attempts"
            raise RuntimeError(msg) from e.last_attempt.exception()

        return False  # pragma: no cover

    def _build_retryer(self, policy: SaveRetryPolicy) -> tenacity.AsyncRetrying:
        """Build a tenacity retryer from SaveRetryPolicy configuration."""
        stop = tenacity.stop_after_attempt(policy.max_attempts)

        wait: tenacity.wait.wait_base
        if policy.backoff == "exponential":
            wait = tenacity.wait_exponential(multiplier=policy.base_delay, min=policy.base_delay)
        elif policy.backoff == "linear":
            wait = tenacity.wait_incrementing(start=policy.base_delay, increment=policy.base_delay)
        else:
            wait = tenacity.wait_none()

        return tenacity.AsyncRetrying(stop=stop, wait=wait, reraise=False)

    # Listeners

    def subscribe(self, listener: Listener, key: str | None = None) -> str:
        """Register a render listener. Returns the key to unsubscribe with."""
        key = key or uuid.uuid4().hex
        self._listeners[key] = listener
        return key

    def unsubscribe(self, key: str) -> None:
        self._listeners.pop(key, None)

    def signal(self) -> None:
        """Call every listener with this game."""
        for listener in list(self._listeners.values()):
            listener(self)
