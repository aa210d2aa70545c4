"""Periodic tick timer.

One timer drives one game with ``"tick"`` ticks on the running event loop.
Only one timer is active per process: starting a timer stops the previously
active one first, and a timer never overlaps itself because every tick is
awaited before the next sleep begins.

Usage:
    timer = TickTimer(game)
    timer.start()   # requires a running event loop
    ...
    timer.stop()
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, ClassVar

from idlecore.simulation.models import TickSource

if TYPE_CHECKING:
    from idlecore.simulation.game import Game

logger = logging.getLogger(__name__)


class TickTimer:
    """Asyncio task that ticks a game ``ticks_per_sec`` times a second.

    Args:
        game: Game to tick.
        interval: Seconds between ticks. Defaults to the game's
            ``1 / ticks_per_sec``, re-read on every iteration.
    """

    _active: ClassVar[TickTimer | None] = None

    def __init__(self, game: Game, interval: float | None = None) -> None:
        self._game = game
        self._interval = interval
        self._task: asyncio.Task[None] | None = None
        self._ticking = False
        self.ticks = 0

    @classmethod
    def active(cls) -> TickTimer | None:
        """The timer currently running in this process, if any."""
        return cls._active

    @property
    def interval(self) -> float:
        if self._interval is not None:
            return self._interval
        return 1.0 / self._game.clock.settings.ticks_per_sec

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Arm the timer, stopping any other active timer first."""
        if self.running:
            return
        previous = TickTimer._active
        if previous is not None and previous is not self:
            previous.stop()
        self._task = asyncio.get_running_loop().create_task(self._run())
        TickTimer._active = self
        logger.debug("Tick timer started (%.4fs interval)", self.interval)

    def stop(self) -> None:
        """Disarm the timer.

        A sleeping timer is cancelled immediately. A tick in progress (including
        a save it requested) runs to completion and the loop exits after it.
        """
        if self._task is not None:
            if not self._ticking:
                self._task.cancel()
            self._task = None
            logger.debug("Tick timer stopped after %d ticks", self.ticks)
        if TickTimer._active is self:
            TickTimer._active = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self._task is not asyncio.current_task():
                return
            self._ticking = True
            try:
                await self._game.tick_async(source=TickSource.TICK)
            except Exception:
                logger.exception("Tick failed, stopping timer")
                if TickTimer._active is self:
                    TickTimer._active = None
                raise
            finally:
                self._ticking = False
            self.ticks += 1
