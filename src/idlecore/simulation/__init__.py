"""Simulation: clock, periodic timer and the Game context.

Usage:
    from idlecore.simulation import Game

    game = Game()
    game.registry.upsert({"name": "gold"})
    game.tick(source="tick")
"""

from idlecore.simulation.clock import SimulationClock, epoch_ms
from idlecore.simulation.game import Game
from idlecore.simulation.models import ExecutionRecord, SaveRetryPolicy, TickSource
from idlecore.simulation.timer import TickTimer

__all__ = [
    "ExecutionRecord",
    "Game",
    "SaveRetryPolicy",
    "SimulationClock",
    "TickSource",
    "TickTimer",
    "epoch_ms",
]
