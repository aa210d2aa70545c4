"""Configuration module using Pydantic Settings.

Usage:
    from idlecore.config import EconomySettings, SimulationSettings

    economy = EconomySettings(sell_ratio="0.5")
    simulation = SimulationSettings(ticks_per_sec=20)
"""

from idlecore.config.settings import EconomySettings, SimulationSettings

__all__ = [
    "EconomySettings",
    "SimulationSettings",
]
