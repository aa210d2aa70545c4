"""Configuration settings using Pydantic Settings.

Provides typed configuration with environment variable support for the
economy and the simulation clock.

Usage:
    from idlecore.config import EconomySettings, SimulationSettings

    # Load from environment variables (IDLECORE_ECONOMY_*, IDLECORE_SIM_*)
    economy = EconomySettings()
    simulation = SimulationSettings()

    # Or override with explicit values
    simulation = SimulationSettings(ticks_per_sec=20, max_tick_secs=0.5)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EconomySettings(BaseSettings):  # type: ignore[misc]
    """Cross-resource multipliers and rate sampling parameters.

    Attributes:
        gain_factor: Global multiplier on everything gained by purchases.
        cost_factor: Global multiplier on everything spent by purchases.
        sell_ratio: Share of the buy cost refunded when selling.
        rate_update_secs: Simulated seconds between rate samples.
        rate_update_ema_factor: Weight of a new sample in the rate EMA (0-1].
        format_options: Default options handed to formatters. Opaque here.

    Environment Variables:
        IDLECORE_ECONOMY_GAIN_FACTOR
        IDLECORE_ECONOMY_COST_FACTOR
        IDLECORE_ECONOMY_SELL_RATIO
        IDLECORE_ECONOMY_RATE_UPDATE_SECS
        IDLECORE_ECONOMY_RATE_UPDATE_EMA_FACTOR
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLECORE_ECONOMY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    gain_factor: Decimal = Decimal(1)
    cost_factor: Decimal = Decimal(1)
    sell_ratio: Decimal = Decimal(1)
    rate_update_secs: float = Field(default=0.25, ge=0)
    rate_update_ema_factor: float = Field(default=0.25, gt=0, le=1)
    format_options: dict[str, Any] = Field(default_factory=dict)


class SimulationSettings(BaseSettings):  # type: ignore[misc]
    """Simulation clock parameters.

    Attributes:
        ticks_per_sec: Frequency of the periodic tick timer.
        renders_per_sec: Maximum frequency of render signals.
        save_frequency_secs: Minimum seconds between automatic saves.
        min_update_secs: Ticks closer together than this are skipped.
        max_update_secs: Real time beyond this per tick call is discarded.
        max_tick_secs: Largest simulated slice handed to resources at once.
        time_dilation: Simulated time runs 1/time_dilation as fast as real time.
        simulation_paused: When set, ticks run with zero simulated time.

    Environment Variables:
        IDLECORE_SIM_TICKS_PER_SEC
        IDLECORE_SIM_RENDERS_PER_SEC
        IDLECORE_SIM_SAVE_FREQUENCY_SECS
        IDLECORE_SIM_MIN_UPDATE_SECS
        IDLECORE_SIM_MAX_UPDATE_SECS
        IDLECORE_SIM_MAX_TICK_SECS
        IDLECORE_SIM_TIME_DILATION
        IDLECORE_SIM_SIMULATION_PAUSED
    """

    model_config = SettingsConfigDict(
        env_prefix="IDLECORE_SIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    ticks_per_sec: float = Field(default=100, gt=0)
    renders_per_sec: float = Field(default=30, gt=0)
    save_frequency_secs: float = Field(default=60, ge=0)
    min_update_secs: float = Field(default=0.01, gt=0)
    max_update_secs: float = Field(default=24 * 60 * 60, gt=0)
    max_tick_secs: float = Field(default=1, gt=0)
    time_dilation: float = Field(default=1.0, gt=0)
    simulation_paused: bool = False
