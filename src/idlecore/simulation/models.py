"""Simulation models: execution records, tick sources and save retry policy.

These models are storage-agnostic and convert to and from plain mappings so
that they can be persisted with the rest of the game state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Final, Literal

from idlecore.core.numeric import to_decimal


class TickSource:
    """Well-known tick source tags. Any other string is a valid source too."""

    TICK: Final = "tick"
    """Periodic timer. The only source that runs whole-state tick callbacks."""

    SAVE: Final = "save"
    """Bookkeeping pass right before state is written."""

    LOAD: Final = "load"
    """Catch-up pass right after state is read."""

    UNKNOWN: Final = "unknown"
    """Default for callers that do not tag their ticks."""


@dataclass(slots=True)
class ExecutionRecord:
    """Statistics of the latest tick from one source.

    Attributes:
        last_tick: Epoch milliseconds of the tick.
        last_delta: Real seconds covered by the tick.
        last_result: Resource name -> net count change during the tick.
        tps: Smoothed ticks per second.
        fps: Smoothed render signals per second.
    """

    last_tick: float = 0.0
    last_delta: float = 0.0
    last_result: dict[str, Decimal] = field(default_factory=dict)
    tps: float = 0.0
    fps: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "last_tick": self.last_tick,
            "last_delta": self.last_delta,
            "last_result": {name: str(delta) for name, delta in self.last_result.items()},
            "tps": self.tps,
            "fps": self.fps,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExecutionRecord:
        """Create from dictionary (for deserialization)."""
        return cls(
            last_tick=float(data.get("last_tick", 0.0)),
            last_delta=float(data.get("last_delta", 0.0)),
            last_result={
                name: to_decimal(delta) for name, delta in data.get("last_result", {}).items()
            },
            tps=float(data.get("tps", 0.0)),
            fps=float(data.get("fps", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class SaveRetryPolicy:
    """Configuration for retrying failed storage writes.

    Useful for storage backends with transient failures. Saves are idempotent,
    so repeating one is harmless.
    """

    max_attempts: int = 1
    """Maximum attempts (1 = no retry). Default: no retry."""

    backoff: Literal["none", "linear", "exponential"] = "none"
    """Backoff strategy between retries."""

    base_delay: float = 0.1
    """Base delay in seconds for backoff calculation."""

    on_exhausted: Literal["fail", "skip"] = "fail"
    """What to do when retries are exhausted: raise, or report the save as skipped."""
