"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from idlecore import Game, LocalStorage, ResourceRegistry, SimulationSettings, TickTimer


class FakeClock:
    """Controllable time source returning epoch milliseconds."""

    def __init__(self, start: float = 1_700_000_000_000.0) -> None:
        self.ms = start

    def __call__(self) -> float:
        return self.ms

    def advance(self, seconds: float) -> float:
        self.ms += seconds * 1000
        return self.ms


@pytest.fixture
def registry():
    """Fresh ResourceRegistry instance."""
    return ResourceRegistry()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def storage():
    return LocalStorage()


@pytest.fixture
def game(fake_clock, storage):
    """Game on a fake clock with in-memory storage."""
    return Game(storage=storage, now=fake_clock)


@pytest.fixture
def make_game(fake_clock, storage):
    """Factory for games sharing the fake clock and storage."""

    def _make(**kwargs):
        kwargs.setdefault("storage", storage)
        kwargs.setdefault("now", fake_clock)
        if "simulation" not in kwargs:
            kwargs["simulation"] = SimulationSettings()
        return Game(**kwargs)

    return _make


@pytest.fixture(autouse=True)
def _stop_active_timer():
    yield
    active = TickTimer.active()
    if active is not None:
        active.stop()
