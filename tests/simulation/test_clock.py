"""Tests for the simulation clock.

Critical Invariants:
- A tick never simulates more than max_update_secs
- No sub-tick is larger than max_tick_secs
- Ticks closer together than min_update_secs are skipped
- Saves are never requested within save_frequency_secs of a save or load
"""

import json

import pytest

from idlecore import ExecutionRecord, ResourceRegistry, SimulationClock, SimulationSettings
from idlecore.core.numeric import D


@pytest.fixture
def recorder(registry):
    """Resource that accumulates dt and records every sub-tick."""
    steps = []
    item = registry.upsert({"name": "item"})

    def on_tick(dt, source):
        steps.append(dt)
        item.set_value(item.count + D(dt))

    item.on_tick = on_tick
    return item, steps


def make_clock(registry, fake_clock, **settings):
    return SimulationClock(registry, SimulationSettings(**settings), now=fake_clock)


def test_first_tick_only_records_start(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock)

    assert clock.tick(source="tick") == {}
    assert clock.last_tick == fake_clock.ms
    assert steps == []
    assert clock.execution["tick"].last_delta == 0


def test_clock_reads_time_from_its_source(registry, fake_clock) -> None:
    clock = make_clock(registry, fake_clock)
    fake_clock.advance(5)

    assert clock.now() == fake_clock.ms
    clock.tick(source="tick")
    assert clock.last_tick == fake_clock.ms
    assert clock.save()["last_saved"] == fake_clock.ms


def test_sub_stepping(registry, fake_clock, recorder) -> None:
    """CRITICAL: 2.5s of real time runs as 1s + 1s + 0.5s sub-ticks.

    Why: Compounding hooks misbehave with large steps.
    """
    item, steps = recorder
    clock = make_clock(registry, fake_clock, max_tick_secs=1)
    clock.tick(source="tick")

    result = clock.tick(fake_clock.advance(2.5), "tick")

    assert steps == [1.0, 1.0, 0.5]
    assert item.count == D("2.5")
    assert result == {"item": D("2.5")}


def test_debounce(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock, min_update_secs=0.01)
    clock.tick(source="tick")
    started = clock.last_tick

    assert clock.tick(fake_clock.advance(0.005), "tick") == {}
    assert clock.last_tick == started
    assert steps == []


def test_backlog_is_discarded(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock, max_update_secs=3)
    clock.tick(source="tick")

    clock.tick(fake_clock.advance(3600), "tick")

    assert sum(steps) == 3
    assert max(steps) <= 1
    assert clock.execution["tick"].last_delta == 3


def test_clock_going_backwards_is_ignored(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock)
    clock.tick(source="tick")

    assert clock.tick(fake_clock.ms - 5000, "tick") == {}
    assert steps == []


def test_paused_simulation_ticks_zero(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock, simulation_paused=True)
    clock.tick(source="tick")

    clock.tick(fake_clock.advance(2), "tick")

    assert steps == [0.0, 0.0]
    assert item.count == 0


def test_time_dilation_slows_simulation(registry, fake_clock, recorder) -> None:
    item, steps = recorder
    clock = make_clock(registry, fake_clock, time_dilation=2)
    clock.tick(source="tick")

    clock.tick(fake_clock.advance(2), "tick")

    assert steps == [0.5, 0.5]


def test_whole_state_callback_only_for_tick_source(registry, fake_clock) -> None:
    calls = []
    clock = make_clock(registry, fake_clock)
    clock.on_tick = calls.append
    clock.tick(source="tick")

    clock.tick(fake_clock.advance(1), "load")
    assert calls == []

    clock.tick(fake_clock.advance(1.5), "tick")
    assert calls == [1.0, 0.5]


def test_execution_records_per_source(registry, fake_clock) -> None:
    completed = []
    clock = make_clock(registry, fake_clock)
    clock.on_tick_complete = lambda elapsed, source: completed.append((elapsed, source))
    clock.tick(source="tick")

    clock.tick(fake_clock.advance(1), "tick")
    clock.tick(fake_clock.advance(2), "save")

    tick_record = clock.execution["tick"]
    assert tick_record.tps == pytest.approx(0.25)
    assert tick_record.last_delta == 1
    assert clock.execution["save"].last_delta == 2
    assert completed == [(0, "tick"), (1, "tick"), (2, "save")]


def test_save_requested_after_frequency(registry, fake_clock) -> None:
    saves = []
    clock = make_clock(registry, fake_clock, save_frequency_secs=60)
    clock.tick(source="tick", on_save=saves.append)

    clock.tick(fake_clock.advance(30), "tick", on_save=saves.append)
    assert saves == []

    clock.tick(fake_clock.advance(30), "tick", on_save=saves.append)
    assert saves == [clock]
    assert clock.last_saved == fake_clock.ms

    clock.tick(fake_clock.advance(1), "tick", on_save=saves.append)
    assert len(saves) == 1


def test_no_save_right_after_load(registry, fake_clock) -> None:
    saves = []
    clock = make_clock(registry, fake_clock, save_frequency_secs=10)
    clock.tick(source="tick")
    fake_clock.advance(20)
    clock.load({})

    clock.tick(fake_clock.advance(1), "tick", on_save=saves.append)

    assert saves == []


def test_render_rate_limited(registry, fake_clock) -> None:
    renders = []
    clock = make_clock(registry, fake_clock, renders_per_sec=10)
    clock.tick(source="tick", on_render=renders.append)
    assert len(renders) == 1

    clock.tick(fake_clock.advance(0.05), "tick", on_render=renders.append)
    assert len(renders) == 1

    clock.tick(fake_clock.advance(0.05), "tick", on_render=renders.append)
    assert len(renders) == 2
    assert clock.last_render == fake_clock.ms
    assert clock.execution["tick"].fps > 0


def test_save_snapshot(registry, fake_clock) -> None:
    registry.upsert({"name": "gold", "count": 5})
    registry.settings.sell_ratio = D("0.5")
    clock = make_clock(registry, fake_clock, ticks_per_sec=20)
    clock.tick(source="tick")

    state = clock.save()

    assert state["last_saved"] == fake_clock.ms
    assert state["last_tick"] == fake_clock.ms
    assert state["ticks_per_sec"] == 20
    assert state["sell_ratio"] == "0.5"
    assert state["resources"]["gold"]["count"] == "5"
    assert state["execution"]["tick"]["last_delta"] == 0
    json.dumps(state)


def test_load_restores_into_fresh_clock(registry, fake_clock) -> None:
    registry.upsert({"name": "gold", "count": 5})
    registry.settings.gain_factor = D(3)
    clock = make_clock(registry, fake_clock, max_tick_secs=0.5)
    clock.tick(source="tick")
    state = json.dumps(clock.save())

    restored_registry = ResourceRegistry()
    restored = SimulationClock(restored_registry, now=fake_clock)
    fake_clock.advance(5)
    restored.load(state)

    assert restored_registry.get("gold").count == 5
    assert restored_registry.settings.gain_factor == 3
    assert restored.settings.max_tick_secs == 0.5
    assert restored.last_tick == clock.last_tick
    assert restored.last_loaded == fake_clock.ms
    assert isinstance(restored.execution["tick"], ExecutionRecord)


def test_set_merges_mapping_fields(registry, fake_clock) -> None:
    registry.settings.format_options = {"notation": "scientific", "digits": 2}
    clock = make_clock(registry, fake_clock)
    clock.tick(source="tick")

    clock.set(
        {
            "format_options": {"digits": 3},
            "execution": {"load": {"tps": 4.0}},
            "time_dilation": 2,
            "last_render": None,
        }
    )

    assert registry.settings.format_options == {"notation": "scientific", "digits": 3}
    assert set(clock.execution) == {"tick", "load"}
    assert clock.execution["load"].tps == 4.0
    assert clock.settings.time_dilation == 2
    assert clock.last_render == 0


def test_set_validates_settings(registry, fake_clock) -> None:
    clock = make_clock(registry, fake_clock)
    with pytest.raises(ValueError):
        clock.set({"time_dilation": 0})


def test_set_warns_on_unknown_fields(registry, fake_clock) -> None:
    clock = make_clock(registry, fake_clock)
    with pytest.warns(UserWarning, match="mystery"):
        clock.set({"mystery": 1})


def test_load_ignores_non_mappings(registry, fake_clock) -> None:
    clock = make_clock(registry, fake_clock)
    loaded = clock.last_loaded
    fake_clock.advance(1)

    assert clock.load(42) is clock  # type: ignore[arg-type]
    assert clock.last_loaded == loaded
