"""End-to-end tests: a small idle game driven through the public API.

Why these tests exist:
- Formulas, purchases, ticking and persistence must work together
- A saved game must keep producing after it is reloaded
"""

import pytest

from idlecore import FileStorage, Game, PurchaseRange, PurchaseStyle, SimulationSettings
from idlecore.core.numeric import D

DEFINITIONS = {
    "gold": {"count": 100, "display": "number"},
    "miner": {
        "description": "Digs one gold per second",
        "purchase_cost": "[('gold', 10 * count)]",
        "on_tick": "registry.get('gold').set_value(registry.get('gold').count + self.count * D(dt))",
    },
    "drill": {
        "locked": True,
        "auto_unlock": True,
        "unlock_cost": "[('miner', 5)]",
        "purchase_cost": "[('gold', 50)]",
    },
}


@pytest.fixture
def idle_game(fake_clock):
    game = Game({"resources": DEFINITIONS}, now=fake_clock)
    game.tick(source="tick")
    return game


def test_buy_tick_sell(idle_game, fake_clock) -> None:
    gold, miner = idle_game.registry.get("gold"), idle_game.registry.get("miner")

    assert miner.buy(3).count == 3  # 10 + 20 + 30
    assert gold.count == 40

    result = idle_game.tick(fake_clock.advance(2), "tick")
    assert result == {"gold": 6}
    assert gold.count == 46

    assert miner.sell(1).count == -1  # refunds the third miner
    assert (gold.count, miner.count) == (76, 2)


def test_ranged_buy_uses_whatever_gold_there_is(idle_game) -> None:
    gold, miner = idle_game.registry.get("gold"), idle_game.registry.get("miner")

    preview = miner.can_buy(PurchaseRange(1, 10))
    assert preview.count == 4  # 10 + 20 + 30 + 40
    assert gold.count == 100

    bought = miner.buy(PurchaseRange(1, 10, 2), PurchaseStyle.PARTIAL)
    assert bought.count == 4
    assert gold.count == 0


def test_drill_unlocks_once_enough_miners(idle_game, fake_clock) -> None:
    drill = idle_game.registry.get("drill")
    miner = idle_game.registry.get("miner")

    miner.award(4)
    idle_game.tick(fake_clock.advance(1), "tick")
    assert drill.locked

    miner.award(1)
    idle_game.tick(fake_clock.advance(1), "tick")
    assert not drill.locked
    assert miner.count == 5


@pytest.mark.asyncio
async def test_offline_progress_through_files(tmp_path, fake_clock) -> None:
    storage = FileStorage(tmp_path)
    simulation = SimulationSettings(max_tick_secs=0.5)

    game = Game({"resources": DEFINITIONS}, storage=storage, simulation=simulation, now=fake_clock)
    await game.tick_async(source="tick")
    game.registry.get("miner").buy(2)  # gold 100 -> 70
    await game.save()

    fake_clock.advance(60)
    restored = Game(storage=storage, now=fake_clock)
    await restored.load()

    assert restored.clock.settings.max_tick_secs == 0.5
    assert restored.registry.get("miner").count == 2
    assert restored.registry.get("gold").count == 70 + 2 * 60
    assert restored.registry.get("drill").locked
