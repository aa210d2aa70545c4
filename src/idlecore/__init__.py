"""idlecore: resource economy and simulation clock for incremental games.

Usage:
    from idlecore import Game, PurchaseRange

    game = Game()
    gold = game.registry.upsert({"name": "gold", "count": 10})
    mine = game.registry.upsert({
        "name": "mine",
        "purchase_cost": "[('gold', D(2) ** count)]",
        "on_tick": "registry.get('gold').set_value(registry.get('gold').count + self.count * D(dt))",
    })

    mine.buy(1)                                   # spends 2 gold
    mine.can_buy(PurchaseRange(1, 10))            # preview, no mutation
    game.tick(source="tick")                      # advance by elapsed real time
"""

__version__ = "0.1.0"

# Configuration
from idlecore.config import EconomySettings, SimulationSettings

# Core primitives
from idlecore.core import (
    INFINITY,
    ONE,
    ZERO,
    CompiledHook,
    D,
    DecimalSource,
    DisplayStyle,
    ExtraValues,
    FormulaCompiler,
    FormulaError,
    PurchaseAmount,
    PurchaseCost,
    PurchaseRange,
    PurchaseStyle,
    Resource,
    ResourceCount,
    ResourceRef,
    combine,
    compile_formula,
    merge_deltas,
    to_decimal,
)

# Registry
from idlecore.registry import ResourceRegistry, resource_to_dict

# Simulation
from idlecore.simulation import (
    ExecutionRecord,
    Game,
    SaveRetryPolicy,
    SimulationClock,
    TickSource,
    TickTimer,
)

# Storage
from idlecore.storage import FileStorage, LocalStorage, Storage, decode, encode

__all__ = [
    "__version__",
    # Configuration
    "EconomySettings",
    "SimulationSettings",
    # Core
    "CompiledHook",
    "D",
    "DecimalSource",
    "DisplayStyle",
    "ExtraValues",
    "FormulaCompiler",
    "FormulaError",
    "INFINITY",
    "ONE",
    "PurchaseAmount",
    "PurchaseCost",
    "PurchaseRange",
    "PurchaseStyle",
    "Resource",
    "ResourceCount",
    "ResourceRef",
    "ZERO",
    "combine",
    "compile_formula",
    "merge_deltas",
    "to_decimal",
    # Registry
    "ResourceRegistry",
    "resource_to_dict",
    # Simulation
    "ExecutionRecord",
    "Game",
    "SaveRetryPolicy",
    "SimulationClock",
    "TickSource",
    "TickTimer",
    # Storage
    "FileStorage",
    "LocalStorage",
    "Storage",
    "decode",
    "encode",
]
