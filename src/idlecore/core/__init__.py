"""Core functionalities: stateless primitives.

Architecture Note:
    core/ contains the numeric helpers, resource models, per-resource purchase
    math and the formula compiler. Cross-resource state lives in registry/ and
    time-driven orchestration in simulation/.
"""

from idlecore.core.formula import CompiledHook, FormulaCompiler, FormulaError, compile_formula
from idlecore.core.numeric import (
    INFINITY,
    ONE,
    ZERO,
    D,
    DecimalSource,
    clamp,
    is_finite,
    sign,
    to_decimal,
)
from idlecore.core.resource import (
    DisplayStyle,
    ExtraValues,
    PurchaseAmount,
    PurchaseCost,
    PurchaseRange,
    PurchaseStyle,
    Resource,
    ResourceCount,
    ResourceRef,
    combine,
    merge_deltas,
)

__all__ = [
    # Numeric
    "D",
    "DecimalSource",
    "INFINITY",
    "ONE",
    "ZERO",
    "clamp",
    "is_finite",
    "sign",
    "to_decimal",
    # Resource
    "DisplayStyle",
    "ExtraValues",
    "PurchaseAmount",
    "PurchaseCost",
    "PurchaseRange",
    "PurchaseStyle",
    "Resource",
    "ResourceCount",
    "ResourceRef",
    "combine",
    "merge_deltas",
    # Formula
    "CompiledHook",
    "FormulaCompiler",
    "FormulaError",
    "compile_formula",
]
