"""Hook text compilation."""

from idlecore.core.formula.compiler import (
    BASE_NAMESPACE,
    CompiledHook,
    FormulaCompiler,
    FormulaError,
    compile_formula,
)

__all__ = [
    "BASE_NAMESPACE",
    "CompiledHook",
    "FormulaCompiler",
    "FormulaError",
    "compile_formula",
]
