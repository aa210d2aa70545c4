"""Compile textual hook bodies into callables.

Resource definitions loaded from data files or saves may carry hooks as text,
e.g. ``{"purchase_cost": "[('gold', D(10) * count ** 2)]"}``. The registry
hands such text to a FormulaCompiler during upsert; economy logic only ever
sees the resulting callable.

The default compiler accepts a single Python expression. Names and attributes
starting with an underscore are rejected and no builtins are available beyond
a small numeric namespace. String constants containing ``__`` are rejected
as well. This guards against mistakes, not hostile input.

Usage:
    hook = compile_formula("count * 2", ["count"])
    hook(D(3))  # Decimal('6')
    hook.source  # 'count * 2'
"""

from __future__ import annotations

import ast
import logging
import math
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from typing import Any, Protocol

from idlecore.core.numeric import to_decimal

logger = logging.getLogger(__name__)


class FormulaError(Exception):
    """Raised when a hook whose text failed to compile is invoked."""


class FormulaCompiler(Protocol):
    """Turns hook text plus parameter names into a callable."""

    def __call__(
        self,
        body: str,
        params: Sequence[str],
        bind: Any = None,
        namespace: Mapping[str, Any] | None = None,
    ) -> Callable[..., Any]: ...


def _decimal_fn(fn: Callable[[Decimal], Decimal]) -> Callable[[Any], Decimal]:
    return lambda value: fn(to_decimal(value))


BASE_NAMESPACE: dict[str, Any] = {
    "D": to_decimal,
    "min": min,
    "max": max,
    "abs": abs,
    "round": round,
    "len": len,
    "sum": sum,
    "floor": math.floor,
    "ceil": math.ceil,
    "sqrt": _decimal_fn(Decimal.sqrt),
    "exp": _decimal_fn(Decimal.exp),
    "ln": _decimal_fn(Decimal.ln),
    "log10": _decimal_fn(Decimal.log10),
}


class CompiledHook:
    """Callable produced from hook text.

    Keeps the original source so that serialization can write it back.
    """

    __slots__ = ("source", "params", "_code", "_scope", "_error")

    def __init__(
        self,
        source: str,
        params: Sequence[str],
        code: Any = None,
        scope: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.source = source
        self.params = tuple(params)
        self._code = code
        self._scope = scope or {}
        self._error = error

    @property
    def ok(self) -> bool:
        """Whether the source compiled."""
        return self._error is None

    def __call__(self, *args: Any) -> Any:
        if self._error is not None:
            raise FormulaError(f"Hook {self.source!r} failed to compile") from self._error
        scope = dict(self._scope)
        scope.update(zip(self.params, args))
        return eval(self._code, scope)  # nosec B307 - AST validated, no builtins

    def __str__(self) -> str:
        return self.source

    def __repr__(self) -> str:
        return f"CompiledHook({self.source!r}, params={self.params!r})"


def _validate(tree: ast.AST) -> None:
    """Reject private names, attributes and dunder text.

    String constants are checked too, since ``str.format`` can reach
    attributes through field names like ``{0.__class__}``.
    """
    for node in ast.walk(tree):
        if isinstance(node, ast.Name) and node.id.startswith("_"):
            raise SyntaxError(f"Name {node.id!r} is not allowed in formulas")
        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            raise SyntaxError(f"Attribute {node.attr!r} is not allowed in formulas")
        if isinstance(node, ast.Constant) and isinstance(node.value, str) and "__" in node.value:
            raise SyntaxError(f"String {node.value!r} is not allowed in formulas")


def compile_formula(
    body: str,
    params: Sequence[str],
    bind: Any = None,
    namespace: Mapping[str, Any] | None = None,
) -> CompiledHook:
    """Compile a single-expression hook body.

    Compilation errors are not raised here. The returned hook raises
    FormulaError when invoked, so a bad formula only breaks the hook that
    uses it.

    Args:
        body: Expression text.
        params: Parameter names, bound positionally on call.
        bind: Object exposed as ``self`` (usually the owning resource).
        namespace: Extra names made available to the expression.

    Returns:
        CompiledHook wrapping the expression.
    """
    scope: dict[str, Any] = {"__builtins__": {}, **BASE_NAMESPACE}
    if namespace:
        scope.update(namespace)
    if bind is not None:
        scope["self"] = bind

    try:
        tree = ast.parse(body.strip(), mode="eval")
        _validate(tree)
        code = compile(tree, "<formula>", "eval")
    except (SyntaxError, ValueError) as e:
        logger.warning("Formula %r failed to compile: %s", body, e)
        return CompiledHook(body, params, error=e)

    return CompiledHook(body, params, code=code, scope=scope)
