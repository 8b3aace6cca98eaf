"""Pluggable expression evaluation for request and reply derivation.

The default evaluator accepts a restricted subset of Python expression
syntax and runs it without builtins:

    "http://localhost:" + env["port"] + "/" + payload
    {"Key1": "value1", "Key2": headers.get("x-trace")}
    body[3:8]
"""

from __future__ import annotations

import ast
from collections.abc import Mapping
from types import CodeType
from typing import Any, Protocol


class ExpressionError(ValueError):
    """Raised when an expression cannot be compiled or evaluated."""

    def __init__(self, message: str, expression: str) -> None:
        super().__init__(f"{message}: {expression!r}")
        self.expression = expression


class ExpressionEvaluator(Protocol):
    """Evaluate configured expressions against a set of named variables."""

    def compile(self, expression: str) -> None:
        """Check expression syntax; raise ExpressionError when invalid."""

    def evaluate(self, expression: str, variables: Mapping[str, Any]) -> Any:
        """Evaluate expression and return its value; raise ExpressionError on failure."""


SAFE_FUNCTIONS: dict[str, Any] = {
    "abs": abs,
    "bool": bool,
    "dict": dict,
    "float": float,
    "int": int,
    "len": len,
    "list": list,
    "max": max,
    "min": min,
    "round": round,
    "sorted": sorted,
    "str": str,
}

SAFE_METHODS = frozenset(
    {
        "capitalize",
        "count",
        "decode",
        "encode",
        "endswith",
        "find",
        "get",
        "index",
        "items",
        "join",
        "keys",
        "lower",
        "lstrip",
        "replace",
        "rstrip",
        "split",
        "startswith",
        "strip",
        "title",
        "upper",
        "values",
        "zfill",
    }
)

_ALLOWED_NODES: tuple[type[ast.AST], ...] = (
    ast.Expression,
    ast.Constant,
    ast.Name,
    ast.Load,
    ast.Attribute,
    ast.Call,
    ast.keyword,
    ast.Subscript,
    ast.Slice,
    ast.Dict,
    ast.List,
    ast.Tuple,
    ast.Set,
    ast.JoinedStr,
    ast.FormattedValue,
    ast.BinOp,
    ast.Add,
    ast.Sub,
    ast.Mult,
    ast.Div,
    ast.FloorDiv,
    ast.Mod,
    ast.UnaryOp,
    ast.USub,
    ast.UAdd,
    ast.Not,
    ast.BoolOp,
    ast.And,
    ast.Or,
    ast.Compare,
    ast.Eq,
    ast.NotEq,
    ast.Gt,
    ast.GtE,
    ast.Lt,
    ast.LtE,
    ast.In,
    ast.NotIn,
    ast.Is,
    ast.IsNot,
    ast.IfExp,
)


class SafeExpressionEvaluator:
    """Evaluate restricted Python expressions with compiled-code caching."""

    def __init__(self) -> None:
        self._cache: dict[str, CodeType] = {}

    def compile(self, expression: str) -> None:
        self._compiled(expression)

    def evaluate(self, expression: str, variables: Mapping[str, Any]) -> Any:
        code = self._compiled(expression)
        safe_globals: dict[str, Any] = {"__builtins__": {}, **SAFE_FUNCTIONS}
        try:
            return eval(code, safe_globals, dict(variables))
        except Exception as exc:
            raise ExpressionError(f"evaluation failed ({type(exc).__name__}: {exc})", expression) from exc

    def _compiled(self, expression: str) -> CodeType:
        cached = self._cache.get(expression)
        if cached is not None:
            return cached
        if not isinstance(expression, str) or not expression.strip():
            raise ExpressionError("expression must be a non-empty string", str(expression))
        try:
            tree = ast.parse(expression.strip(), mode="eval")
        except SyntaxError as exc:
            raise ExpressionError(f"invalid syntax ({exc.msg})", expression) from exc
        _validate_ast(tree, expression)
        code = compile(tree, "<httprelay-expression>", "eval")
        self._cache[expression] = code
        return code


def _validate_ast(tree: ast.AST, expression: str) -> None:
    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise ExpressionError(f"unsupported syntax {type(node).__name__}", expression)
        if isinstance(node, ast.Attribute) and (node.attr.startswith("_") or node.attr not in SAFE_METHODS):
            raise ExpressionError(f"attribute {node.attr!r} is not allowed", expression)
        if isinstance(node, ast.Name) and node.id.startswith("_"):
            raise ExpressionError(f"name {node.id!r} is not allowed", expression)
        if isinstance(node, ast.Call):
            func = node.func
            if isinstance(func, ast.Name) and func.id in SAFE_FUNCTIONS:
                continue
            if isinstance(func, ast.Attribute):
                continue
            raise ExpressionError("only allow-listed functions and methods may be called", expression)
