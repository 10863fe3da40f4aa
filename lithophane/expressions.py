"""Compiling coordinate expressions into numeric functions using sympy.

Expression text is checked against a fixed grammar before sympy sees it:
numbers, the variables x, y, w and h, the constants pi and e, the operators
``+ - * / % ** ^`` and calls to the functions listed in ``FUNCTIONS``.
Anything else (attribute access, subscripts, keywords, unknown names) is
rejected with an ExpressionError before the text is handed to sympy.
"""

from __future__ import annotations

import ast
import logging
from typing import Callable

import numpy as np
import sympy
from sympy.parsing.sympy_parser import (
    convert_xor,
    parse_expr,
    standard_transformations,
)

from lithophane.exceptions import ExpressionError

logger = logging.getLogger(__name__)

VARIABLES = ("x", "y", "w", "h")

_SYMBOLS = {name: sympy.Symbol(name, real=True) for name in VARIABLES}

CONSTANTS = {
    "pi": sympy.pi,
    "e": sympy.E,
}


def _round_half_away(value):
    """Round to the nearest integer, halves away from zero."""
    return sympy.sign(value) * sympy.floor(sympy.Abs(value) + sympy.Rational(1, 2))


FUNCTIONS = {
    "sin": sympy.sin,
    "cos": sympy.cos,
    "tan": sympy.tan,
    "asin": sympy.asin,
    "acos": sympy.acos,
    "atan": sympy.atan,
    "atan2": sympy.atan2,
    "sinh": sympy.sinh,
    "cosh": sympy.cosh,
    "tanh": sympy.tanh,
    "asinh": sympy.asinh,
    "acosh": sympy.acosh,
    "atanh": sympy.atanh,
    "exp": sympy.exp,
    "ln": sympy.log,
    "log": sympy.log,
    "sqrt": sympy.sqrt,
    "abs": sympy.Abs,
    "floor": sympy.floor,
    "ceil": sympy.ceiling,
    "round": _round_half_away,
    "signum": sympy.sign,
    "min": sympy.Min,
    "max": sympy.Max,
}

_BINARY_OPERATORS = (ast.Add, ast.Sub, ast.Mult, ast.Div, ast.Mod, ast.Pow, ast.BitXor)
_UNARY_OPERATORS = (ast.UAdd, ast.USub)

_TRANSFORMATIONS = standard_transformations + (convert_xor,)


def _check_node(node: ast.AST, axis: str) -> None:
    """Recursively reject any syntax outside the expression grammar."""
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ExpressionError(axis, f"unsupported constant {node.value!r}")

    elif isinstance(node, ast.Name):
        if node.id in FUNCTIONS:
            raise ExpressionError(axis, f"function {node.id} must be called with arguments")
        if node.id not in _SYMBOLS and node.id not in CONSTANTS:
            raise ExpressionError(
                axis,
                f"unknown variable {node.id}; only {', '.join(VARIABLES)} are allowed",
            )

    elif isinstance(node, ast.BinOp) and isinstance(node.op, _BINARY_OPERATORS):
        _check_node(node.left, axis)
        _check_node(node.right, axis)

    elif isinstance(node, ast.UnaryOp) and isinstance(node.op, _UNARY_OPERATORS):
        _check_node(node.operand, axis)

    elif isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ExpressionError(axis, "only named functions can be called")
        if node.func.id not in FUNCTIONS:
            raise ExpressionError(axis, f"unknown function {node.func.id}")
        if node.keywords or not node.args:
            raise ExpressionError(
                axis, f"function {node.func.id} takes positional arguments only"
            )
        for arg in node.args:
            _check_node(arg, axis)

    else:
        raise ExpressionError(axis, f"unsupported syntax: {type(node).__name__}")


def validate_expression(text: str, axis: str = "x") -> None:
    """Check that text only uses the expression grammar.

    Raises:
        ExpressionError: If the text is empty, does not parse, or uses any
            name, operator or construct outside the grammar.
    """
    if not text or not text.strip():
        raise ExpressionError(axis, "expression is empty")

    try:
        tree = ast.parse(text.strip(), mode="eval")
    except (SyntaxError, ValueError) as e:
        raise ExpressionError(axis, f"cannot parse {text!r}") from e

    _check_node(tree.body, axis)


class CompiledExpression:
    """Coordinate function compiled from an expression over x, y, w and h.

    Calls are numpy-vectorized: arguments may be scalars or arrays and the
    result is broadcast to their common shape, so constant expressions such
    as ``"0"`` still produce one value per sample.

    Args:
        expression: Parsed sympy expression.
        text: Source text of the expression.
        axis: Coordinate the expression defines.
    """

    vectorized = True

    def __init__(self, expression: sympy.Expr, text: str, axis: str):
        self.expression = expression
        self.text = text
        self.axis = axis
        self._function: Callable = sympy.lambdify(
            [_SYMBOLS[name] for name in VARIABLES], expression, modules="numpy"
        )

    def __call__(self, x, y, w, h) -> np.ndarray:
        shape = np.broadcast(x, y).shape
        result = np.asarray(self._function(x, y, w, h), dtype=np.float64)
        return np.broadcast_to(result, shape)

    def __repr__(self) -> str:
        return f"CompiledExpression({self.axis}={self.text!r})"


def compile_expression(text: str, axis: str = "x") -> CompiledExpression:
    """Parse an expression such as ``"50 * cos(x / w * pi)"``.

    Args:
        text: Expression using the variables x, y, w, h, the constants pi and
            e, and elementary functions (sin, cos, sqrt, ln, round, max, ...).
        axis: Coordinate the expression defines, used in error messages.

    Returns:
        CompiledExpression callable as (x, y, w, h) -> value.

    Raises:
        ExpressionError: If the text does not parse or uses unknown names.
    """
    validate_expression(text, axis)

    local_dict = dict(CONSTANTS)
    local_dict.update(FUNCTIONS)
    local_dict.update(_SYMBOLS)
    # Only what auto_number emits; everything else comes from local_dict.
    global_dict = {
        "Integer": sympy.Integer,
        "Float": sympy.Float,
        "Rational": sympy.Rational,
    }

    try:
        expression = parse_expr(
            text.strip(),
            local_dict=local_dict,
            global_dict=global_dict,
            transformations=_TRANSFORMATIONS,
        )
    except (SyntaxError, TypeError, ValueError, ArithmeticError) as e:
        raise ExpressionError(axis, f"cannot evaluate {text!r}: {e}") from e

    logger.debug("Compiled %s expression %r", axis, text)
    return CompiledExpression(expression, text, axis)


def compile_expressions(
    x_text: str, y_text: str, z_text: str
) -> tuple[CompiledExpression, CompiledExpression, CompiledExpression]:
    """Compile the X, Y and Z coordinate expressions."""
    return (
        compile_expression(x_text, "x"),
        compile_expression(y_text, "y"),
        compile_expression(z_text, "z"),
    )
