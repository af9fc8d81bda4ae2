"""Text to expression-tree parsing with input sanitization."""

from __future__ import annotations

import ast
import math
import re
from typing import Dict, Iterable, Optional

from .tree import BinaryOp, BinaryOperator, Node, Number, UnaryFunc, UnaryFunction, Variable

DEFAULT_MAX_LENGTH = 400
DEFAULT_BLOCKED_PATTERNS = ("__", "import", "exec", "eval", "lambda")

_EXPRESSION_CHARSET = re.compile(r"^[a-zA-Z0-9_+\-*/^().=\s]+$")
_VARIABLE_NAME = re.compile(r"^[a-zA-Z]$")

_CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
}

_FUNCTIONS: Dict[str, UnaryFunction] = {
    "sin": UnaryFunction.SIN,
    "cos": UnaryFunction.COS,
    "tan": UnaryFunction.TAN,
    "ln": UnaryFunction.LN,
    "log": UnaryFunction.LN,
    "exp": UnaryFunction.EXP,
    "sqrt": UnaryFunction.SQRT,
}

_OPERATORS = {
    ast.Add: BinaryOperator.ADD,
    ast.Sub: BinaryOperator.SUB,
    ast.Mult: BinaryOperator.MUL,
    ast.Div: BinaryOperator.DIV,
    ast.Pow: BinaryOperator.POW,
}

_SYMBOL_REPLACEMENTS = {
    "−": "-",
    "–": "-",
    "×": "*",
    "÷": "/",
    "·": "*",
    "∙": "*",
    "π": "pi",
    "√": "sqrt",
}

_SUPERSCRIPTS = str.maketrans("⁰¹²³⁴⁵⁶⁷⁸⁹⁻", "0123456789-")
_SUPERSCRIPT_RUN = re.compile(r"[⁰¹²³⁴⁵⁶⁷⁸⁹⁻]+")


class SanitizationError(ValueError):
    """Raised when input text does not pass validation."""


class ParseError(ValueError):
    """Raised when sanitized text is not a supported algebraic expression."""


def normalize_math_text(text: str) -> str:
    """Maps common unicode math glyphs onto the ASCII grammar (`x²` -> `x^2`)."""
    for source, target in _SYMBOL_REPLACEMENTS.items():
        text = text.replace(source, target)
    return _SUPERSCRIPT_RUN.sub(lambda match: "^" + match.group(0).translate(_SUPERSCRIPTS), text)


def sanitize_math_expression(
    expression: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> str:
    normalized = normalize_math_text(expression.strip())
    if not normalized:
        raise SanitizationError("Expression cannot be empty.")
    if len(normalized) > max_length:
        raise SanitizationError("Expression exceeds max length of {} characters.".format(max_length))
    if not _EXPRESSION_CHARSET.match(normalized):
        raise SanitizationError("Expression contains unsupported characters.")

    lowered = normalized.lower()
    for pattern in blocked_patterns or DEFAULT_BLOCKED_PATTERNS:
        if pattern.lower() in lowered:
            raise SanitizationError("Expression contains blocked pattern '{}'.".format(pattern))
    return normalized


def parse_expression(
    expression: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> Node:
    """Parses infix text such as `x^2 + sin(y)` into an expression tree.

    The grammar is Python's arithmetic grammar with `^` for powers. Variables are
    single letters; `pi` and `e` are numeric constants.

    Raises:
        SanitizationError: If the text fails validation.
        ParseError: If the text is not a supported expression.
    """
    sanitized = sanitize_math_expression(expression, max_length=max_length, blocked_patterns=blocked_patterns)
    if "=" in sanitized:
        raise ParseError("Unexpected '=' in expression; use parse_equation for equations.")
    return _parse_sanitized(sanitized)


def parse_equation(
    equation: str,
    max_length: int = DEFAULT_MAX_LENGTH,
    blocked_patterns: Optional[Iterable[str]] = None,
) -> Node:
    """Parses `lhs = rhs` into the tree of `lhs - (rhs)`, or `F` alone as `F = 0`."""
    sanitized = sanitize_math_expression(equation, max_length=max_length, blocked_patterns=blocked_patterns)
    if sanitized.count("=") > 1:
        raise ParseError("Equation must contain at most one '='.")
    if "=" not in sanitized:
        return _parse_sanitized(sanitized)

    left, right = (part.strip() for part in sanitized.split("=", 1))
    if not left or not right:
        raise ParseError("Both sides of the equation are required.")
    lhs = _parse_sanitized(left)
    rhs = _parse_sanitized(right)
    if isinstance(rhs, Number) and rhs.value == 0.0:
        return lhs
    return BinaryOp(BinaryOperator.SUB, lhs, rhs)


def _parse_sanitized(text: str) -> Node:
    try:
        parsed = ast.parse(text.replace("^", "**"), mode="eval")
    except SyntaxError as exc:
        raise ParseError("Invalid expression syntax: {}".format(exc.msg)) from exc
    return _build(parsed.body)


def _build(node: ast.AST) -> Node:
    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise ParseError("Unsupported literal: {!r}".format(node.value))
        return Number(node.value)
    if isinstance(node, ast.Name):
        if node.id in _CONSTANTS:
            return Number(_CONSTANTS[node.id])
        if not _VARIABLE_NAME.match(node.id):
            raise ParseError("Unknown symbol '{}'; variables are single letters.".format(node.id))
        return Variable(node.id)
    if isinstance(node, ast.UnaryOp):
        operand = _build(node.operand)
        if isinstance(node.op, ast.UAdd):
            return operand
        if isinstance(node.op, ast.USub):
            if isinstance(operand, Number):
                return Number(-operand.value)
            return BinaryOp(BinaryOperator.MUL, Number(-1), operand)
        raise ParseError("Unsupported unary operator.")
    if isinstance(node, ast.BinOp):
        operator = _OPERATORS.get(type(node.op))
        if operator is None:
            raise ParseError("Unsupported operator: {}".format(type(node.op).__name__))
        return BinaryOp(operator, _build(node.left), _build(node.right))
    if isinstance(node, ast.Call):
        if not isinstance(node.func, ast.Name):
            raise ParseError("Only direct function calls are allowed.")
        function = _FUNCTIONS.get(node.func.id)
        if function is None:
            raise ParseError("Function '{}' is not supported.".format(node.func.id))
        if node.keywords or len(node.args) != 1:
            raise ParseError("Function '{}' takes exactly one argument.".format(node.func.id))
        return UnaryFunc(function, _build(node.args[0]))
    raise ParseError("Unsupported syntax: {}".format(type(node).__name__))
