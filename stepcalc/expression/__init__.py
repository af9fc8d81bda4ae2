"""Expression trees, parsing and simplification."""

from .parser import ParseError, SanitizationError, parse_equation, parse_expression, sanitize_math_expression
from .simplifier import simplify
from .tree import (
    BinaryOp,
    BinaryOperator,
    EvaluationError,
    Node,
    Number,
    UnaryFunc,
    UnaryFunction,
    Variable,
)

__all__ = [
    "Node",
    "Number",
    "Variable",
    "BinaryOp",
    "UnaryFunc",
    "BinaryOperator",
    "UnaryFunction",
    "EvaluationError",
    "ParseError",
    "SanitizationError",
    "parse_expression",
    "parse_equation",
    "sanitize_math_expression",
    "simplify",
]
