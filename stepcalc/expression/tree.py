"""Algebraic expression tree used by the calculus engines."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, FrozenSet, Union


class EvaluationError(ValueError):
    """Raised when a tree cannot be evaluated with the supplied bindings."""


class BinaryOperator(str, Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    POW = "^"


class UnaryFunction(str, Enum):
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    LN = "ln"
    EXP = "exp"
    SQRT = "sqrt"


_PRECEDENCE: Dict[BinaryOperator, int] = {
    BinaryOperator.ADD: 1,
    BinaryOperator.SUB: 1,
    BinaryOperator.MUL: 2,
    BinaryOperator.DIV: 2,
    BinaryOperator.POW: 3,
}
_ATOM_PRECEDENCE = 4


def format_number(value: float) -> str:
    """Renders a float without a trailing `.0` when it is integral."""
    if math.isnan(value):
        return "nan"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    if value == int(value) and abs(value) < 1e15:
        return str(int(value))
    return "{:.10g}".format(value)


class Node:
    """Base class of the closed node family: Number, Variable, BinaryOp, UnaryFunc."""

    __slots__ = ()

    def evaluate(self, **values: float) -> float:
        raise NotImplementedError

    def clone(self) -> "Node":
        raise NotImplementedError

    def free_variables(self) -> FrozenSet[str]:
        raise NotImplementedError

    def depends_on(self, name: str) -> bool:
        return name in self.free_variables()

    def to_string(self) -> str:
        return _render(self)

    def __str__(self) -> str:
        return _render(self)


@dataclass(frozen=True)
class Number(Node):
    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def evaluate(self, **values: float) -> float:
        return self.value

    def clone(self) -> "Number":
        return Number(self.value)

    def free_variables(self) -> FrozenSet[str]:
        return frozenset()


@dataclass(frozen=True)
class Variable(Node):
    name: str

    def evaluate(self, **values: float) -> float:
        if self.name not in values:
            raise EvaluationError("No value bound for variable '{}'".format(self.name))
        return float(values[self.name])

    def clone(self) -> "Variable":
        return Variable(self.name)

    def free_variables(self) -> FrozenSet[str]:
        return frozenset((self.name,))


@dataclass(frozen=True)
class BinaryOp(Node):
    op: BinaryOperator
    left: Node
    right: Node

    def evaluate(self, **values: float) -> float:
        left = self.left.evaluate(**values)
        right = self.right.evaluate(**values)
        return _BINARY_EVALUATORS[self.op](left, right)

    def clone(self) -> "BinaryOp":
        return BinaryOp(self.op, self.left.clone(), self.right.clone())

    def free_variables(self) -> FrozenSet[str]:
        return self.left.free_variables() | self.right.free_variables()


@dataclass(frozen=True)
class UnaryFunc(Node):
    func: UnaryFunction
    arg: Node

    def evaluate(self, **values: float) -> float:
        return _UNARY_EVALUATORS[self.func](self.arg.evaluate(**values))

    def clone(self) -> "UnaryFunc":
        return UnaryFunc(self.func, self.arg.clone())

    def free_variables(self) -> FrozenSet[str]:
        return self.arg.free_variables()


Operand = Union[Node, float, int]


def _as_node(value: Operand) -> Node:
    return value if isinstance(value, Node) else Number(value)


def add(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinaryOperator.ADD, _as_node(left), _as_node(right))


def sub(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinaryOperator.SUB, _as_node(left), _as_node(right))


def mul(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinaryOperator.MUL, _as_node(left), _as_node(right))


def div(left: Operand, right: Operand) -> BinaryOp:
    return BinaryOp(BinaryOperator.DIV, _as_node(left), _as_node(right))


def power(base: Operand, exponent: Operand) -> BinaryOp:
    return BinaryOp(BinaryOperator.POW, _as_node(base), _as_node(exponent))


def func(name: Union[UnaryFunction, str], arg: Operand) -> UnaryFunc:
    return UnaryFunc(UnaryFunction(name), _as_node(arg))


def rename_variable(node: Node, old: str, new: str) -> Node:
    """Returns a fresh tree with every `Variable(old)` replaced by `Variable(new)`."""
    if isinstance(node, Variable):
        return Variable(new if node.name == old else node.name)
    if isinstance(node, BinaryOp):
        return BinaryOp(node.op, rename_variable(node.left, old, new), rename_variable(node.right, old, new))
    if isinstance(node, UnaryFunc):
        return UnaryFunc(node.func, rename_variable(node.arg, old, new))
    return node.clone()


# Numeric evaluation follows IEEE semantics: poles and domain errors give inf/nan.


def _ieee_div(left: float, right: float) -> float:
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _ieee_pow(base: float, exponent: float) -> float:
    try:
        result = math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except (ValueError, ZeroDivisionError):
        if base == 0.0 and exponent < 0:
            return math.inf
        return math.nan
    return result


def _ieee_ln(value: float) -> float:
    if value == 0.0:
        return -math.inf
    if value < 0.0 or math.isnan(value):
        return math.nan
    return math.log(value)


def _ieee_exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def _ieee_sqrt(value: float) -> float:
    if value < 0.0 or math.isnan(value):
        return math.nan
    return math.sqrt(value)


def _ieee_trig(fn: Callable[[float], float]) -> Callable[[float], float]:
    def _apply(value: float) -> float:
        if math.isinf(value) or math.isnan(value):
            return math.nan
        return fn(value)

    return _apply


_BINARY_EVALUATORS: Dict[BinaryOperator, Callable[[float, float], float]] = {
    BinaryOperator.ADD: lambda a, b: a + b,
    BinaryOperator.SUB: lambda a, b: a - b,
    BinaryOperator.MUL: lambda a, b: a * b,
    BinaryOperator.DIV: _ieee_div,
    BinaryOperator.POW: _ieee_pow,
}

_UNARY_EVALUATORS: Dict[UnaryFunction, Callable[[float], float]] = {
    UnaryFunction.SIN: _ieee_trig(math.sin),
    UnaryFunction.COS: _ieee_trig(math.cos),
    UnaryFunction.TAN: _ieee_trig(math.tan),
    UnaryFunction.LN: _ieee_ln,
    UnaryFunction.EXP: _ieee_exp,
    UnaryFunction.SQRT: _ieee_sqrt,
}


def _is_negation(node: Node) -> bool:
    return (
        isinstance(node, BinaryOp)
        and node.op is BinaryOperator.MUL
        and isinstance(node.left, Number)
        and node.left.value == -1.0
    )


def _precedence(node: Node) -> int:
    if isinstance(node, BinaryOp):
        return _PRECEDENCE[node.op]
    return _ATOM_PRECEDENCE


def _leads_with_minus(node: Node) -> bool:
    return (isinstance(node, Number) and node.value < 0) or _is_negation(node)


def _render_operand(child: Node, parent: BinaryOperator, is_right: bool) -> str:
    text = _render(child)
    child_prec = _precedence(child)
    parent_prec = _PRECEDENCE[parent]

    needs_parens = child_prec < parent_prec
    if child_prec == parent_prec:
        # a - (b + c), a / (b * c) and (a ^ b) ^ c all need explicit grouping.
        if is_right and parent in (BinaryOperator.SUB, BinaryOperator.DIV, BinaryOperator.POW):
            needs_parens = True
        if not is_right and parent is BinaryOperator.POW:
            needs_parens = True
    if _leads_with_minus(child) and (is_right or parent is BinaryOperator.POW):
        needs_parens = True
    return "({})".format(text) if needs_parens else text


def _render(node: Node) -> str:
    if isinstance(node, Number):
        return format_number(node.value)
    if isinstance(node, Variable):
        return node.name
    if isinstance(node, UnaryFunc):
        return "{}({})".format(node.func.value, _render(node.arg))
    if isinstance(node, BinaryOp):
        if _is_negation(node):
            operand = node.right
            text = _render(operand)
            if _precedence(operand) <= _PRECEDENCE[BinaryOperator.ADD] or _leads_with_minus(operand):
                text = "({})".format(text)
            return "-" + text
        left = _render_operand(node.left, node.op, is_right=False)
        right = _render_operand(node.right, node.op, is_right=True)
        if node.op is BinaryOperator.POW:
            return "{}^{}".format(left, right)
        return "{} {} {}".format(left, node.op.value, right)
    raise TypeError("Unknown expression node: {!r}".format(node))
