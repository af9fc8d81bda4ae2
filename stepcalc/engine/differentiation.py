"""Rule-based symbolic differentiation over expression trees.

The engine walks the input top-down and builds the derivative bottom-up. Each
rule appends its step before recursing, so the trace is in pre-order. Any
subtree reused in the result is cloned; the input tree is never shared.

Unsupported shapes (a power with a non-literal exponent) differentiate to
``Number(0)`` with a step saying so. Callers that need a guaranteed-correct
derivative must check the trace for ``UNSUPPORTED_MARKER``.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Union

from stepcalc.expression.tree import (
    BinaryOp,
    BinaryOperator,
    Node,
    Number,
    UnaryFunc,
    UnaryFunction,
    Variable,
    add,
    div,
    mul,
    power,
    sub,
)
from stepcalc.utils.logger import get_logger

from .steps import DerivativeResult, Selector, Step

logger = get_logger("stepcalc.differentiation")

UNSUPPORTED_MARKER = "unsupported"

_BinaryRule = Callable[[BinaryOp, str, List[Step]], Node]


def differentiate(root: Node, variable: Union[Selector, str] = Selector.X) -> DerivativeResult:
    """Differentiates `root` with respect to the selected variable.

    Every other variable name is a symbolic constant for this pass.

    Args:
        root: Expression tree; read only.
        variable: `Selector.X`, `Selector.Y` or their string values.

    Returns:
        DerivativeResult with a freshly built tree and the rule steps.
    """
    selector = Selector(variable)
    steps: List[Step] = []
    tree = _differentiate_node(root, selector.value, steps)
    logger.debug("differentiate variable=%s input=%s result=%s steps=%d", selector.value, root, tree, len(steps))
    return DerivativeResult(tree=tree, steps=steps, variable=selector, source=root)


def _differentiate_node(node: Node, var: str, steps: List[Step]) -> Node:
    if isinstance(node, Number):
        steps.append(Step("Constant Rule: ∂/∂{0}(c) = 0".format(var), "∂/∂{}({}) = 0".format(var, node)))
        return Number(0)
    if isinstance(node, Variable):
        if node.name == var:
            steps.append(Step("Identity Rule: ∂/∂{0}({0}) = 1".format(var), "∂/∂{0}({0}) = 1".format(var)))
            return Number(1)
        steps.append(
            Step(
                "Constant Rule: {} treated as constant, ∂/∂{}({}) = 0".format(node.name, var, node.name),
                "∂/∂{}({}) = 0".format(var, node.name),
            )
        )
        return Number(0)
    if isinstance(node, BinaryOp):
        return _BINARY_RULES[node.op](node, var, steps)
    if isinstance(node, UnaryFunc):
        return _chain_rule(node, var, steps)
    return _unsupported(node, var, steps, "Unrecognised node")


def _unsupported(node: Node, var: str, steps: List[Step], reason: str) -> Node:
    steps.append(
        Step(
            "{} is {}; derivative taken as 0".format(reason, UNSUPPORTED_MARKER),
            "∂/∂{}({}) = 0".format(var, node),
        )
    )
    return Number(0)


def _sum_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Sum Rule: ∂/∂{0}(f + g) = ∂f/∂{0} + ∂g/∂{0}".format(var),
            "∂/∂{}({})".format(var, node),
        )
    )
    left = _differentiate_node(node.left, var, steps)
    right = _differentiate_node(node.right, var, steps)
    return add(left, right)


def _difference_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Difference Rule: ∂/∂{0}(f - g) = ∂f/∂{0} - ∂g/∂{0}".format(var),
            "∂/∂{}({})".format(var, node),
        )
    )
    left = _differentiate_node(node.left, var, steps)
    right = _differentiate_node(node.right, var, steps)
    return sub(left, right)


def _product_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Product Rule: ∂/∂{0}(f * g) = ∂f/∂{0} * g + f * ∂g/∂{0}".format(var),
            "∂/∂{}({})".format(var, node),
        )
    )
    left = _differentiate_node(node.left, var, steps)
    right = _differentiate_node(node.right, var, steps)
    return add(mul(left, node.right.clone()), mul(node.left.clone(), right))


def _quotient_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Quotient Rule: ∂/∂{0}(f / g) = (∂f/∂{0} * g - f * ∂g/∂{0}) / g^2".format(var),
            "∂/∂{}({})".format(var, node),
        )
    )
    left = _differentiate_node(node.left, var, steps)
    right = _differentiate_node(node.right, var, steps)
    numerator = sub(mul(left, node.right.clone()), mul(node.left.clone(), right))
    return div(numerator, power(node.right.clone(), 2))


def _power_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    if not isinstance(node.right, Number):
        return _unsupported(node, var, steps, "Power with a non-constant exponent")

    exponent = node.right.value
    steps.append(
        Step(
            "Power Rule: ∂/∂{0}(u^n) = n * u^(n-1) * ∂u/∂{0}".format(var),
            "∂/∂{}({})".format(var, node),
        )
    )
    inner = _differentiate_node(node.left, var, steps)
    return mul(mul(Number(exponent), power(node.left.clone(), exponent - 1)), inner)


_BINARY_RULES: Dict[BinaryOperator, _BinaryRule] = {
    BinaryOperator.ADD: _sum_rule,
    BinaryOperator.SUB: _difference_rule,
    BinaryOperator.MUL: _product_rule,
    BinaryOperator.DIV: _quotient_rule,
    BinaryOperator.POW: _power_rule,
}


# Outer derivative g'(u) for the chain rule, each built from its own clone of u.
_OUTER_DERIVATIVES: Dict[UnaryFunction, Callable[[Node], Node]] = {
    UnaryFunction.SIN: lambda u: UnaryFunc(UnaryFunction.COS, u.clone()),
    UnaryFunction.COS: lambda u: mul(-1, UnaryFunc(UnaryFunction.SIN, u.clone())),
    UnaryFunction.TAN: lambda u: div(1, power(UnaryFunc(UnaryFunction.COS, u.clone()), 2)),
    UnaryFunction.LN: lambda u: div(1, u.clone()),
    UnaryFunction.EXP: lambda u: UnaryFunc(UnaryFunction.EXP, u.clone()),
    UnaryFunction.SQRT: lambda u: div(1, mul(2, UnaryFunc(UnaryFunction.SQRT, u.clone()))),
}

_CHAIN_RULE_FORMS: Dict[UnaryFunction, str] = {
    UnaryFunction.SIN: "cos(u)",
    UnaryFunction.COS: "-sin(u)",
    UnaryFunction.TAN: "sec^2(u)",
    UnaryFunction.LN: "(1/u)",
    UnaryFunction.EXP: "exp(u)",
    UnaryFunction.SQRT: "(1/(2*sqrt(u)))",
}


def _chain_rule(node: UnaryFunc, var: str, steps: List[Step]) -> Node:
    outer = _OUTER_DERIVATIVES.get(node.func)
    if outer is None:
        return _unsupported(node, var, steps, "Function '{}'".format(node.func.value))

    steps.append(
        Step(
            "Chain Rule: ∂/∂{0}({1}(u)) = {2} * ∂u/∂{0}".format(var, node.func.value, _CHAIN_RULE_FORMS[node.func]),
            "∂/∂{}({}) with u = {}".format(var, node, node.arg),
        )
    )
    inner = _differentiate_node(node.arg, var, steps)
    return mul(outer(node.arg), inner)
