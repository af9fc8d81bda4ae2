"""Rule-based symbolic antiderivatives and a numeric double integral.

Shapes outside the rule table are returned unchanged (identity fallback) with a
step containing ``NOT_INTEGRATED_MARKER``; ``IntegralResult.complete`` is False
whenever that happened. No constant of integration is placed in the tree.
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

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
    format_number,
    mul,
    power,
    sub,
)
from stepcalc.utils.logger import get_logger

from .steps import DoubleIntegralResult, IntegralResult, Selector, Step

logger = get_logger("stepcalc.integration")

NOT_INTEGRATED_MARKER = "not integrated"
DEFAULT_GRID_SIZE = 100


def integrate(root: Node, variable: Union[Selector, str] = Selector.X) -> IntegralResult:
    """Builds an antiderivative of `root` with respect to the selected variable.

    Args:
        root: Expression tree; read only.
        variable: `Selector.X`, `Selector.Y` or their string values.

    Returns:
        IntegralResult whose `complete` flag is False if any subtree fell back.
    """
    selector = Selector(variable)
    steps: List[Step] = []
    tree = _integrate_node(root, selector.value, steps)
    complete = not any(NOT_INTEGRATED_MARKER in step.description for step in steps)
    logger.debug(
        "integrate variable=%s input=%s result=%s complete=%s", selector.value, root, tree, complete
    )
    return IntegralResult(tree=tree, steps=steps, variable=selector, source=root, complete=complete)


def _integrate_node(node: Node, var: str, steps: List[Step]) -> Node:
    if isinstance(node, Number):
        steps.append(
            Step(
                "Constant Rule: ∫ c d{0} = c·{0}".format(var),
                "∫ {0} d{1} = {0}·{1}".format(node, var),
            )
        )
        return mul(node.clone(), Variable(var))
    if isinstance(node, Variable):
        if node.name == var:
            steps.append(
                Step(
                    "Power Rule: ∫ {0} d{0} = {0}^2/2".format(var),
                    "∫ {0} d{0} = {0}^2/2".format(var),
                )
            )
            return div(power(Variable(var), 2), 2)
        steps.append(
            Step(
                "Constant Rule: ∫ {0} d{1} = {0}·{1}".format(node.name, var),
                "∫ {0} d{1} = {0}·{1}".format(node.name, var),
            )
        )
        return mul(node.clone(), Variable(var))
    if isinstance(node, BinaryOp):
        if node.op is BinaryOperator.ADD:
            return _sum_rule(node, var, steps)
        if node.op is BinaryOperator.SUB:
            return _difference_rule(node, var, steps)
        if node.op is BinaryOperator.MUL:
            return _constant_multiple_rule(node, var, steps)
        if node.op is BinaryOperator.POW:
            return _power_rule(node, var, steps)
        return _identity_fallback(node, var, steps, "Quotient integration")
    if isinstance(node, UnaryFunc):
        return _function_rule(node, var, steps)
    return _identity_fallback(node, var, steps, "Unrecognised node")


def _identity_fallback(node: Node, var: str, steps: List[Step], reason: str) -> Node:
    steps.append(
        Step(
            "{} (advanced, {}; returned unchanged)".format(reason, NOT_INTEGRATED_MARKER),
            "∫ {} d{}".format(node, var),
        )
    )
    return node.clone()


def _constant_rule(node: Node, var: str, steps: List[Step], description: str) -> Node:
    steps.append(Step(description, "∫ {0} d{1} = ({0})·{1}".format(node, var)))
    return mul(node.clone(), Variable(var))


def _sum_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Sum Rule: ∫ (f + g) d{0} = ∫ f d{0} + ∫ g d{0}".format(var),
            "∫ ({}) d{}".format(node, var),
        )
    )
    left = _integrate_node(node.left, var, steps)
    right = _integrate_node(node.right, var, steps)
    return add(left, right)


def _difference_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    steps.append(
        Step(
            "Difference Rule: ∫ (f - g) d{0} = ∫ f d{0} - ∫ g d{0}".format(var),
            "∫ ({}) d{}".format(node, var),
        )
    )
    left = _integrate_node(node.left, var, steps)
    right = _integrate_node(node.right, var, steps)
    return sub(left, right)


def _split_constant_factor(node: BinaryOp, var: str) -> Optional[Tuple[Node, Node]]:
    """Returns (constant, other) for c·f, f·c, a·f or f·a where a is a foreign variable."""
    if isinstance(node.left, Number):
        return node.left, node.right
    if isinstance(node.right, Number):
        return node.right, node.left
    if isinstance(node.left, Variable) and node.left.name != var:
        return node.left, node.right
    if isinstance(node.right, Variable) and node.right.name != var:
        return node.right, node.left
    return None


def _constant_multiple_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    split = _split_constant_factor(node, var)
    if split is None:
        return _identity_fallback(node, var, steps, "Product integration")

    constant, other = split
    steps.append(
        Step(
            "Constant Multiple Rule: ∫ {0}·f d{1} = {0}·∫ f d{1}".format(constant, var),
            "∫ {} d{}".format(node, var),
        )
    )
    integral = _integrate_node(other, var, steps)
    return mul(constant.clone(), integral)


def _power_rule(node: BinaryOp, var: str, steps: List[Step]) -> Node:
    base, exponent = node.left, node.right
    if isinstance(base, Variable) and base.name == var:
        if not isinstance(exponent, Number):
            return _identity_fallback(node, var, steps, "Power with a non-constant exponent")
        if exponent.value == -1.0:
            steps.append(
                Step(
                    "Special case: ∫ {0}^(-1) d{0} = ln|{0}|".format(var),
                    "∫ {0}^(-1) d{0} = ln|{0}|".format(var),
                )
            )
            return UnaryFunc(UnaryFunction.LN, Variable(var))

        raised = exponent.value + 1
        steps.append(
            Step(
                "Power Rule: ∫ {0}^n d{0} = {0}^(n+1)/(n+1)".format(var),
                "∫ {0}^{1} d{0} = {0}^{2}/{2}".format(var, format_number(exponent.value), format_number(raised)),
            )
        )
        return div(power(Variable(var), raised), raised)

    if not node.depends_on(var):
        return _constant_rule(
            node, var, steps, "Constant Rule: ∫ c d{0} = c·{0} with c = {1}".format(var, node)
        )
    return _identity_fallback(node, var, steps, "Power of a composite base")


def _function_rule(node: UnaryFunc, var: str, steps: List[Step]) -> Node:
    arg = node.arg
    if isinstance(arg, Variable) and arg.name == var:
        if node.func is UnaryFunction.SIN:
            steps.append(
                Step(
                    "Trig Rule: ∫ sin({0}) d{0} = -cos({0})".format(var),
                    "∫ sin({0}) d{0} = -cos({0})".format(var),
                )
            )
            return mul(-1, UnaryFunc(UnaryFunction.COS, Variable(var)))
        if node.func is UnaryFunction.COS:
            steps.append(
                Step(
                    "Trig Rule: ∫ cos({0}) d{0} = sin({0})".format(var),
                    "∫ cos({0}) d{0} = sin({0})".format(var),
                )
            )
            return UnaryFunc(UnaryFunction.SIN, Variable(var))
        if node.func is UnaryFunction.EXP:
            steps.append(
                Step(
                    "Exponential Rule: ∫ exp({0}) d{0} = exp({0})".format(var),
                    "∫ exp({0}) d{0} = exp({0})".format(var),
                )
            )
            return UnaryFunc(UnaryFunction.EXP, Variable(var))
        return _identity_fallback(node, var, steps, "Integration of {}({})".format(node.func.value, var))

    if not arg.depends_on(var):
        return _constant_rule(
            node,
            var,
            steps,
            "Constant Rule: function of {} treated as constant".format(", ".join(sorted(arg.free_variables())) or "constants"),
        )
    return _identity_fallback(node, var, steps, "Function of a composite argument")


def double_integrate(
    root: Node,
    x_range: Tuple[float, float],
    y_range: Tuple[float, float],
    grid_size: int = DEFAULT_GRID_SIZE,
) -> DoubleIntegralResult:
    """Approximates ∫∫ f(x, y) dy dx over a rectangle with a midpoint Riemann sum.

    Both coordinates are bound at every sample point. Poles inside the domain
    propagate as inf/nan.

    Raises:
        ValueError: If `grid_size` is not positive.
        EvaluationError: If `root` uses variables other than x and y.
    """
    if grid_size <= 0:
        raise ValueError("grid_size must be positive")

    x_lower, x_upper = float(x_range[0]), float(x_range[1])
    y_lower, y_upper = float(y_range[0]), float(y_range[1])
    steps = [
        Step(
            "Double integration setup",
            "∫[{}, {}] ∫[{}, {}] {} dy dx".format(
                format_number(x_lower), format_number(x_upper), format_number(y_lower), format_number(y_upper), root
            ),
        )
    ]

    dx = (x_upper - x_lower) / grid_size
    dy = (y_upper - y_lower) / grid_size
    total = 0.0
    for i in range(grid_size):
        x = x_lower + (i + 0.5) * dx
        for j in range(grid_size):
            y = y_lower + (j + 0.5) * dy
            total += root.evaluate(x=x, y=y) * dx * dy

    steps.append(
        Step(
            "Numerical evaluation using midpoint Riemann sum ({0}x{0} grid)".format(grid_size),
            "Result ≈ {:.6f}".format(total),
        )
    )
    logger.debug("double_integrate input=%s grid=%d result=%s", root, grid_size, total)
    return DoubleIntegralResult(value=total, steps=steps, grid_size=grid_size)
