"""Implicit differentiation of F(x, y) = 0 via the implicit function theorem."""

from __future__ import annotations

from stepcalc.expression.simplifier import simplify
from stepcalc.expression.tree import Node, Number, div, mul
from stepcalc.utils.logger import get_logger

from .differentiation import differentiate
from .steps import ImplicitResult, Selector, Step

logger = get_logger("stepcalc.implicit")


def compute_implicit_derivative(equation: Node) -> ImplicitResult:
    """Computes dy/dx = -(∂F/∂x) / (∂F/∂y) for the equation F(x, y) = 0.

    The result is only meaningful where ∂F/∂y is non-zero; no singularity check is
    made and evaluating at such a point yields inf or nan.

    Args:
        equation: Tree of F, with the equation implicitly set to zero.

    Returns:
        ImplicitResult holding the rendered `dy/dx = ...` text and the ratio tree.
    """
    steps = [
        Step("=== Given Implicit Equation ===", "F(x,y) = {} = 0".format(equation)),
        Step("--- Step 1: Compute ∂F/∂x (partial derivative with respect to x) ---", ""),
    ]

    dfdx = simplify(differentiate(equation, Selector.X).tree)
    steps.append(Step("Partial derivative:", "∂F/∂x = {}".format(dfdx)))
    steps.append(Step("--- Step 2: Compute ∂F/∂y (partial derivative with respect to y) ---", ""))

    dfdy = simplify(differentiate(equation, Selector.Y).tree)
    steps.append(Step("Partial derivative:", "∂F/∂y = {}".format(dfdy)))
    steps.append(Step("--- Step 3: Apply Implicit Differentiation Formula ---", "Formula: dy/dx = -(∂F/∂x) / (∂F/∂y)"))
    steps.append(Step("Substitute values:", "dy/dx = -({}) / ({})".format(dfdx, dfdy)))

    ratio = simplify(div(mul(Number(-1), dfdx.clone()), dfdy.clone()))
    text = "dy/dx = {}".format(ratio)
    steps.append(Step("=== Final Result (Simplified) ===", text))

    logger.debug("implicit_derivative equation=%s result=%s", equation, ratio)
    return ImplicitResult(text=text, steps=steps, dfdx=dfdx, dfdy=dfdy, tree=ratio)


def evaluate_implicit_derivative(equation: Node, x: float, y: float) -> float:
    """Evaluates dy/dx of F(x, y) = 0 at the point (x, y)."""
    return compute_implicit_derivative(equation).evaluate(x, y)
