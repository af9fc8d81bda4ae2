"""Differential operators on fields over the (x, y) plane.

`gradient` acts on a scalar field f(x, y); `divergence`, `curl` and
`analyze_vector_field` act on a vector field F = <P, Q>. Every symbolic result
is simplified and then evaluated with both coordinates bound.
"""

from __future__ import annotations

import math

from stepcalc.expression.simplifier import simplify
from stepcalc.expression.tree import Node, add, format_number, sub
from stepcalc.utils.logger import get_logger

from .differentiation import differentiate
from .steps import FieldOperatorResult, GradientResult, Selector, Step, VectorFieldResult

logger = get_logger("stepcalc.vector_field")

_ZERO_TOLERANCE = 1e-3


def _partial(root: Node, selector: Selector) -> Node:
    return simplify(differentiate(root, selector).tree)


def _field_text(p: Node, q: Node) -> str:
    return "F = <{}, {}>".format(p, q)


def _point_text(x: float, y: float) -> str:
    return "({}, {})".format(format_number(x), format_number(y))


def gradient(root: Node, x: float, y: float) -> GradientResult:
    """Computes ∇f = <∂f/∂x, ∂f/∂y> symbolically and evaluates it at (x, y).

    Both coordinates are bound when evaluating each component, so mixed terms
    such as `x*y` are evaluated correctly.
    """
    steps = [Step("--- Computing Gradient ---", "∇f = <∂f/∂x, ∂f/∂y>")]

    components = [_partial(root, selector) for selector in (Selector.X, Selector.Y)]
    steps.append(
        Step("Partial derivatives:", "∂f/∂x = {}\n∂f/∂y = {}".format(components[0], components[1]))
    )

    values = [component.evaluate(x=x, y=y) for component in components]
    steps.append(
        Step(
            "Gradient at point {}:".format(_point_text(x, y)),
            "∇f = <{:.3f}, {:.3f}>".format(values[0], values[1]),
        )
    )

    magnitude = math.hypot(values[0], values[1])
    steps.append(Step("Magnitude (rate of maximum increase):", "|∇f| = {:.3f}".format(magnitude)))
    logger.debug("gradient input=%s point=%s values=%s", root, _point_text(x, y), values)
    return GradientResult(components=components, values=values, magnitude=magnitude, steps=steps)


def divergence(p: Node, q: Node, x: float, y: float) -> FieldOperatorResult:
    """Computes div F = ∂P/∂x + ∂Q/∂y and evaluates it at (x, y)."""
    steps = [
        Step("--- Computing Divergence ---", "div F = ∇·F = ∂P/∂x + ∂Q/∂y"),
        Step("Vector field:", _field_text(p, q)),
    ]

    dp_dx = _partial(p, Selector.X)
    dq_dy = _partial(q, Selector.Y)
    steps.append(Step("Partial derivatives:", "∂P/∂x = {}\n∂Q/∂y = {}".format(dp_dx, dq_dy)))

    tree = simplify(add(dp_dx, dq_dy))
    steps.append(Step("Divergence (symbolic):", "div F = {}".format(tree)))

    value = tree.evaluate(x=x, y=y)
    steps.append(Step("Divergence at point {}:".format(_point_text(x, y)), "div F = {:.3f}".format(value)))
    if abs(value) < _ZERO_TOLERANCE:
        reading = "div F ≈ 0: Incompressible field (fluid neither expands nor contracts)"
    elif value > 0:
        reading = "div F > 0: Source (fluid expands, flows outward)"
    else:
        reading = "div F < 0: Sink (fluid contracts, flows inward)"
    steps.append(Step("Interpretation:", reading))

    logger.debug("divergence field=%s point=%s value=%s", _field_text(p, q), _point_text(x, y), value)
    return FieldOperatorResult(tree=tree, value=value, steps=steps)


def curl(p: Node, q: Node, x: float, y: float) -> FieldOperatorResult:
    """Computes the scalar curl ∂Q/∂x - ∂P/∂y (the z component of ∇×F) at (x, y)."""
    steps = [
        Step("--- Computing Curl ---", "curl F = ∇×F = ∂Q/∂x - ∂P/∂y"),
        Step("Vector field:", _field_text(p, q)),
    ]

    dq_dx = _partial(q, Selector.X)
    dp_dy = _partial(p, Selector.Y)
    steps.append(Step("Partial derivatives:", "∂Q/∂x = {}\n∂P/∂y = {}".format(dq_dx, dp_dy)))

    tree = simplify(sub(dq_dx, dp_dy))
    steps.append(Step("Curl (symbolic):", "curl F = {}".format(tree)))

    value = tree.evaluate(x=x, y=y)
    steps.append(Step("Curl at point {}:".format(_point_text(x, y)), "curl F = {:.3f}".format(value)))
    if abs(value) < _ZERO_TOLERANCE:
        reading = "curl F ≈ 0: Irrotational field (conservative, no rotation)"
    else:
        reading = "curl F ≠ 0: Rotational field (indicates circulation/vorticity)"
    steps.append(Step("Interpretation:", reading))

    logger.debug("curl field=%s point=%s value=%s", _field_text(p, q), _point_text(x, y), value)
    return FieldOperatorResult(tree=tree, value=value, steps=steps)


def analyze_vector_field(p: Node, q: Node, x: float, y: float) -> VectorFieldResult:
    """Divergence and curl of F = <P, Q> at one point, with a combined trace."""
    div_result = divergence(p, q, x, y)
    curl_result = curl(p, q, x, y)

    steps = [
        Step("=== Vector Field Analysis ===", _field_text(p, q)),
        Step("Analysis point:", _point_text(x, y)),
    ]
    steps.extend(div_result.steps)
    steps.extend(curl_result.steps)
    steps.append(Step("=== Summary ===", "div F = {:.3f}, curl F = {:.3f}".format(div_result.value, curl_result.value)))
    return VectorFieldResult(divergence=div_result, curl=curl_result, steps=steps)
