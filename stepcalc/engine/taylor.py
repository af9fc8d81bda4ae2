"""Taylor polynomials built from repeated symbolic differentiation."""

from __future__ import annotations

import math
from typing import List, Union

from stepcalc.expression.simplifier import simplify
from stepcalc.expression.tree import Node
from stepcalc.utils.logger import get_logger

from .differentiation import differentiate
from .steps import Selector, Step, TaylorResult

logger = get_logger("stepcalc.taylor")

_ZERO_TOLERANCE = 1e-10


def nth_derivative(root: Node, n: int, variable: Union[Selector, str] = Selector.X) -> Node:
    """Differentiates `n` times, simplifying after every pass to keep the tree small."""
    if n < 0:
        raise ValueError("derivative order must be non-negative")
    current = root.clone()
    for _ in range(n):
        current = simplify(differentiate(current, variable).tree)
    return current


def _derivative_label(n: int) -> str:
    if n == 0:
        return "f"
    if n <= 3:
        return "f" + "'" * n
    return "f^({})".format(n)


def _format_term(coefficient: float, n: int, center: float, var: str) -> str:
    if n == 0:
        return "{:.4f}".format(coefficient)

    if abs(center) < _ZERO_TOLERANCE:
        base = var
    elif center > 0:
        base = "({} - {:.4f})".format(var, center)
    else:
        base = "({} + {:.4f})".format(var, -center)
    if n > 1:
        base = "{}^{}".format(base, n)

    magnitude = abs(coefficient)
    if abs(magnitude - 1.0) < _ZERO_TOLERANCE:
        return base
    return "{:.4f}{}".format(magnitude, base)


def taylor_polynomial(
    root: Node,
    center: float,
    order: int,
    variable: Union[Selector, str] = Selector.X,
) -> TaylorResult:
    """Expands `root` around `center` up to `order`.

    Args:
        root: Single-variable expression tree.
        center: Expansion point `a`.
        order: Highest power kept; must be non-negative.
        variable: Expansion variable.

    Returns:
        TaylorResult with the rendered polynomial and its coefficients.

    Raises:
        ValueError: If `order` is negative.
        EvaluationError: If `root` depends on a variable other than the expansion variable.
    """
    if order < 0:
        raise ValueError("order must be non-negative")

    selector = Selector(variable)
    var = selector.value
    steps = [
        Step("=== Taylor Series Expansion ===", "Function: f({}) = {}".format(var, root)),
        Step("Expansion center", "a = {:.4f}, Order = {}".format(center, order)),
        Step("Taylor series formula", "f({0}) = Σ[n=0 to ∞] (f⁽ⁿ⁾(a)/n!) × ({0}-a)ⁿ".format(var)),
    ]

    coefficients: List[float] = []
    terms: List[str] = []
    complete = True
    derivative = root.clone()
    for n in range(order + 1):
        if n > 0:
            derivative = nth_derivative(derivative, 1, selector)
        value = derivative.evaluate(**{var: center})
        coefficient = value / math.factorial(n)
        coefficients.append(coefficient)

        steps.append(
            Step(
                "Term {0} (n={0})".format(n),
                "{}({:.4f}) = {:.4f}  [{} = {}]".format(_derivative_label(n), center, value, _derivative_label(n), derivative),
            )
        )
        steps.append(
            Step("", "Coefficient: {:.4f} / {}! = {:.4f}".format(value, n, coefficient))
        )
        if not math.isfinite(coefficient):
            complete = False
            steps.append(
                Step(
                    "Coefficient is not finite; term omitted",
                    "f is not analytic at a = {:.4f}, so P{}({}) is not a Taylor polynomial".format(center, order, var),
                )
            )
            continue
        if abs(coefficient) < _ZERO_TOLERANCE:
            continue
        term = _format_term(coefficient, n, center, var)
        if not terms:
            terms.append("-" + term if coefficient < 0 and n > 0 else term)
        else:
            terms.append(("- " if coefficient < 0 else "+ ") + term)

    polynomial = " ".join(terms) if terms else "0"
    text = "P{}({}) = {}".format(order, var, polynomial)
    steps.append(Step("--- Taylor Polynomial ---", text))

    logger.debug("taylor_polynomial input=%s center=%s order=%d complete=%s", root, center, order, complete)
    return TaylorResult(
        text=text,
        center=float(center),
        order=order,
        coefficients=coefficients,
        steps=steps,
        variable=selector,
        complete=complete,
    )
