"""Calculus toolset: text in, result dictionaries with step traces out."""

from __future__ import annotations

from typing import Any, Dict, Optional

from stepcalc.engine import (
    analyze_curve,
    analyze_vector_field,
    compute_implicit_derivative,
    curl,
    differentiate,
    divergence,
    double_integrate,
    gradient,
    integrate,
    taylor_polynomial,
)
from stepcalc.engine.steps import steps_as_dicts
from stepcalc.expression import parse_equation, parse_expression, simplify
from stepcalc.expression.parser import DEFAULT_MAX_LENGTH
from stepcalc.utils.logger import get_logger

logger = get_logger("stepcalc.tools")


def _ok(result: Any, method: str, **metadata: Any) -> Dict[str, Any]:
    return {"ok": True, "result": result, "method": method, "metadata": metadata}


def _error(message: str, method: str, **metadata: Any) -> Dict[str, Any]:
    logger.info("tool_failed method=%s error=%s", method, message)
    return {"ok": False, "error": message, "method": method, "metadata": metadata}


def evaluate_expression(
    expression: str,
    variables: Optional[Dict[str, float]] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        value = tree.evaluate(**{k: float(v) for k, v in (variables or {}).items()})
        return _ok(value, "evaluate_expression", expression=expression)
    except Exception as exc:
        return _error(str(exc), "evaluate_expression", expression=expression)


def differentiate_expression(expression: str, variable: str = "x", max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        derivative = differentiate(tree, variable)
        return _ok(
            derivative.text,
            "differentiate_expression",
            expression=expression,
            variable=derivative.variable.value,
            simplified=str(simplify(derivative.tree)),
            steps=steps_as_dicts(derivative.narrative()),
        )
    except Exception as exc:
        return _error(str(exc), "differentiate_expression", expression=expression, variable=variable)


def implicit_derivative(
    equation: str,
    x: Optional[float] = None,
    y: Optional[float] = None,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Dict[str, Any]:
    try:
        tree = parse_equation(equation, max_length=max_length)
        result = compute_implicit_derivative(tree)
        metadata: Dict[str, Any] = {
            "expression": equation,
            "dfdx": str(result.dfdx),
            "dfdy": str(result.dfdy),
            "steps": steps_as_dicts(result.steps),
        }
        if x is not None and y is not None:
            metadata["value"] = result.evaluate(float(x), float(y))
            metadata["point"] = [float(x), float(y)]
        return _ok(result.text, "implicit_derivative", **metadata)
    except Exception as exc:
        return _error(str(exc), "implicit_derivative", expression=equation)


def integrate_expression(expression: str, variable: str = "x", max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        integral = integrate(tree, variable)
        return _ok(
            integral.text,
            "integrate_expression",
            expression=expression,
            variable=integral.variable.value,
            complete=integral.complete,
            steps=steps_as_dicts(integral.narrative()),
        )
    except Exception as exc:
        return _error(str(exc), "integrate_expression", expression=expression, variable=variable)


def double_integral(
    expression: str,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
    grid_size: int = 100,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        result = double_integrate(tree, (x_min, x_max), (y_min, y_max), grid_size=int(grid_size))
        return _ok(
            result.value,
            "double_integral",
            expression=expression,
            grid_size=result.grid_size,
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "double_integral", expression=expression)


def taylor_expansion(
    expression: str,
    center: float = 0.0,
    order: int = 4,
    variable: str = "x",
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        result = taylor_polynomial(tree, float(center), int(order), variable)
        return _ok(
            result.text,
            "taylor_expansion",
            expression=expression,
            center=result.center,
            order=result.order,
            coefficients=result.coefficients,
            complete=result.complete,
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "taylor_expansion", expression=expression)


def gradient_at(expression: str, x: float, y: float, max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    try:
        tree = parse_expression(expression, max_length=max_length)
        result = gradient(tree, float(x), float(y))
        return _ok(
            result.values,
            "gradient_at",
            expression=expression,
            components=[str(component) for component in result.components],
            magnitude=result.magnitude,
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "gradient_at", expression=expression)


def _parse_field(p: str, q: str, max_length: int):
    return parse_expression(p, max_length=max_length), parse_expression(q, max_length=max_length)


def divergence_at(p: str, q: str, x: float, y: float, max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    field = "<{}, {}>".format(p, q)
    try:
        p_tree, q_tree = _parse_field(p, q, max_length)
        result = divergence(p_tree, q_tree, float(x), float(y))
        return _ok(
            result.value,
            "divergence_at",
            expression=field,
            divergence=str(result.tree),
            point=[float(x), float(y)],
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "divergence_at", expression=field)


def curl_at(p: str, q: str, x: float, y: float, max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    field = "<{}, {}>".format(p, q)
    try:
        p_tree, q_tree = _parse_field(p, q, max_length)
        result = curl(p_tree, q_tree, float(x), float(y))
        return _ok(
            result.value,
            "curl_at",
            expression=field,
            curl=str(result.tree),
            point=[float(x), float(y)],
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "curl_at", expression=field)


def vector_field_analysis(p: str, q: str, x: float, y: float, max_length: int = DEFAULT_MAX_LENGTH) -> Dict[str, Any]:
    field = "<{}, {}>".format(p, q)
    try:
        p_tree, q_tree = _parse_field(p, q, max_length)
        result = analyze_vector_field(p_tree, q_tree, float(x), float(y))
        return _ok(
            {"divergence": result.divergence.value, "curl": result.curl.value},
            "vector_field_analysis",
            expression=field,
            divergence=str(result.divergence.tree),
            curl=str(result.curl.tree),
            point=[float(x), float(y)],
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "vector_field_analysis", expression=field)


def parametric_curve(
    x_t: str,
    y_t: str,
    t_start: float,
    t_end: float,
    t: float,
    samples: int = 100,
    max_length: int = DEFAULT_MAX_LENGTH,
) -> Dict[str, Any]:
    curve = "r(t) = ({}, {})".format(x_t, y_t)
    try:
        x_tree = parse_expression(x_t, max_length=max_length)
        y_tree = parse_expression(y_t, max_length=max_length)
        result = analyze_curve(x_tree, y_tree, float(t_start), float(t_end), float(t), samples=int(samples))
        return _ok(
            {"curvature": result.curvature, "arc_length": result.arc_length},
            "parametric_curve",
            expression=curve,
            derivatives=[str(derivative) for derivative in result.derivatives],
            position=list(result.position),
            velocity=list(result.velocity),
            speed=result.speed,
            unit_tangent=list(result.unit_tangent) if result.unit_tangent is not None else None,
            acceleration=list(result.acceleration),
            radius=result.radius,
            samples=int(samples),
            steps=steps_as_dicts(result.steps),
        )
    except Exception as exc:
        return _error(str(exc), "parametric_curve", expression=curve)
