"""Plane curves r(t) = (x(t), y(t)): tangent, curvature and arc length.

Components are written in the parameter `t`. Derivatives are taken by the
differentiation engine with `t` mapped onto the x selector, then mapped back for
display.
"""

from __future__ import annotations

import math
from typing import List, Tuple

from stepcalc.expression.simplifier import simplify
from stepcalc.expression.tree import Node, format_number, rename_variable
from stepcalc.utils.logger import get_logger

from .differentiation import differentiate
from .steps import CurveResult, Selector, Step

logger = get_logger("stepcalc.parametric_curve")

PARAMETER = "t"
DEFAULT_SAMPLES = 100
_SINGULAR_TOLERANCE = 1e-10


def _check_component(component: Node) -> None:
    extra = component.free_variables() - {PARAMETER}
    if extra:
        raise ValueError(
            "Curve components may only use '{}'; found {}".format(PARAMETER, ", ".join(sorted(extra)))
        )


def _d_dt(component: Node) -> Node:
    as_x = rename_variable(component, PARAMETER, Selector.X.value)
    derivative = simplify(differentiate(as_x, Selector.X).tree)
    return rename_variable(derivative, Selector.X.value, PARAMETER)


def _at(component: Node, t: float) -> float:
    return component.evaluate(**{PARAMETER: t})


def _derivatives(x_t: Node, y_t: Node) -> List[Node]:
    _check_component(x_t)
    _check_component(y_t)
    return [_d_dt(x_t), _d_dt(y_t)]


def _curvature_from(velocity: Tuple[float, float], acceleration: Tuple[float, float]) -> Tuple[float, float, float]:
    numerator = abs(velocity[0] * acceleration[1] - velocity[1] * acceleration[0])
    denominator = math.hypot(*velocity) ** 3
    value = numerator / denominator if denominator > _SINGULAR_TOLERANCE else 0.0
    return numerator, denominator, value


def _arc_length(dx_dt: Node, dy_dt: Node, t_start: float, t_end: float, samples: int) -> float:
    if samples <= 0:
        raise ValueError("samples must be positive")
    dt = (t_end - t_start) / samples
    total = 0.0
    for i in range(samples):
        t = t_start + (i + 0.5) * dt
        total += math.hypot(_at(dx_dt, t), _at(dy_dt, t)) * dt
    return total


def tangent_vector(x_t: Node, y_t: Node, t: float) -> Tuple[float, float]:
    """Velocity r'(t), the (unnormalised) tangent vector."""
    dx_dt, dy_dt = _derivatives(x_t, y_t)
    return _at(dx_dt, t), _at(dy_dt, t)


def curvature(x_t: Node, y_t: Node, t: float) -> float:
    """k = |x'y'' - y'x''| / ||r'||^3; 0 where the speed vanishes."""
    dx_dt, dy_dt = _derivatives(x_t, y_t)
    velocity = (_at(dx_dt, t), _at(dy_dt, t))
    acceleration = (_at(_d_dt(dx_dt), t), _at(_d_dt(dy_dt), t))
    return _curvature_from(velocity, acceleration)[2]


def arc_length(x_t: Node, y_t: Node, t_start: float, t_end: float, samples: int = DEFAULT_SAMPLES) -> float:
    """Midpoint-rule approximation of ∫ ||r'(t)|| dt over [t_start, t_end].

    Raises:
        ValueError: If `samples` is not positive or a component uses a name other than `t`.
    """
    dx_dt, dy_dt = _derivatives(x_t, y_t)
    return _arc_length(dx_dt, dy_dt, t_start, t_end, samples)


def analyze_curve(
    x_t: Node,
    y_t: Node,
    t_start: float,
    t_end: float,
    t_eval: float,
    samples: int = DEFAULT_SAMPLES,
) -> CurveResult:
    """Position, velocity, unit tangent, curvature at `t_eval` and arc length over the interval."""
    dx_dt, dy_dt = _derivatives(x_t, y_t)
    at = format_number(t_eval)
    steps = [
        Step("=== Parametric Curve Analysis ===", "x(t) = {}, y(t) = {}".format(x_t, y_t)),
        Step("Parameter interval", "t ∈ [{}, {}]".format(format_number(t_start), format_number(t_end))),
        Step("--- Step 1: Position at t = {} ---".format(at), ""),
    ]

    position = (_at(x_t, t_eval), _at(y_t, t_eval))
    steps.append(Step("Position vector", "r({}) = ({:.3f}, {:.3f})".format(at, *position)))

    steps.append(Step("--- Step 2: Velocity/Tangent Vector ---", ""))
    steps.append(Step("Derivatives", "dx/dt = {}, dy/dt = {}".format(dx_dt, dy_dt)))
    velocity = (_at(dx_dt, t_eval), _at(dy_dt, t_eval))
    steps.append(Step("Velocity at t = {}".format(at), "v({}) = ({:.3f}, {:.3f})".format(at, *velocity)))
    speed = math.hypot(*velocity)
    steps.append(Step("Speed (magnitude of velocity)", "||v|| = {:.3f}".format(speed)))

    steps.append(Step("--- Step 3: Unit Tangent Vector ---", ""))
    unit_tangent = None
    if speed > _SINGULAR_TOLERANCE:
        unit_tangent = (velocity[0] / speed, velocity[1] / speed)
        steps.append(Step("Unit tangent T(t)", "T({}) = v/||v|| = ({:.3f}, {:.3f})".format(at, *unit_tangent)))
    else:
        steps.append(Step("Singular point (velocity = 0)", "Unit tangent undefined at this point"))

    steps.append(Step("--- Step 4: Curvature ---", ""))
    acceleration = (_at(_d_dt(dx_dt), t_eval), _at(_d_dt(dy_dt), t_eval))
    steps.append(Step("Acceleration", "a({}) = ({:.3f}, {:.3f})".format(at, *acceleration)))
    numerator, denominator, kappa = _curvature_from(velocity, acceleration)
    steps.append(
        Step(
            "Curvature formula: k = |x'y'' - y'x''| / ||v||^3",
            "k({}) = {:.4f} / {:.4f} = {:.4f}".format(at, numerator, denominator, kappa),
        )
    )
    radius = None
    if kappa > _SINGULAR_TOLERANCE:
        radius = 1.0 / kappa
        steps.append(Step("Radius of curvature", "R = 1/k = {:.3f}".format(radius)))

    steps.append(Step("--- Step 5: Arc Length ---", ""))
    length = _arc_length(dx_dt, dy_dt, t_start, t_end, samples)
    steps.append(
        Step(
            "Arc length from t = {} to t = {}".format(format_number(t_start), format_number(t_end)),
            "L = ∫ sqrt((dx/dt)^2 + (dy/dt)^2) dt ≈ {:.4f}".format(length),
        )
    )

    logger.debug("analyze_curve x=%s y=%s t=%s curvature=%s length=%s", x_t, y_t, t_eval, kappa, length)
    return CurveResult(
        derivatives=[dx_dt, dy_dt],
        position=position,
        velocity=velocity,
        speed=speed,
        unit_tangent=unit_tangent,
        acceleration=acceleration,
        curvature=kappa,
        radius=radius,
        arc_length=length,
        steps=steps,
    )
