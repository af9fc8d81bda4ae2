"""Step-trace and result contracts shared by the calculus engines."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from stepcalc.expression.tree import Node


class Selector(str, Enum):
    """Variable a pass differentiates or integrates with respect to."""

    X = "x"
    Y = "y"


@dataclass(frozen=True)
class Step:
    description: str
    expression: str

    def as_dict(self) -> Dict[str, str]:
        return {"description": self.description, "expression": self.expression}


def steps_as_dicts(steps: List[Step]) -> List[Dict[str, str]]:
    return [step.as_dict() for step in steps]


@dataclass
class DerivativeResult:
    """Derivative tree plus the rule steps that produced it, in firing order."""

    tree: Node
    steps: List[Step]
    variable: Selector
    source: Optional[Node] = None

    @property
    def text(self) -> str:
        return str(self.tree)

    def narrative(self) -> List[Step]:
        """Rule steps framed by the initial expression and the final result."""
        var = self.variable.value
        framed = [Step("Initial expression", "∂/∂{}({})".format(var, self.source))] if self.source is not None else []
        framed.extend(self.steps)
        framed.append(Step("Final partial derivative", "∂f/∂{} = {}".format(var, self.tree)))
        return framed


@dataclass
class IntegralResult:
    """Antiderivative tree (without +C) plus the rule steps that produced it."""

    tree: Node
    steps: List[Step]
    variable: Selector
    source: Optional[Node] = None
    complete: bool = True

    @property
    def text(self) -> str:
        return "{} + C".format(self.tree)

    def narrative(self) -> List[Step]:
        var = self.variable.value
        framed = [Step("Initial expression", "∫ {} d{}".format(self.source, var))] if self.source is not None else []
        framed.extend(self.steps)
        framed.append(Step("Final integral (+ C for indefinite)", "∫ f d{} = {} + C".format(var, self.tree)))
        return framed


@dataclass
class DoubleIntegralResult:
    value: float
    steps: List[Step]
    grid_size: int


@dataclass
class ImplicitResult:
    """Outcome of implicit differentiation of F(x, y) = 0."""

    text: str
    steps: List[Step]
    dfdx: Node
    dfdy: Node
    tree: Node

    def evaluate(self, x: float, y: float) -> float:
        return self.tree.evaluate(x=x, y=y)


@dataclass
class TaylorResult:
    text: str
    center: float
    order: int
    coefficients: List[float]
    steps: List[Step]
    variable: Selector = Selector.X
    complete: bool = True

    def evaluate(self, at: float) -> float:
        return sum(c * (at - self.center) ** n for n, c in enumerate(self.coefficients) if math.isfinite(c))


@dataclass
class GradientResult:
    components: List[Node]
    values: List[float]
    magnitude: float
    steps: List[Step] = field(default_factory=list)


@dataclass
class FieldOperatorResult:
    """Scalar outcome of divergence or curl of F = <P, Q> at one point."""

    tree: Node
    value: float
    steps: List[Step] = field(default_factory=list)


@dataclass
class VectorFieldResult:
    divergence: FieldOperatorResult
    curl: FieldOperatorResult
    steps: List[Step] = field(default_factory=list)


@dataclass
class CurveResult:
    """Local and global quantities of the plane curve r(t) = (x(t), y(t))."""

    derivatives: List[Node]
    position: Tuple[float, float]
    velocity: Tuple[float, float]
    speed: float
    unit_tangent: Optional[Tuple[float, float]]
    acceleration: Tuple[float, float]
    curvature: float
    radius: Optional[float]
    arc_length: float
    steps: List[Step] = field(default_factory=list)
