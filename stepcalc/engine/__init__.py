"""Step-annotated calculus engines over expression trees."""

from .differentiation import UNSUPPORTED_MARKER, differentiate
from .implicit import compute_implicit_derivative, evaluate_implicit_derivative
from .integration import NOT_INTEGRATED_MARKER, double_integrate, integrate
from .parametric_curve import analyze_curve, arc_length, curvature, tangent_vector
from .steps import (
    CurveResult,
    DerivativeResult,
    DoubleIntegralResult,
    FieldOperatorResult,
    GradientResult,
    ImplicitResult,
    IntegralResult,
    Selector,
    Step,
    TaylorResult,
    VectorFieldResult,
)
from .taylor import nth_derivative, taylor_polynomial
from .vector_field import analyze_vector_field, curl, divergence, gradient

__all__ = [
    "differentiate",
    "compute_implicit_derivative",
    "evaluate_implicit_derivative",
    "integrate",
    "double_integrate",
    "taylor_polynomial",
    "nth_derivative",
    "gradient",
    "divergence",
    "curl",
    "analyze_vector_field",
    "analyze_curve",
    "tangent_vector",
    "curvature",
    "arc_length",
    "Selector",
    "Step",
    "DerivativeResult",
    "IntegralResult",
    "DoubleIntegralResult",
    "ImplicitResult",
    "TaylorResult",
    "GradientResult",
    "FieldOperatorResult",
    "VectorFieldResult",
    "CurveResult",
    "UNSUPPORTED_MARKER",
    "NOT_INTEGRATED_MARKER",
]
