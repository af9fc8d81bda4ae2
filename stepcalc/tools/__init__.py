"""Atomic tool interfaces for calculus operations."""

from .calculator import (
    curl_at,
    differentiate_expression,
    divergence_at,
    double_integral,
    evaluate_expression,
    gradient_at,
    implicit_derivative,
    integrate_expression,
    parametric_curve,
    taylor_expansion,
    vector_field_analysis,
)
from .plotter import plot_with_derivative

__all__ = [
    "evaluate_expression",
    "differentiate_expression",
    "implicit_derivative",
    "integrate_expression",
    "double_integral",
    "taylor_expansion",
    "gradient_at",
    "divergence_at",
    "curl_at",
    "vector_field_analysis",
    "parametric_curve",
    "plot_with_derivative",
]
