"""Plot a function next to its symbolic derivative."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict

import matplotlib.pyplot as plt

from stepcalc.engine import differentiate
from stepcalc.expression import parse_expression, simplify


def plot_with_derivative(
    expression: str,
    output_path: str,
    x_min: float = -10.0,
    x_max: float = 10.0,
    points: int = 400,
) -> Dict[str, Any]:
    """Saves a PNG with f(x) and f'(x); poles show up as gaps in the curves."""
    try:
        if points < 2:
            raise ValueError("points must be at least 2")
        tree = parse_expression(expression)
        derivative = simplify(differentiate(tree, "x").tree)

        xs = [x_min + (x_max - x_min) * i / float(points - 1) for i in range(points)]
        ys = [_finite_or_nan(tree.evaluate(x=x)) for x in xs]
        dys = [_finite_or_nan(derivative.evaluate(x=x)) for x in xs]

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        fig, ax = plt.subplots(figsize=(8, 4.5))
        ax.plot(xs, ys, linewidth=2.0, label="f(x) = {}".format(tree))
        ax.plot(xs, dys, linewidth=1.5, linestyle="--", label="f'(x) = {}".format(derivative))
        ax.set_xlabel("x")
        ax.grid(True, alpha=0.3)
        ax.legend(loc="best")
        fig.tight_layout()
        fig.savefig(output, dpi=150)
        plt.close(fig)

        return {
            "ok": True,
            "result": str(output),
            "method": "matplotlib",
            "metadata": {"points": points, "derivative": str(derivative)},
        }
    except Exception as exc:
        return {"ok": False, "error": str(exc), "method": "plot_with_derivative", "metadata": {}}


def _finite_or_nan(value: float) -> float:
    return value if math.isfinite(value) else math.nan
