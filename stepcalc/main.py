"""CLI/API entrypoint for stepcalc."""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, Optional

from stepcalc.tools.calculator import (
    curl_at,
    differentiate_expression,
    divergence_at,
    double_integral,
    gradient_at,
    implicit_derivative,
    integrate_expression,
    parametric_curve,
    taylor_expansion,
)
from stepcalc.utils.config_loader import DEFAULT_CONFIG_PATH, ConfigError, EngineConfig, load_engine_config
from stepcalc.utils.exporters import export_latex, export_notebook
from stepcalc.utils.logger import configure_logging, get_logger

logger = get_logger("stepcalc.main")

OPERATIONS = ("differentiate", "implicit", "integrate", "double", "taylor", "gradient", "divergence", "curl", "curve")
FIELD_OPERATIONS = ("divergence", "curl")


def build_parser() -> argparse.ArgumentParser:
    """Builds CLI argument parser for app entrypoints.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(description="stepcalc: step-annotated calculus")
    parser.add_argument("--mode", choices=["cli", "api"], default="cli")
    parser.add_argument("--operation", choices=OPERATIONS, default="differentiate")
    parser.add_argument("--expression", type=str, default="", help="Expression or implicit equation")
    parser.add_argument("--variable", choices=["x", "y"], default="x")
    parser.add_argument("--x", type=float, default=None, help="x coordinate (implicit, gradient, divergence, curl)")
    parser.add_argument("--y", type=float, default=None, help="y coordinate (implicit, gradient, divergence, curl)")
    parser.add_argument("--x-range", type=float, nargs=2, default=[0.0, 1.0], metavar=("MIN", "MAX"))
    parser.add_argument("--y-range", type=float, nargs=2, default=[0.0, 1.0], metavar=("MIN", "MAX"))
    parser.add_argument("--grid-size", type=int, default=None)
    parser.add_argument("--center", type=float, default=0.0, help="Taylor expansion point")
    parser.add_argument("--order", type=int, default=None, help="Taylor polynomial order")
    parser.add_argument("--field", type=str, nargs=2, default=None, metavar=("P", "Q"), help="Vector field components")
    parser.add_argument("--curve", type=str, nargs=2, default=None, metavar=("X_T", "Y_T"), help="Curve components in t")
    parser.add_argument("--t-range", type=float, nargs=2, default=[0.0, 1.0], metavar=("MIN", "MAX"))
    parser.add_argument("--t", type=float, default=0.0, help="Parameter value for tangent and curvature")
    parser.add_argument("--samples", type=int, default=100, help="Midpoint samples for arc length")
    parser.add_argument("--config", type=str, default=None, help="Path to engine YAML config")
    parser.add_argument("--export-latex", type=str, default=None, help="Write the step trace as LaTeX")
    parser.add_argument("--export-notebook", type=str, default=None, help="Write the step trace as a notebook")
    parser.add_argument("--host", type=str, default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--log-level", type=str, default=None)
    return parser


def load_config(path: Optional[str]) -> EngineConfig:
    """Loads the YAML config; the default path is optional, an explicit one is not."""
    if path:
        return load_engine_config(path)
    try:
        return load_engine_config(DEFAULT_CONFIG_PATH)
    except ConfigError:
        logger.debug("config_defaults path=%s", DEFAULT_CONFIG_PATH)
        return EngineConfig()


def run_operation(args: argparse.Namespace, config: EngineConfig) -> Dict[str, Any]:
    """Dispatches one CLI request to the tool layer.

    Raises:
        ValueError: If required arguments for the operation are missing.
    """
    max_length = config.security.max_expression_length

    if args.operation in FIELD_OPERATIONS:
        if not args.field:
            raise ValueError("--field P Q is required for the {} operation".format(args.operation))
        if args.x is None or args.y is None:
            raise ValueError("--x and --y are required for the {} operation".format(args.operation))
        tool = divergence_at if args.operation == "divergence" else curl_at
        return tool(args.field[0], args.field[1], args.x, args.y, max_length=max_length)
    if args.operation == "curve":
        if not args.curve:
            raise ValueError("--curve X_T Y_T is required for the curve operation")
        return parametric_curve(
            args.curve[0],
            args.curve[1],
            args.t_range[0],
            args.t_range[1],
            args.t,
            samples=args.samples,
            max_length=max_length,
        )

    if not args.expression:
        raise ValueError("--expression is required for the {} operation".format(args.operation))
    if args.operation == "differentiate":
        return differentiate_expression(args.expression, args.variable, max_length=max_length)
    if args.operation == "implicit":
        return implicit_derivative(args.expression, args.x, args.y, max_length=max_length)
    if args.operation == "integrate":
        return integrate_expression(args.expression, args.variable, max_length=max_length)
    if args.operation == "double":
        return double_integral(
            args.expression,
            args.x_range[0],
            args.x_range[1],
            args.y_range[0],
            args.y_range[1],
            grid_size=args.grid_size or config.integration.grid_size,
            max_length=max_length,
        )
    if args.operation == "taylor":
        order = config.taylor.default_order if args.order is None else args.order
        return taylor_expansion(args.expression, args.center, order, max_length=max_length)
    if args.x is None or args.y is None:
        raise ValueError("--x and --y are required for the gradient operation")
    return gradient_at(args.expression, args.x, args.y, max_length=max_length)


def run_cli(args: argparse.Namespace, config: EngineConfig) -> int:
    """Executes one computation and prints it as JSON.

    Returns:
        Process exit code: 0 on success, 1 when the computation failed.
    """
    result = run_operation(args, config)
    print(json.dumps(result, ensure_ascii=False, indent=2))

    if args.export_latex:
        export_latex(result, args.export_latex)
    if args.export_notebook:
        export_notebook(result, args.export_notebook)
    return 0 if result.get("ok") else 1


def run_api(host: str, port: int, config: EngineConfig) -> int:
    """Runs FastAPI server using Uvicorn.

    Returns:
        Process exit code.
    """
    import uvicorn

    from stepcalc.api import create_app

    uvicorn.run(create_app(config), host=host, port=port)
    return 0


def main(argv: Optional[list] = None) -> int:
    """Application entrypoint for CLI and API modes.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    configure_logging(args.log_level or config.log_level)

    if args.mode == "api":
        return run_api(args.host or config.api.host, args.port or config.api.port, config)
    try:
        return run_cli(args, config)
    except ValueError as exc:
        parser.error(str(exc))
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
