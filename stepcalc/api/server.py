"""REST interface for the stepcalc engines."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from stepcalc import __version__
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
    vector_field_analysis,
)
from stepcalc.utils.config_loader import EngineConfig
from stepcalc.utils.logger import get_logger

logger = get_logger("stepcalc.api")


class DifferentiateRequest(BaseModel):
    expression: str = Field(description="Expression to differentiate, e.g. x^2 * sin(x)")
    variable: str = Field(default="x", pattern="^[xy]$", description="Differentiation variable")


class ImplicitRequest(BaseModel):
    equation: str = Field(description="Equation F(x,y) = G(x,y), or F(x,y) meaning F = 0")
    x: Optional[float] = Field(default=None, description="Optional x coordinate to evaluate dy/dx at")
    y: Optional[float] = Field(default=None, description="Optional y coordinate to evaluate dy/dx at")


class IntegrateRequest(BaseModel):
    expression: str = Field(description="Integrand")
    variable: str = Field(default="x", pattern="^[xy]$", description="Integration variable")


class DoubleIntegralRequest(BaseModel):
    expression: str = Field(description="Integrand f(x, y)")
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    grid_size: Optional[int] = Field(default=None, gt=0, description="Riemann grid size per axis")


class TaylorRequest(BaseModel):
    expression: str = Field(description="Function of x")
    center: float = Field(default=0.0, description="Expansion point")
    order: Optional[int] = Field(default=None, ge=0, description="Highest power kept")


class GradientRequest(BaseModel):
    expression: str = Field(description="Scalar field f(x, y)")
    x: float
    y: float


class VectorFieldRequest(BaseModel):
    p: str = Field(description="x component P(x, y) of the field")
    q: str = Field(description="y component Q(x, y) of the field")
    x: float
    y: float


class ParametricCurveRequest(BaseModel):
    x_t: str = Field(description="x(t), written in the parameter t")
    y_t: str = Field(description="y(t), written in the parameter t")
    t_start: float = Field(default=0.0, description="Start of the arc length interval")
    t_end: float = Field(default=1.0, description="End of the arc length interval")
    t: float = Field(default=0.0, description="Parameter value for tangent and curvature")
    samples: Optional[int] = Field(default=None, gt=0, description="Midpoint samples for arc length")


class ToolResponse(BaseModel):
    ok: bool
    result: Any = None
    method: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


def create_app(config: Optional[EngineConfig] = None) -> FastAPI:
    """Builds the FastAPI application.

    Args:
        config: Engine settings; defaults are used when omitted.

    Returns:
        Configured FastAPI app instance.
    """
    settings = config or EngineConfig()
    max_length = settings.security.max_expression_length
    app = FastAPI(title="stepcalc API", version=__version__)

    def _respond(result: Dict[str, Any]) -> Dict[str, Any]:
        if not result.get("ok"):
            raise HTTPException(status_code=422, detail=str(result.get("error", "Computation failed.")))
        logger.info("request_completed method=%s", result.get("method"))
        return result

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/differentiate", response_model=ToolResponse)
    def differentiate_route(payload: DifferentiateRequest) -> Dict[str, Any]:
        return _respond(differentiate_expression(payload.expression, payload.variable, max_length=max_length))

    @app.post("/implicit", response_model=ToolResponse)
    def implicit_route(payload: ImplicitRequest) -> Dict[str, Any]:
        return _respond(implicit_derivative(payload.equation, payload.x, payload.y, max_length=max_length))

    @app.post("/integrate", response_model=ToolResponse)
    def integrate_route(payload: IntegrateRequest) -> Dict[str, Any]:
        return _respond(integrate_expression(payload.expression, payload.variable, max_length=max_length))

    @app.post("/double-integral", response_model=ToolResponse)
    def double_integral_route(payload: DoubleIntegralRequest) -> Dict[str, Any]:
        grid_size = payload.grid_size or settings.integration.grid_size
        if grid_size > settings.integration.max_grid_size:
            raise HTTPException(
                status_code=422,
                detail="grid_size exceeds the limit of {}".format(settings.integration.max_grid_size),
            )
        return _respond(
            double_integral(
                payload.expression,
                payload.x_min,
                payload.x_max,
                payload.y_min,
                payload.y_max,
                grid_size=grid_size,
                max_length=max_length,
            )
        )

    @app.post("/taylor", response_model=ToolResponse)
    def taylor_route(payload: TaylorRequest) -> Dict[str, Any]:
        order = settings.taylor.default_order if payload.order is None else payload.order
        if order > settings.taylor.max_order:
            raise HTTPException(status_code=422, detail="order exceeds the limit of {}".format(settings.taylor.max_order))
        return _respond(taylor_expansion(payload.expression, payload.center, order, max_length=max_length))

    @app.post("/gradient", response_model=ToolResponse)
    def gradient_route(payload: GradientRequest) -> Dict[str, Any]:
        return _respond(gradient_at(payload.expression, payload.x, payload.y, max_length=max_length))

    @app.post("/divergence", response_model=ToolResponse)
    def divergence_route(payload: VectorFieldRequest) -> Dict[str, Any]:
        return _respond(divergence_at(payload.p, payload.q, payload.x, payload.y, max_length=max_length))

    @app.post("/curl", response_model=ToolResponse)
    def curl_route(payload: VectorFieldRequest) -> Dict[str, Any]:
        return _respond(curl_at(payload.p, payload.q, payload.x, payload.y, max_length=max_length))

    @app.post("/vector-field", response_model=ToolResponse)
    def vector_field_route(payload: VectorFieldRequest) -> Dict[str, Any]:
        return _respond(vector_field_analysis(payload.p, payload.q, payload.x, payload.y, max_length=max_length))

    @app.post("/parametric-curve", response_model=ToolResponse)
    def parametric_curve_route(payload: ParametricCurveRequest) -> Dict[str, Any]:
        samples = payload.samples or settings.integration.grid_size
        if samples > settings.integration.max_grid_size:
            raise HTTPException(
                status_code=422,
                detail="samples exceeds the limit of {}".format(settings.integration.max_grid_size),
            )
        return _respond(
            parametric_curve(
                payload.x_t,
                payload.y_t,
                payload.t_start,
                payload.t_end,
                payload.t,
                samples=samples,
                max_length=max_length,
            )
        )

    return app
