"""Stateless routing endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response

from ...config import settings
from ...models.domain import Coordinate
from ...schemas.routing import (
    CoordinateModel,
    MetricsRequest,
    NavigationRequest,
    NavigationResponse,
    OptimizeRequest,
    RouteMetricsModel,
    RouteResponse,
    StopModel,
)
from ...services.navigation import build_navigation_url
from ...services.outputs.routing_formatter import route_to_csv, route_to_json
from ...services.routing.metrics import compute_metrics, resolve_start_time
from ...services.routing.service import RouteOrchestrator
from ...services.workspace import EstimatorFactory, default_depot
from ..dependencies import get_estimator_factory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routes", tags=["routes"])


def _depot(model: CoordinateModel | None) -> Coordinate:
    return model.to_domain() if model is not None else default_depot()


@router.post("/optimize", response_model=RouteResponse, status_code=status.HTTP_200_OK)
async def optimize(
    payload: OptimizeRequest,
    estimator_factory: EstimatorFactory = Depends(get_estimator_factory),
) -> RouteResponse:
    try:
        depot = _depot(payload.depot)
        stops = [stop.to_domain() for stop in payload.stops]
        start_time = resolve_start_time(
            payload.start_time,
            use_system_time=payload.use_system_time,
            default=settings.default_start_time,
        )
        estimator = estimator_factory(payload.language or settings.default_language)
        orchestrator = RouteOrchestrator()
        if payload.preserve_order:
            result = await orchestrator.reorder(stops, start_time, estimator)
        else:
            result = await orchestrator.recompute(stops, depot, start_time, estimator)
        metrics = compute_metrics(depot, result.stops, start_time, km_per_degree=settings.km_per_degree)
        return RouteResponse(
            stops=[StopModel.from_domain(stop) for stop in result.stops],
            metrics=RouteMetricsModel.from_domain(metrics),
            summary=result.summary,
            annotated=result.annotated,
            start_time=start_time,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error optimizing route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to optimize route: {str(exc)}"
        ) from exc


@router.post("/metrics", response_model=RouteMetricsModel, status_code=status.HTTP_200_OK)
def metrics(payload: MetricsRequest) -> RouteMetricsModel:
    """Distance and duration for the stops in the order given."""
    start_time = payload.start_time or settings.default_start_time
    stops = [stop.to_domain() for stop in payload.stops]
    result = compute_metrics(_depot(payload.depot), stops, start_time, km_per_degree=settings.km_per_degree)
    return RouteMetricsModel.from_domain(result)


@router.post("/export", status_code=status.HTTP_200_OK)
def export_manifest(payload: MetricsRequest, format: str = "csv") -> Response:
    """Export the manifest for the stops in the order given as CSV or JSON."""
    depot = _depot(payload.depot)
    stops = [stop.to_domain() for stop in payload.stops]
    if format == "csv":
        content = route_to_csv(depot, stops, km_per_degree=settings.km_per_degree)
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="route_manifest.csv"'},
        )
    if format == "json":
        start_time = payload.start_time or settings.default_start_time
        result = compute_metrics(depot, stops, start_time, km_per_degree=settings.km_per_degree)
        return JSONResponse(route_to_json(depot, stops, result, km_per_degree=settings.km_per_degree))
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported export format '{format}'")


@router.post("/navigation", response_model=NavigationResponse, status_code=status.HTTP_200_OK)
def navigation(payload: NavigationRequest) -> NavigationResponse:
    stops = [stop.to_domain() for stop in payload.stops]
    url = build_navigation_url(_depot(payload.depot), stops, apple_maps=payload.apple_maps)
    return NavigationResponse(url=url)
