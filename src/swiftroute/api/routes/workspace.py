"""Dispatcher workspace endpoints.

Every mutation of the stop list or depot triggers a recompute through the
shared orchestrator; the response reflects whatever result is current once
that recompute settles.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse, Response

from ...config import settings
from ...models.domain import Priority
from ...schemas.routing import CoordinateModel, RouteMetricsModel, StopModel
from ...schemas.workspace import (
    AddStopRequest,
    DepotUpdate,
    PreferencesUpdate,
    ReorderRequest,
    WorkspaceResponse,
)
from ...services.outputs.routing_formatter import route_to_csv, route_to_json
from ...services.resolution.address_parser import AddressResolutionError
from ...services.workspace import DispatchWorkspace
from ..dependencies import get_workspace

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspace", tags=["workspace"])


def workspace_response(workspace: DispatchWorkspace) -> WorkspaceResponse:
    view = workspace.view()
    return WorkspaceResponse(
        stops=[StopModel.from_domain(stop) for stop in view.stops],
        metrics=RouteMetricsModel.from_domain(view.metrics),
        summary=view.summary,
        depot=CoordinateModel.from_domain(view.depot),
        start_time=view.start_time,
        language=view.language,
        use_system_time=view.use_system_time,
        in_progress=view.in_progress,
        last_updated=view.last_updated,
    )


@router.get("", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def get_state(workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    return workspace_response(workspace)


@router.post("/stops", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
async def add_stop(
    payload: AddStopRequest,
    workspace: DispatchWorkspace = Depends(get_workspace),
) -> WorkspaceResponse:
    """Resolve free text into a stop, add it and re-sequence the route."""
    try:
        await workspace.add_stop(payload.input, payload.priority)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except AddressResolutionError as exc:
        logger.warning(f"Address resolution failed: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return workspace_response(workspace)


@router.post(
    "/stops/from-customer/{customer_id}",
    response_model=WorkspaceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_customer_stop(
    customer_id: str,
    priority: Priority = Priority.MEDIUM,
    workspace: DispatchWorkspace = Depends(get_workspace),
) -> WorkspaceResponse:
    try:
        await workspace.add_customer_stop(customer_id, priority)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Customer {customer_id} not found",
        ) from exc
    return workspace_response(workspace)


@router.delete("/stops/{stop_id}", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def remove_stop(stop_id: str, workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    try:
        await workspace.remove_stop(stop_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Stop {stop_id} not found") from exc
    return workspace_response(workspace)


@router.put("/depot", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def set_depot(payload: DepotUpdate, workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    await workspace.set_depot(payload.depot.to_domain())
    return workspace_response(workspace)


@router.post("/reorder", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def reorder(payload: ReorderRequest, workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    """Apply a manual stop order and refresh ETAs without re-sequencing."""
    try:
        await workspace.reorder(payload.stop_ids)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return workspace_response(workspace)


@router.post("/recompute", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def recompute(workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    await workspace.recompute()
    return workspace_response(workspace)


@router.put("/preferences", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def update_preferences(
    payload: PreferencesUpdate,
    workspace: DispatchWorkspace = Depends(get_workspace),
) -> WorkspaceResponse:
    workspace.set_preferences(language=payload.language, use_system_time=payload.use_system_time)
    return workspace_response(workspace)


@router.get("/export", status_code=status.HTTP_200_OK)
async def export_workspace(format: str = "csv", workspace: DispatchWorkspace = Depends(get_workspace)) -> Response:
    """Download the current manifest, including the estimator summary in JSON exports."""
    view = workspace.view()
    if format == "csv":
        return Response(
            content=route_to_csv(view.depot, view.stops, km_per_degree=settings.km_per_degree),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="route_manifest.csv"'},
        )
    if format == "json":
        return JSONResponse(
            route_to_json(
                view.depot,
                view.stops,
                view.metrics,
                summary=view.summary,
                km_per_degree=settings.km_per_degree,
            )
        )
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unsupported export format '{format}'")
