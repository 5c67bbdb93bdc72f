"""Saved routes and customer directory endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.workspace import (
    CustomerCreate,
    CustomerModel,
    SavedRouteModel,
    SaveRouteRequest,
    WorkspaceResponse,
)
from ...services.workspace import DispatchWorkspace
from ..dependencies import get_workspace
from .workspace import workspace_response

router = APIRouter(tags=["saved"])


@router.get("/saved-routes", response_model=List[SavedRouteModel], status_code=status.HTTP_200_OK)
async def list_saved_routes(workspace: DispatchWorkspace = Depends(get_workspace)) -> List[SavedRouteModel]:
    return [SavedRouteModel.from_domain(route) for route in workspace.saved_routes()]


@router.post("/saved-routes", response_model=SavedRouteModel, status_code=status.HTTP_201_CREATED)
async def save_route(payload: SaveRouteRequest, workspace: DispatchWorkspace = Depends(get_workspace)) -> SavedRouteModel:
    """Save the current workspace sequence under a name."""
    try:
        route = workspace.save_current_route(payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return SavedRouteModel.from_domain(route)


@router.post("/saved-routes/{route_id}/load", response_model=WorkspaceResponse, status_code=status.HTTP_200_OK)
async def load_saved_route(route_id: str, workspace: DispatchWorkspace = Depends(get_workspace)) -> WorkspaceResponse:
    try:
        await workspace.load_saved_route(route_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Saved route {route_id} not found") from exc
    return workspace_response(workspace)


@router.delete("/saved-routes/{route_id}", status_code=status.HTTP_200_OK)
async def delete_saved_route(route_id: str, workspace: DispatchWorkspace = Depends(get_workspace)) -> dict:
    try:
        workspace.delete_saved_route(route_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Saved route {route_id} not found") from exc
    return {"success": True, "message": f"Saved route {route_id} deleted"}


@router.get("/customers", response_model=List[CustomerModel], status_code=status.HTTP_200_OK)
async def list_customers(workspace: DispatchWorkspace = Depends(get_workspace)) -> List[CustomerModel]:
    return [CustomerModel.from_domain(customer) for customer in workspace.customers()]


@router.post("/customers", response_model=CustomerModel, status_code=status.HTTP_201_CREATED)
async def add_customer(payload: CustomerCreate, workspace: DispatchWorkspace = Depends(get_workspace)) -> CustomerModel:
    try:
        customer = workspace.add_customer(payload.name, payload.address, payload.coords.to_domain())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return CustomerModel.from_domain(customer)


@router.delete("/customers/{customer_id}", status_code=status.HTTP_200_OK)
async def delete_customer(customer_id: str, workspace: DispatchWorkspace = Depends(get_workspace)) -> dict:
    try:
        workspace.delete_customer(customer_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Customer {customer_id} not found") from exc
    return {"success": True, "message": f"Customer {customer_id} deleted"}
