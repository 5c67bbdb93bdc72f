"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...config import settings
from ...services.workspace import DispatchWorkspace
from ..dependencies import get_workspace

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/estimator", status_code=status.HTTP_200_OK)
async def health_estimator(workspace: DispatchWorkspace = Depends(get_workspace)) -> dict:
    """Report whether route estimation can run and whether a recompute is in flight."""
    return {
        "service": "estimator",
        "configured": bool(settings.gemini_api_key),
        "model": settings.gemini_model,
        "recompute_in_progress": workspace.orchestrator.in_progress,
        "latest_generation": workspace.orchestrator.latest_generation,
    }
