"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.routes import health, routes, saved, stops, workspace
from .config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.gemini_api_key:
        logger.warning("No Gemini API key configured; routes will be sequenced without ETAs or summaries")
    logger.info(f"{settings.app_name} v{__version__} started, state file {settings.snapshot_file}")
    yield


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "version": __version__,
            "status": "running",
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    for module in (health, routes, workspace, saved, stops):
        app.include_router(module.router, prefix=settings.api_prefix)
    return app


app = create_app()
