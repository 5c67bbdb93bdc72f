"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from ..services.resolution.address_parser import AddressResolver, GeminiAddressResolver
from ..services.workspace import DispatchWorkspace, EstimatorFactory, default_estimator_factory


@lru_cache()
def _shared_workspace() -> DispatchWorkspace:
    return DispatchWorkspace()


async def get_workspace() -> DispatchWorkspace:
    """Process-wide workspace; every request shares one orchestrator.

    Resolved on the event loop, like every endpoint that uses it, so workspace
    reads and writes never run on worker threads.
    """
    return _shared_workspace()


def get_estimator_factory() -> EstimatorFactory:
    return default_estimator_factory


def get_address_resolver() -> AddressResolver:
    return GeminiAddressResolver()
