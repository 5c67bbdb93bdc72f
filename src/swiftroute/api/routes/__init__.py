"""Route group exports."""

from . import health, routes, saved, stops, workspace

__all__ = ["health", "routes", "saved", "stops", "workspace"]
