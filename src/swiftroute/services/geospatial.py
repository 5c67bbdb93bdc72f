"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate

KM_PER_DEGREE = 111.0


def planar_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean distance over raw latitude/longitude differences, in degrees.

    This is a planar approximation, not a great-circle distance.
    """

    d_lat = a.latitude - b.latitude
    d_lng = a.longitude - b.longitude
    return math.sqrt(d_lat * d_lat + d_lng * d_lng)


def planar_distance_km(a: Coordinate, b: Coordinate, *, km_per_degree: float = KM_PER_DEGREE) -> float:
    """Planar distance scaled to kilometers with a fixed degree-to-km factor."""

    return planar_distance(a, b) * km_per_degree
