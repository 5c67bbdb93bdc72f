"""Serializers for route manifests."""

from __future__ import annotations

import csv
import io
from typing import Sequence

from ...models.domain import Coordinate, RouteMetrics, Stop
from ..geospatial import KM_PER_DEGREE, planar_distance_km


def _manifest_rows(depot: Coordinate, stops: Sequence[Stop], km_per_degree: float) -> list[dict]:
    rows: list[dict] = []
    cumulative = 0.0
    current = depot
    for position, stop in enumerate(stops, start=1):
        leg = planar_distance_km(current, stop.coords, km_per_degree=km_per_degree)
        cumulative += leg
        rows.append(
            {
                "sequence": position,
                "stop_id": stop.stop_id,
                "customer_name": stop.customer_name,
                "address": stop.address,
                "priority": stop.priority.value,
                "latitude": stop.coords.latitude,
                "longitude": stop.coords.longitude,
                "estimated_time": stop.estimated_time or "",
                "traffic_condition": stop.traffic_condition.value if stop.traffic_condition else "",
                "distance_from_prev_km": round(leg, 3),
                "cumulative_distance_km": round(cumulative, 3),
            }
        )
        current = stop.coords
    return rows


def route_to_json(
    depot: Coordinate,
    stops: Sequence[Stop],
    metrics: RouteMetrics,
    *,
    summary: str | None = None,
    km_per_degree: float = KM_PER_DEGREE,
) -> dict:
    return {
        "depot": {"latitude": depot.latitude, "longitude": depot.longitude},
        "summary": summary,
        "total_distance_km": metrics.distance_km,
        "total_duration": metrics.duration.label,
        "total_duration_min": metrics.duration.minutes,
        "stops": _manifest_rows(depot, stops, km_per_degree),
    }


def route_to_csv(depot: Coordinate, stops: Sequence[Stop], *, km_per_degree: float = KM_PER_DEGREE) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "stop_id",
        "customer_name",
        "address",
        "priority",
        "latitude",
        "longitude",
        "estimated_time",
        "traffic_condition",
        "distance_from_prev_km",
        "cumulative_distance_km",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for row in _manifest_rows(depot, stops, km_per_degree):
        writer.writerow(row)
    return buffer.getvalue()
