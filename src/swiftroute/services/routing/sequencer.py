"""Priority-weighted nearest-neighbour stop sequencing.

Starting from the depot, the next stop is always the one with the smallest
weighted distance from the current position. High priority stops have their
distance shrunk so they tend to be visited earlier without the route being
ordered by priority alone. This is a greedy O(n^2) heuristic intended for
tens of stops; it does not backtrack and gives no optimality guarantee.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from ...models.domain import Coordinate, Priority, Stop
from ..geospatial import planar_distance

DEFAULT_PRIORITY_FACTORS: dict[Priority, float] = {
    Priority.HIGH: 0.7,
    Priority.MEDIUM: 0.9,
    Priority.LOW: 1.0,
}


def priority_factor(priority: Priority, factors: Mapping[Priority, float] | None = None) -> float:
    lookup = factors or DEFAULT_PRIORITY_FACTORS
    return lookup[Priority(priority)]


def ensure_unique_ids(stops: Iterable[Stop]) -> None:
    seen: set[str] = set()
    for stop in stops:
        if stop.stop_id in seen:
            raise ValueError(f"Duplicate stop_id found: {stop.stop_id}")
        seen.add(stop.stop_id)


def sequence_stops(
    origin: Coordinate,
    stops: Iterable[Stop],
    *,
    factors: Mapping[Priority, float] | None = None,
) -> list[Stop]:
    """Order ``stops`` into a visit sequence starting from ``origin``.

    The output is a permutation of the input. Ties are resolved in favour of
    the stop that appears first in the input.
    """

    remaining = list(stops)
    ensure_unique_ids(remaining)

    route: list[Stop] = []
    current = origin
    while remaining:
        nearest_index = 0
        min_weighted = float("inf")
        for index, stop in enumerate(remaining):
            weighted = planar_distance(current, stop.coords) * priority_factor(stop.priority, factors)
            if weighted < min_weighted:
                min_weighted = weighted
                nearest_index = index

        next_stop = remaining.pop(nearest_index)
        route.append(next_stop)
        current = next_stop.coords

    return route
