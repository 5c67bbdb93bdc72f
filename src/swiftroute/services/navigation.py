"""Turn-by-turn navigation links for a sequenced route."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import quote

from ..models.domain import Coordinate, Stop

GOOGLE_MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/?api=1"
APPLE_MAPS_URL = "maps://"


def _point(coords: Coordinate) -> str:
    return f"{coords.latitude},{coords.longitude}"


def build_navigation_url(depot: Coordinate, stops: Sequence[Stop], *, apple_maps: bool = False) -> str:
    """Directions from the depot through every stop, ending at the last one."""

    if not stops:
        raise ValueError("At least one stop is required to build a navigation link.")

    origin = _point(depot)
    destination = _point(stops[-1].coords)
    intermediate = [_point(stop.coords) for stop in stops[:-1]]

    if apple_maps:
        parts = [f"saddr={origin}", f"daddr={destination}"]
        parts.extend(f"daddr={point}" for point in intermediate)
        return f"{APPLE_MAPS_URL}?{'&'.join(parts)}"

    url = f"{GOOGLE_MAPS_DIRECTIONS_URL}&origin={origin}&destination={destination}"
    if intermediate:
        url += f"&waypoints={quote('|'.join(intermediate), safe=',')}"
    return f"{url}&travelmode=driving"
