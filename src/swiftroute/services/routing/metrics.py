"""Distance and duration statistics for an ordered stop sequence."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Sequence

from ...models.domain import Coordinate, RouteDuration, RouteMetrics, Stop
from ..geospatial import KM_PER_DEGREE, planar_distance_km

logger = logging.getLogger(__name__)

_CLOCK_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s+(AM|PM)\s*$", re.IGNORECASE)


class ClockParseError(ValueError):
    """Raised when a 12-hour clock string cannot be interpreted."""


def parse_clock_time(value: str) -> int:
    """Convert a ``"hh:mm AM"`` style string into minutes since midnight."""

    if not isinstance(value, str):
        raise ClockParseError(f"Clock time must be a string, got {value!r}")
    match = _CLOCK_PATTERN.match(value)
    if match is None:
        raise ClockParseError(f"Unrecognised clock time '{value}'")

    hours, minutes = int(match.group(1)), int(match.group(2))
    modifier = match.group(3).upper()
    if not 1 <= hours <= 12 or minutes > 59:
        raise ClockParseError(f"Clock time out of range '{value}'")

    if modifier == "PM" and hours < 12:
        hours += 12
    if modifier == "AM" and hours == 12:
        hours = 0
    return hours * 60 + minutes


def format_clock_time(moment: datetime) -> str:
    """Render a datetime as ``"h:mm AM"`` (no leading zero on the hour)."""

    hours = moment.hour % 12 or 12
    suffix = "PM" if moment.hour >= 12 else "AM"
    return f"{hours}:{moment.minute:02d} {suffix}"


def total_distance_km(
    origin: Coordinate,
    sequence: Sequence[Stop],
    *,
    km_per_degree: float = KM_PER_DEGREE,
) -> float:
    total = 0.0
    current = origin
    for stop in sequence:
        total += planar_distance_km(current, stop.coords, km_per_degree=km_per_degree)
        current = stop.coords
    return total


def route_duration(sequence: Sequence[Stop], start_time: str) -> RouteDuration:
    """Elapsed time from ``start_time`` to the last stop's ETA.

    Negative values (ETA before the start, e.g. across midnight) are returned
    as computed.
    """

    if not sequence:
        return RouteDuration.unavailable()
    eta = sequence[-1].estimated_time
    if not eta:
        return RouteDuration.unavailable()
    try:
        start_minutes = parse_clock_time(start_time)
        end_minutes = parse_clock_time(eta)
    except ClockParseError as exc:
        logger.debug(f"Duration unavailable: {exc}")
        return RouteDuration.unavailable()
    return RouteDuration(minutes=end_minutes - start_minutes)


def compute_metrics(
    origin: Coordinate,
    sequence: Sequence[Stop],
    start_time: str,
    *,
    km_per_degree: float = KM_PER_DEGREE,
) -> RouteMetrics:
    return RouteMetrics(
        distance_km=total_distance_km(origin, sequence, km_per_degree=km_per_degree),
        duration=route_duration(sequence, start_time),
    )


def resolve_start_time(
    start_time: str | None,
    *,
    use_system_time: bool = False,
    default: str = "09:00 AM",
    now: datetime | None = None,
) -> str:
    """Pick the departure time: explicit value, current clock time, or the default.

    An explicit value must parse as a 12-hour clock time; ``ClockParseError`` otherwise.
    """

    if start_time:
        parse_clock_time(start_time)
        return start_time.strip()
    if use_system_time:
        return format_clock_time(now or datetime.now())
    return default
