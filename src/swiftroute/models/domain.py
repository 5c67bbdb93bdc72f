"""Domain models for stops, depots and route metrics."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

UNAVAILABLE_DURATION_LABEL = "..."


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TrafficCondition(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"


def new_identifier() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Latitude/longitude pair. Rejects non-finite values at construction."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        for name in ("latitude", "longitude"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Coordinate {name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"Coordinate {name} must be finite, got {value!r}")
            object.__setattr__(self, name, float(value))


@dataclass(slots=True)
class Stop:
    """A delivery destination, optionally annotated with an ETA and traffic condition."""

    customer_name: str
    address: str
    coords: Coordinate
    priority: Priority = Priority.MEDIUM
    stop_id: str = field(default_factory=new_identifier)
    estimated_time: Optional[str] = None
    traffic_condition: Optional[TrafficCondition] = None


@dataclass(slots=True)
class Customer:
    """Saved directory entry that can be turned into a stop."""

    name: str
    address: str
    coords: Coordinate
    customer_id: str = field(default_factory=new_identifier)


@dataclass(slots=True)
class SavedRoute:
    route_id: str
    name: str
    stops: list[Stop]
    saved_on: date
    total_distance_km: float


@dataclass(frozen=True, slots=True)
class RouteDuration:
    """Elapsed route time in minutes, or unavailable when no usable ETA exists."""

    minutes: Optional[int] = None

    @classmethod
    def unavailable(cls) -> "RouteDuration":
        return cls(minutes=None)

    @property
    def available(self) -> bool:
        return self.minutes is not None

    @property
    def label(self) -> str:
        """Render as ``"{h}h {m}m"``.

        Hours are floored and minutes keep the sign of the total, so negative
        durations are shown as computed: -30 renders as ``"-1h -30m"`` and -90
        as ``"-2h -30m"``. Non-negative values are the usual hours and minutes.
        """

        if self.minutes is None:
            return UNAVAILABLE_DURATION_LABEL
        hours = math.floor(self.minutes / 60)
        minutes = int(math.fmod(self.minutes, 60))
        return f"{hours}h {minutes}m"


@dataclass(frozen=True, slots=True)
class RouteMetrics:
    distance_km: float
    duration: RouteDuration
