"""Routing request/response schemas."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import (
    Coordinate,
    Priority,
    RouteMetrics,
    Stop,
    TrafficCondition,
    new_identifier,
)


class CoordinateModel(BaseModel):
    latitude: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    longitude: float = Field(..., ge=-180, le=180, allow_inf_nan=False)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, coords: Coordinate) -> "CoordinateModel":
        return cls(latitude=coords.latitude, longitude=coords.longitude)


class StopModel(BaseModel):
    stop_id: str = Field(default_factory=new_identifier, min_length=1)
    customer_name: str
    address: str
    priority: Priority = Priority.MEDIUM
    coords: CoordinateModel
    estimated_time: Optional[str] = None
    traffic_condition: Optional[TrafficCondition] = None

    def to_domain(self) -> Stop:
        return Stop(
            stop_id=self.stop_id,
            customer_name=self.customer_name,
            address=self.address,
            priority=self.priority,
            coords=self.coords.to_domain(),
            estimated_time=self.estimated_time,
            traffic_condition=self.traffic_condition,
        )

    @classmethod
    def from_domain(cls, stop: Stop) -> "StopModel":
        return cls(
            stop_id=stop.stop_id,
            customer_name=stop.customer_name,
            address=stop.address,
            priority=stop.priority,
            coords=CoordinateModel.from_domain(stop.coords),
            estimated_time=stop.estimated_time,
            traffic_condition=stop.traffic_condition,
        )


def _check_unique_stop_ids(stops: List[StopModel]) -> List[StopModel]:
    ids = [stop.stop_id for stop in stops]
    if len(ids) != len(set(ids)):
        raise ValueError("Duplicate stop_id found")
    return stops


class RouteMetricsModel(BaseModel):
    distance_km: float = Field(..., ge=0)
    duration: str = Field(..., description="Elapsed time as 'Xh Ym', or '...' when unavailable")
    duration_minutes: Optional[int] = None
    duration_available: bool

    @classmethod
    def from_domain(cls, metrics: RouteMetrics) -> "RouteMetricsModel":
        return cls(
            distance_km=metrics.distance_km,
            duration=metrics.duration.label,
            duration_minutes=metrics.duration.minutes,
            duration_available=metrics.duration.available,
        )


class OptimizeRequest(BaseModel):
    stops: List[StopModel] = Field(default_factory=list)
    depot: Optional[CoordinateModel] = Field(default=None, description="Route origin; defaults to the configured depot.")
    start_time: Optional[str] = Field(default=None, description="Departure time, e.g. '09:00 AM'.")
    use_system_time: bool = False
    language: Optional[Literal["en", "es", "de"]] = None
    preserve_order: bool = Field(
        default=False,
        description="Skip sequencing and annotate the stops in the order given.",
    )

    @field_validator("stops")
    @classmethod
    def validate_unique_stop_ids(cls, v):
        return _check_unique_stop_ids(v)


class MetricsRequest(BaseModel):
    stops: List[StopModel] = Field(default_factory=list)
    depot: Optional[CoordinateModel] = None
    start_time: Optional[str] = None

    @field_validator("stops")
    @classmethod
    def validate_unique_stop_ids(cls, v):
        return _check_unique_stop_ids(v)


class NavigationRequest(BaseModel):
    stops: List[StopModel] = Field(..., min_length=1)
    depot: Optional[CoordinateModel] = None
    apple_maps: bool = False


class NavigationResponse(BaseModel):
    url: str


class RouteResponse(BaseModel):
    stops: List[StopModel]
    metrics: RouteMetricsModel
    summary: Optional[str] = None
    annotated: bool = False
    start_time: str
