"""Schemas for the dispatcher workspace, saved routes and the customer directory."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Customer, Priority, SavedRoute, new_identifier
from .routing import CoordinateModel, RouteMetricsModel, StopModel


class CustomerModel(BaseModel):
    customer_id: str = Field(default_factory=new_identifier)
    name: str = Field(..., min_length=1)
    address: str
    coords: CoordinateModel

    def to_domain(self) -> Customer:
        return Customer(
            customer_id=self.customer_id,
            name=self.name,
            address=self.address,
            coords=self.coords.to_domain(),
        )

    @classmethod
    def from_domain(cls, customer: Customer) -> "CustomerModel":
        return cls(
            customer_id=customer.customer_id,
            name=customer.name,
            address=customer.address,
            coords=CoordinateModel.from_domain(customer.coords),
        )


class SavedRouteModel(BaseModel):
    route_id: str = Field(default_factory=new_identifier)
    name: str = Field(..., min_length=1)
    stops: List[StopModel]
    saved_on: date
    total_distance_km: float = Field(..., ge=0)

    def to_domain(self) -> SavedRoute:
        return SavedRoute(
            route_id=self.route_id,
            name=self.name,
            stops=[stop.to_domain() for stop in self.stops],
            saved_on=self.saved_on,
            total_distance_km=self.total_distance_km,
        )

    @classmethod
    def from_domain(cls, route: SavedRoute) -> "SavedRouteModel":
        return cls(
            route_id=route.route_id,
            name=route.name,
            stops=[StopModel.from_domain(stop) for stop in route.stops],
            saved_on=route.saved_on,
            total_distance_km=route.total_distance_km,
        )


class AppSnapshot(BaseModel):
    """Everything the dispatcher workspace persists between runs."""

    stops: List[StopModel] = Field(default_factory=list)
    saved_customers: List[CustomerModel] = Field(default_factory=list)
    saved_routes: List[SavedRouteModel] = Field(default_factory=list)
    summary: Optional[str] = None
    depot: Optional[CoordinateModel] = None
    language: Literal["en", "es", "de"] = "en"
    use_system_time: bool = False
    last_updated: Optional[datetime] = None


class AddStopRequest(BaseModel):
    input: str = Field(..., min_length=1, description="Free text describing the stop.")
    priority: Priority = Priority.MEDIUM


class DepotUpdate(BaseModel):
    depot: CoordinateModel


class ReorderRequest(BaseModel):
    stop_ids: List[str] = Field(..., description="Complete stop order, e.g. after a drag and drop.")


class PreferencesUpdate(BaseModel):
    language: Optional[Literal["en", "es", "de"]] = None
    use_system_time: Optional[bool] = None


class SaveRouteRequest(BaseModel):
    name: str = Field(..., min_length=1)


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str
    coords: CoordinateModel


class WorkspaceResponse(BaseModel):
    stops: List[StopModel]
    metrics: RouteMetricsModel
    summary: Optional[str] = None
    depot: CoordinateModel
    start_time: str
    language: str
    use_system_time: bool
    in_progress: bool
    last_updated: Optional[datetime] = None


class ParseAddressRequest(BaseModel):
    input: str = Field(..., min_length=1)


class ParsedAddressModel(BaseModel):
    customer_name: str
    address: str
    coords: CoordinateModel
