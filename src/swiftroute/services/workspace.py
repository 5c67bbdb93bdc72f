"""Dispatcher workspace: the persisted stop list driven through the route orchestrator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from ..config import settings
from ..models.domain import Coordinate, Customer, Priority, RouteMetrics, SavedRoute, Stop, new_identifier
from ..persistence.snapshot import SnapshotStore
from ..schemas.routing import CoordinateModel, StopModel
from ..schemas.workspace import AppSnapshot, CustomerModel, SavedRouteModel
from .estimation.estimator import GeminiRouteEstimator, RouteEstimator
from .resolution.address_parser import AddressResolver, GeminiAddressResolver
from .routing.metrics import compute_metrics, format_clock_time
from .routing.models import RecomputeResult
from .routing.service import RouteOrchestrator

logger = logging.getLogger(__name__)

EstimatorFactory = Callable[[str], RouteEstimator]


def default_depot() -> Coordinate:
    return Coordinate(settings.default_depot_latitude, settings.default_depot_longitude)


def default_estimator_factory(language: str) -> RouteEstimator:
    return GeminiRouteEstimator(language=language)


@dataclass(slots=True)
class WorkspaceView:
    stops: list[Stop]
    metrics: RouteMetrics
    summary: Optional[str]
    depot: Coordinate
    start_time: str
    language: str
    use_system_time: bool
    in_progress: bool
    last_updated: Optional[datetime]


class DispatchWorkspace:
    """Owns the dispatcher's state and funnels every change through one orchestrator.

    Stop-set mutations happen before the recompute they trigger is awaited, so
    the orchestrator's generation tokens decide which estimator round wins.
    """

    def __init__(
        self,
        store: SnapshotStore | None = None,
        *,
        orchestrator: RouteOrchestrator | None = None,
        estimator_factory: EstimatorFactory | None = None,
        resolver: AddressResolver | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store = store or SnapshotStore()
        self.orchestrator = orchestrator or RouteOrchestrator()
        self.estimator_factory = estimator_factory or default_estimator_factory
        self._resolver = resolver
        self._clock = clock or datetime.now
        self._snapshot = self.store.load()

    @property
    def resolver(self) -> AddressResolver:
        if self._resolver is None:
            self._resolver = GeminiAddressResolver()
        return self._resolver

    @property
    def snapshot(self) -> AppSnapshot:
        return self._snapshot

    # --- derived values -------------------------------------------------

    def depot(self) -> Coordinate:
        if self._snapshot.depot is None:
            return default_depot()
        return self._snapshot.depot.to_domain()

    def stops(self) -> list[Stop]:
        return [stop.to_domain() for stop in self._snapshot.stops]

    def estimation_start_time(self) -> str:
        if self._snapshot.use_system_time:
            return format_clock_time(self._clock())
        return settings.default_start_time

    def metrics_start_time(self) -> str:
        # system time only applies once an estimation round has completed
        if self._snapshot.use_system_time and self._snapshot.last_updated is not None:
            return format_clock_time(self._clock())
        return settings.default_start_time

    def view(self) -> WorkspaceView:
        stops = self.stops()
        depot = self.depot()
        start_time = self.metrics_start_time()
        return WorkspaceView(
            stops=stops,
            metrics=compute_metrics(depot, stops, start_time, km_per_degree=settings.km_per_degree),
            summary=self._snapshot.summary,
            depot=depot,
            start_time=start_time,
            language=self._snapshot.language,
            use_system_time=self._snapshot.use_system_time,
            in_progress=self.orchestrator.in_progress,
            last_updated=self._snapshot.last_updated,
        )

    # --- persistence ----------------------------------------------------

    def _save(self) -> None:
        self.store.save(self._snapshot)

    def _set_stops(self, stops: list[Stop]) -> None:
        self._snapshot.stops = [StopModel.from_domain(stop) for stop in stops]

    def _apply(self, result: RecomputeResult) -> RecomputeResult:
        if result.stale:
            return result
        self._set_stops(result.stops)
        self._snapshot.summary = result.summary
        if result.annotated:
            self._snapshot.last_updated = datetime.now(timezone.utc)
        self._save()
        return result

    # --- recompute triggers ---------------------------------------------

    async def recompute(self) -> RecomputeResult:
        stops = self.stops()
        estimator = self.estimator_factory(self._snapshot.language)
        result = await self.orchestrator.recompute(stops, self.depot(), self.estimation_start_time(), estimator)
        return self._apply(result)

    async def _reorder(self, ordered: list[Stop]) -> RecomputeResult:
        estimator = self.estimator_factory(self._snapshot.language)
        result = await self.orchestrator.reorder(ordered, self.estimation_start_time(), estimator)
        return self._apply(result)

    async def add_stop(self, text: str, priority: Priority = Priority.MEDIUM) -> RecomputeResult:
        resolved = await self.resolver.parse_address(text)
        stops = self.stops()
        stops.append(resolved.to_stop(priority))
        self._set_stops(stops)
        self._snapshot.summary = None
        self._save()
        logger.info(f"Added stop '{resolved.customer_name}' ({len(stops)} stops)")
        return await self.recompute()

    async def add_customer_stop(self, customer_id: str, priority: Priority = Priority.MEDIUM) -> RecomputeResult:
        customer = self.get_customer(customer_id)
        stops = self.stops()
        stops.append(
            Stop(
                customer_name=customer.name,
                address=customer.address,
                coords=customer.coords,
                priority=priority,
            )
        )
        self._set_stops(stops)
        self._save()
        return await self.recompute()

    async def remove_stop(self, stop_id: str) -> RecomputeResult:
        stops = self.stops()
        remaining = [stop for stop in stops if stop.stop_id != stop_id]
        if len(remaining) == len(stops):
            raise KeyError(stop_id)
        self._set_stops(remaining)
        self._save()
        return await self.recompute()

    async def set_depot(self, depot: Coordinate) -> RecomputeResult:
        self._snapshot.depot = CoordinateModel.from_domain(depot)
        self._save()
        return await self.recompute()

    async def reorder(self, stop_ids: list[str]) -> RecomputeResult:
        stops = self.stops()
        by_id = {stop.stop_id: stop for stop in stops}
        if len(stop_ids) != len(set(stop_ids)) or set(stop_ids) != set(by_id):
            raise ValueError("Reorder must list every current stop exactly once.")
        ordered = [by_id[stop_id] for stop_id in stop_ids]
        self._set_stops(ordered)
        self._save()
        return await self._reorder(ordered)

    def set_preferences(self, *, language: str | None = None, use_system_time: bool | None = None) -> None:
        if language is not None:
            self._snapshot.language = language
        if use_system_time is not None:
            self._snapshot.use_system_time = use_system_time
        self._save()

    # --- saved routes -----------------------------------------------------

    def saved_routes(self) -> list[SavedRoute]:
        return [route.to_domain() for route in self._snapshot.saved_routes]

    def save_current_route(self, name: str) -> SavedRoute:
        if not name.strip():
            raise ValueError("Route name must not be empty.")
        view = self.view()
        if not view.stops:
            raise ValueError("Cannot save an empty route.")
        route = SavedRoute(
            route_id=new_identifier(),
            name=name.strip(),
            stops=view.stops,
            saved_on=self._clock().date(),
            total_distance_km=view.metrics.distance_km,
        )
        self._snapshot.saved_routes.insert(0, SavedRouteModel.from_domain(route))
        self._save()
        return route

    async def load_saved_route(self, route_id: str) -> RecomputeResult:
        route = self._find_saved_route(route_id)
        self._set_stops(route.stops)
        self._save()
        return await self._reorder(route.stops)

    def delete_saved_route(self, route_id: str) -> None:
        self._find_saved_route(route_id)
        self._snapshot.saved_routes = [r for r in self._snapshot.saved_routes if r.route_id != route_id]
        self._save()

    def _find_saved_route(self, route_id: str) -> SavedRoute:
        for route in self._snapshot.saved_routes:
            if route.route_id == route_id:
                return route.to_domain()
        raise KeyError(route_id)

    # --- customer directory ----------------------------------------------

    def customers(self) -> list[Customer]:
        return [customer.to_domain() for customer in self._snapshot.saved_customers]

    def add_customer(self, name: str, address: str, coords: Coordinate) -> Customer:
        if not name.strip():
            raise ValueError("Customer name must not be empty.")
        customer = Customer(name=name.strip(), address=address.strip(), coords=coords)
        self._snapshot.saved_customers.append(CustomerModel.from_domain(customer))
        self._save()
        return customer

    def get_customer(self, customer_id: str) -> Customer:
        for customer in self._snapshot.saved_customers:
            if customer.customer_id == customer_id:
                return customer.to_domain()
        raise KeyError(customer_id)

    def delete_customer(self, customer_id: str) -> None:
        self.get_customer(customer_id)
        self._snapshot.saved_customers = [
            c for c in self._snapshot.saved_customers if c.customer_id != customer_id
        ]
        self._save()
