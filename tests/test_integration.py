import asyncio
import csv
import io
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from swiftroute.api.dependencies import get_address_resolver, get_estimator_factory, get_workspace
from swiftroute.main import create_app
from swiftroute.models.domain import Coordinate, TrafficCondition
from swiftroute.persistence.filesystem import FileStorage
from swiftroute.persistence.snapshot import SnapshotStore
from swiftroute.services.estimation.estimator import EstimationError
from swiftroute.services.resolution.address_parser import AddressResolutionError, ResolvedAddress
from swiftroute.services.routing.models import EtaAnnotation, RouteAnalysis
from swiftroute.services.workspace import DispatchWorkspace, default_estimator_factory


class DummyEstimator:
    def __init__(self, language: str = "en"):
        self.language = language

    async def analyze_route(self, stops, start_time):
        return RouteAnalysis(
            summary=f"{len(stops)} stops, light traffic",
            etas=[
                EtaAnnotation(stop_id=s.stop_id, eta=f"{10 + i}:00 AM", traffic=TrafficCondition.LIGHT)
                for i, s in enumerate(stops)
            ],
        )


class BrokenEstimator:
    async def analyze_route(self, stops, start_time):
        raise EstimationError("quota exceeded")


class DummyResolver:
    places = {
        "acme": ResolvedAddress("Acme", "1 Main St", Coordinate(34.10, -118.24)),
        "globex": ResolvedAddress("Globex", "2 Oak Ave", Coordinate(34.06, -118.24)),
    }

    async def parse_address(self, text):
        try:
            return self.places[text]
        except KeyError:
            raise AddressResolutionError(f"Could not resolve '{text}'") from None

    async def bulk_parse_addresses(self, text):
        return [self.places[line.strip()] for line in text.splitlines() if line.strip()]


def _stop_payload(sid: str, lat: float, lng: float, priority: str = "medium") -> dict:
    return {
        "stop_id": sid,
        "customer_name": f"Customer {sid}",
        "address": f"{sid} Main St",
        "priority": priority,
        "coords": {"latitude": float(lat), "longitude": float(lng)},
    }


DEPOT = {"latitude": 0.0, "longitude": 0.0}


@pytest.fixture
def workspace(tmp_path: Path) -> DispatchWorkspace:
    return DispatchWorkspace(
        SnapshotStore(FileStorage(root=tmp_path), path=Path("state.json")),
        estimator_factory=DummyEstimator,
        resolver=DummyResolver(),
        clock=lambda: datetime(2026, 5, 1, 8, 30),
    )


@pytest.fixture
def api_client(workspace: DispatchWorkspace) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_workspace] = lambda: workspace
    app.dependency_overrides[get_estimator_factory] = lambda: DummyEstimator
    app.dependency_overrides[get_address_resolver] = DummyResolver
    return TestClient(app)


def test_health_endpoints(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}

    estimator = api_client.get("/api/health/estimator").json()
    assert estimator["service"] == "estimator"
    assert estimator["recompute_in_progress"] is False


def test_optimize_sequences_and_annotates(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={
            "depot": DEPOT,
            "start_time": "09:00 AM",
            "stops": [_stop_payload("far", 0, 2), _stop_payload("near", 0, 1)],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert [s["stop_id"] for s in body["stops"]] == ["near", "far"]
    assert body["stops"][0]["estimated_time"] == "10:00 AM"
    assert body["stops"][0]["traffic_condition"] == "light"
    assert body["summary"] == "2 stops, light traffic"
    assert body["annotated"] is True
    assert body["metrics"]["distance_km"] == pytest.approx(222.0)
    assert body["metrics"]["duration"] == "2h 0m"


def test_optimize_preserve_order(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={
            "depot": DEPOT,
            "preserve_order": True,
            "stops": [_stop_payload("far", 0, 2), _stop_payload("near", 0, 1)],
        },
    )

    assert [s["stop_id"] for s in response.json()["stops"]] == ["far", "near"]


def test_optimize_estimator_failure_returns_unannotated_route(api_client: TestClient):
    api_client.app.dependency_overrides[get_estimator_factory] = lambda: (lambda language: BrokenEstimator())

    response = api_client.post(
        "/api/routes/optimize",
        json={"depot": DEPOT, "stops": [_stop_payload("far", 0, 2), _stop_payload("near", 0, 1)]},
    )

    assert response.status_code == 200
    body = response.json()
    assert [s["stop_id"] for s in body["stops"]] == ["near", "far"]
    assert body["summary"] is None
    assert body["annotated"] is False
    assert body["metrics"]["duration"] == "..."
    assert body["metrics"]["duration_available"] is False


def test_optimize_rejects_duplicate_ids_and_bad_start_time(api_client: TestClient):
    duplicate = api_client.post(
        "/api/routes/optimize",
        json={"stops": [_stop_payload("A", 0, 1), _stop_payload("A", 0, 2)]},
    )
    assert duplicate.status_code == 422

    bad_time = api_client.post(
        "/api/routes/optimize",
        json={"start_time": "25:99", "stops": [_stop_payload("A", 0, 1)]},
    )
    assert bad_time.status_code == 400


def test_optimize_rejects_out_of_range_coordinates(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"stops": [_stop_payload("A", 95, 1)]})

    assert response.status_code == 422


def test_metrics_endpoint_uses_given_order(api_client: TestClient):
    stops = [_stop_payload("far", 0, 2), _stop_payload("near", 0, 1)]
    stops[1]["estimated_time"] = "10:45 AM"

    response = api_client.post(
        "/api/routes/metrics",
        json={"depot": DEPOT, "start_time": "09:00 AM", "stops": stops},
    )

    body = response.json()
    assert body["distance_km"] == pytest.approx(333.0)
    assert body["duration"] == "1h 45m"
    assert body["duration_minutes"] == 105


def test_export_csv_and_json(api_client: TestClient):
    payload = {"depot": DEPOT, "stops": [_stop_payload("A", 0, 1), _stop_payload("B", 0, 2)]}

    csv_response = api_client.post("/api/routes/export?format=csv", json=payload)
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(csv_response.text)))
    assert [row["stop_id"] for row in rows] == ["A", "B"]
    assert rows[1]["cumulative_distance_km"] == "222.0"

    json_response = api_client.post("/api/routes/export?format=json", json=payload)
    assert json_response.json()["total_distance_km"] == pytest.approx(222.0)

    assert api_client.post("/api/routes/export?format=xml", json=payload).status_code == 400


def test_navigation_link(api_client: TestClient):
    response = api_client.post(
        "/api/routes/navigation",
        json={"depot": DEPOT, "stops": [_stop_payload("A", 0, 1), _stop_payload("B", 0, 2)]},
    )

    url = response.json()["url"]
    assert url.startswith("https://www.google.com/maps/dir/?api=1&origin=0.0,0.0&destination=0.0,2.0")
    assert api_client.post("/api/routes/navigation", json={"stops": []}).status_code == 422


def test_workspace_add_stop_flow(api_client: TestClient):
    assert api_client.get("/api/workspace").json()["stops"] == []

    api_client.post("/api/workspace/stops", json={"input": "acme"})
    response = api_client.post("/api/workspace/stops", json={"input": "globex", "priority": "high"})

    assert response.status_code == 201
    body = response.json()
    assert [s["customer_name"] for s in body["stops"]] == ["Globex", "Acme"]
    assert body["summary"] == "2 stops, light traffic"
    assert body["in_progress"] is False
    assert body["last_updated"] is not None


def test_workspace_unresolvable_address_is_bad_gateway(api_client: TestClient):
    response = api_client.post("/api/workspace/stops", json={"input": "atlantis"})

    assert response.status_code == 502
    assert api_client.get("/api/workspace").json()["stops"] == []


def test_workspace_remove_and_reorder(api_client: TestClient):
    api_client.post("/api/workspace/stops", json={"input": "acme"})
    body = api_client.post("/api/workspace/stops", json={"input": "globex"}).json()
    ids = [s["stop_id"] for s in body["stops"]]

    reordered = api_client.post("/api/workspace/reorder", json={"stop_ids": list(reversed(ids))})
    assert [s["stop_id"] for s in reordered.json()["stops"]] == list(reversed(ids))

    assert api_client.post("/api/workspace/reorder", json={"stop_ids": ids[:1]}).status_code == 400

    removed = api_client.delete(f"/api/workspace/stops/{ids[0]}")
    assert [s["stop_id"] for s in removed.json()["stops"]] == [ids[1]]
    assert api_client.delete("/api/workspace/stops/missing").status_code == 404


def test_workspace_depot_and_preferences(api_client: TestClient):
    api_client.post("/api/workspace/stops", json={"input": "acme"})
    api_client.post("/api/workspace/stops", json={"input": "globex"})

    moved = api_client.put("/api/workspace/depot", json={"depot": {"latitude": 34.2, "longitude": -118.24}})
    assert [s["customer_name"] for s in moved.json()["stops"]] == ["Acme", "Globex"]

    prefs = api_client.put("/api/workspace/preferences", json={"language": "es", "use_system_time": True})
    assert prefs.json()["language"] == "es"
    assert prefs.json()["start_time"] == "8:30 AM"

    assert api_client.put("/api/workspace/preferences", json={"language": "fr"}).status_code == 422


def test_workspace_export_includes_summary(api_client: TestClient):
    api_client.post("/api/workspace/stops", json={"input": "acme"})

    exported = api_client.get("/api/workspace/export?format=json").json()

    assert exported["summary"] == "1 stops, light traffic"
    assert exported["stops"][0]["customer_name"] == "Acme"


def test_saved_routes_endpoints(api_client: TestClient):
    assert api_client.post("/api/saved-routes", json={"name": "Empty"}).status_code == 400

    api_client.post("/api/workspace/stops", json={"input": "acme"})
    saved = api_client.post("/api/saved-routes", json={"name": "Morning"})
    assert saved.status_code == 201
    route_id = saved.json()["route_id"]
    assert saved.json()["saved_on"] == "2026-05-01"

    listed = api_client.get("/api/saved-routes").json()
    assert [r["name"] for r in listed] == ["Morning"]

    loaded = api_client.post(f"/api/saved-routes/{route_id}/load")
    assert [s["customer_name"] for s in loaded.json()["stops"]] == ["Acme"]

    assert api_client.delete(f"/api/saved-routes/{route_id}").json()["success"] is True
    assert api_client.delete(f"/api/saved-routes/{route_id}").status_code == 404
    assert api_client.post(f"/api/saved-routes/{route_id}/load").status_code == 404


def test_customer_directory_endpoints(api_client: TestClient):
    created = api_client.post(
        "/api/customers",
        json={"name": "Initech", "address": "4120 Freidrich Ln", "coords": {"latitude": 34.07, "longitude": -118.24}},
    )
    assert created.status_code == 201
    customer_id = created.json()["customer_id"]

    added = api_client.post(f"/api/workspace/stops/from-customer/{customer_id}?priority=high")
    assert added.status_code == 201
    assert added.json()["stops"][0]["priority"] == "high"

    assert api_client.delete(f"/api/customers/{customer_id}").status_code == 200
    assert api_client.get("/api/customers").json() == []
    assert api_client.post(f"/api/workspace/stops/from-customer/{customer_id}").status_code == 404


def test_parse_endpoints(api_client: TestClient):
    parsed = api_client.post("/api/stops/parse", json={"input": "acme"})
    assert parsed.json()["customer_name"] == "Acme"

    assert api_client.post("/api/stops/parse", json={"input": "atlantis"}).status_code == 502

    bulk = api_client.post("/api/stops/bulk-parse", json={"input": "acme\nglobex"})
    assert [item["customer_name"] for item in bulk.json()] == ["Acme", "Globex"]


def test_blank_customer_name_is_rejected(api_client: TestClient, workspace: DispatchWorkspace):
    response = api_client.post(
        "/api/customers",
        json={"name": "   ", "address": "1 Main St", "coords": {"latitude": 34.0, "longitude": -118.0}},
    )

    assert response.status_code == 400
    assert workspace.customers() == []


def test_workspace_endpoints_run_on_the_event_loop(api_client: TestClient):
    for route in api_client.app.routes:
        if not isinstance(route, APIRoute):
            continue
        if any(dep.call is get_workspace for dep in route.dependant.dependencies):
            assert asyncio.iscoroutinefunction(route.endpoint), route.path


def test_concurrent_customer_writes_are_all_persisted(api_client: TestClient, workspace: DispatchWorkspace):
    def add(index: int) -> int:
        response = client.post(
            "/api/customers",
            json={
                "name": f"Customer {index}",
                "address": f"{index} Main St",
                "coords": {"latitude": 34.0, "longitude": -118.0},
            },
        )
        return response.status_code

    # a single client context shares one event loop across the worker threads
    with TestClient(api_client.app) as client:
        with ThreadPoolExecutor(max_workers=8) as pool:
            statuses = list(pool.map(add, range(120)))

    assert set(statuses) == {201}
    assert len(workspace.customers()) == 120
    assert len(workspace.store.load().saved_customers) == 120


def test_estimator_dependency_uses_the_workspace_factory():
    assert get_estimator_factory() is default_estimator_factory
