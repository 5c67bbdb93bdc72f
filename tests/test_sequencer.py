import pytest

from swiftroute.models.domain import Coordinate, Priority, Stop
from swiftroute.services.geospatial import planar_distance, planar_distance_km
from swiftroute.services.routing.sequencer import sequence_stops

DEPOT = Coordinate(0.0, 0.0)


def _stop(sid: str, lat: float, lng: float, priority: Priority = Priority.MEDIUM) -> Stop:
    return Stop(
        stop_id=sid,
        customer_name=f"Customer {sid}",
        address=f"{sid} Main St",
        coords=Coordinate(lat, lng),
        priority=priority,
    )


def test_planar_distance_is_symmetric_and_non_negative():
    a, b = Coordinate(34.05, -118.24), Coordinate(34.10, -118.30)
    assert planar_distance(a, b) == pytest.approx(planar_distance(b, a))
    assert planar_distance(a, b) > 0
    assert planar_distance(a, a) == 0


def test_planar_distance_km_uses_fixed_scale():
    assert planar_distance_km(Coordinate(0, 0), Coordinate(3, 4)) == pytest.approx(5 * 111)


def test_empty_input_returns_empty_sequence():
    assert sequence_stops(DEPOT, []) == []


def test_single_stop_is_returned():
    stop = _stop("A", 1.0, 1.0)
    assert sequence_stops(DEPOT, [stop]) == [stop]


def test_output_is_permutation_of_input():
    stops = [_stop(str(i), (i * 7) % 5 * 0.01, (i * 3) % 4 * 0.01) for i in range(12)]
    ordered = sequence_stops(DEPOT, stops)

    assert len(ordered) == len(stops)
    assert sorted(s.stop_id for s in ordered) == sorted(s.stop_id for s in stops)


def test_equal_priority_follows_distance_order():
    far = _stop("far", 0.0, 3.0)
    near = _stop("near", 0.0, 1.0)
    middle = _stop("middle", 0.0, 2.0)

    ordered = sequence_stops(DEPOT, [far, near, middle])

    assert [s.stop_id for s in ordered] == ["near", "middle", "far"]


def test_high_priority_wins_over_equidistant_low_priority():
    low = _stop("low", 0.0, 1.0, Priority.LOW)
    high = _stop("high", 0.0, -1.0, Priority.HIGH)

    ordered = sequence_stops(DEPOT, [low, high])

    assert [s.stop_id for s in ordered] == ["high", "low"]


def test_priority_weighting_can_pull_slightly_farther_stop_forward():
    near_low = _stop("near_low", 0.0, 1.0, Priority.LOW)
    farther_high = _stop("farther_high", 0.0, -1.3, Priority.HIGH)  # 1.3 * 0.7 = 0.91

    ordered = sequence_stops(DEPOT, [near_low, farther_high])

    assert ordered[0].stop_id == "farther_high"


def test_ties_keep_input_order():
    first = _stop("first", 1.0, 0.0)
    second = _stop("second", -1.0, 0.0)

    assert sequence_stops(DEPOT, [first, second])[0].stop_id == "first"
    assert sequence_stops(DEPOT, [second, first])[0].stop_id == "second"


def test_sequence_advances_from_each_selected_stop():
    a = _stop("A", 0.0, 1.0)
    b = _stop("B", 0.0, 5.0)
    c = _stop("C", 0.0, -1.5)

    ordered = sequence_stops(DEPOT, [b, c, a])

    # from A (0,1): C is 2.5 away, B is 4 away
    assert [s.stop_id for s in ordered] == ["A", "C", "B"]


def test_duplicate_ids_are_rejected():
    with pytest.raises(ValueError):
        sequence_stops(DEPOT, [_stop("A", 0, 1), _stop("A", 0, 2)])


def test_input_list_is_not_modified():
    stops = [_stop("A", 0, 2), _stop("B", 0, 1)]
    sequence_stops(DEPOT, stops)
    assert [s.stop_id for s in stops] == ["A", "B"]


@pytest.mark.parametrize("lat,lng", [(float("nan"), 0.0), (0.0, float("inf")), (float("-inf"), 1.0)])
def test_coordinate_rejects_non_finite_values(lat, lng):
    with pytest.raises(ValueError):
        Coordinate(lat, lng)
