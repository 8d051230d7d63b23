import math
from datetime import datetime

import pytest

from errors import FormatError
from waypoint import Waypoint, compute_distance, parse_gpx_time, parse_waypoint


def test_parse_time_truncates_fraction_to_milliseconds() -> None:
    parsed = parse_gpx_time("2020-01-02T03:04:05.1234Z")
    assert parsed == datetime(2020, 1, 2, 3, 4, 5, 123000)
    assert parsed.tzinfo is None


def test_parse_time_short_fraction_is_used_as_is() -> None:
    assert parse_gpx_time("2020-01-02T03:04:05.12Z").microsecond == 12000
    assert parse_gpx_time("2020-01-02T03:04:05.5Z").microsecond == 5000


def test_parse_time_date_only_is_midnight() -> None:
    assert parse_gpx_time("2020-01-02") == datetime(2020, 1, 2)


def test_parse_time_without_zone_designator() -> None:
    assert parse_gpx_time("2021-12-31T23:59:58") == datetime(2021, 12, 31, 23, 59, 58)


@pytest.mark.parametrize(
    "text",
    [
        "2020-01-02T03:04:05+01:00",
        "2020-01-02T03:04",
        "2020-01",
        "2020-01-xxT03:04:05Z",
        "2020-13-02T03:04:05Z",
        "2020-01-02T03:04:05.Z",
        "2020-01-02T03:04:05.abcZ",
        "",
    ],
)
def test_parse_time_rejects_other_shapes(text) -> None:
    with pytest.raises(FormatError):
        parse_gpx_time(text)


def test_parse_waypoint_defaults_for_missing_values() -> None:
    waypoint = parse_waypoint()
    assert waypoint.latitude == 0.0
    assert waypoint.longitude == 0.0
    assert waypoint.elevation is None
    assert not waypoint.has_elevation
    assert waypoint.time == datetime.min


def test_parse_waypoint_reads_all_fields() -> None:
    waypoint = parse_waypoint("47.5", "-8.25", " 412.5 ", " 2020-01-02T03:04:05Z ", "Start")
    assert waypoint == Waypoint(47.5, -8.25, 412.5, datetime(2020, 1, 2, 3, 4, 5), "Start")


@pytest.mark.parametrize("field", ["lat_text", "lon_text", "ele_text"])
def test_parse_waypoint_rejects_bad_numbers(field) -> None:
    with pytest.raises(FormatError):
        parse_waypoint(**{field: "12,5"})


def test_nan_elevation_counts_as_unknown() -> None:
    assert not Waypoint(elevation=math.nan).has_elevation


def test_distance_of_identical_points_is_zero(wp) -> None:
    a = wp(47.0, 8.0, elevation=100.0)
    distance, change = compute_distance(a, wp(47.0, 8.0, elevation=100.0))
    assert distance == pytest.approx(0.0, abs=1e-9)
    assert change == 0.0


def test_distance_of_identical_coordinates_is_elevation_change(wp) -> None:
    distance, change = compute_distance(wp(47.0, 8.0, elevation=100.0), wp(47.0, 8.0, elevation=130.0))
    assert change == 30.0
    assert distance == pytest.approx(30.0)


def test_distance_is_symmetric(wp) -> None:
    a = wp(47.0, 8.0, elevation=400.0)
    b = wp(47.01, 8.02, elevation=380.0)
    ab, change_ab = compute_distance(a, b)
    ba, change_ba = compute_distance(b, a)
    assert ab == pytest.approx(ba)
    assert change_ab == -change_ba


def test_unknown_elevation_has_no_vertical_component(wp) -> None:
    a = wp(0.0, 0.0, elevation=None)
    b = wp(0.0, 0.001, elevation=1000.0)
    distance, change = compute_distance(a, b)
    assert change == 0.0
    # one thousandth of a degree of longitude on the equator
    assert distance == pytest.approx(111.32, abs=0.01)
