import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from errors import FormatError
from geodesy import point_to_point_distance, surface_distance

_TIME_SEPARATORS = re.compile(r"[-T:Z]")
_DIGITS = re.compile(r"\d+")


@dataclass
class Waypoint:
    """Class representing a single GPS fix of a track or route."""
    latitude: float = 0.0
    longitude: float = 0.0
    elevation: Optional[float] = None  # None when the file has no <ele>
    time: datetime = datetime.min
    name: Optional[str] = None

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None and not math.isnan(self.elevation)


def _to_int(field: str, text: str) -> int:
    if not _DIGITS.fullmatch(field):
        raise FormatError(f"Invalid timestamp {text!r}: {field!r} is not a number")
    return int(field)


def parse_gpx_time(text: str) -> datetime:
    """
    Parse a GPX timestamp with the fixed grammar ``YYYY-MM-DD[THH:MM:SS[.fff]][Z]``.

    Only a literal ``Z`` is accepted as time zone designator. Fractional seconds
    are truncated to at most three digits and used as milliseconds as written,
    so ``.1234`` gives 123 ms and ``.5`` gives 5 ms.

    Raises:
        FormatError: if the text does not follow the grammar.
    """
    elems = _TIME_SEPARATORS.split(text)
    if text.endswith("Z"):
        elems = elems[:-1]

    fraction = "0"
    if len(elems) == 3:
        hour_min_sec = ["0", "0", "0"]
    elif len(elems) == 6:
        hour_min_sec = elems[3:6]
        if "." in hour_min_sec[2]:
            seconds, fraction = hour_min_sec[2].split(".", 1)
            hour_min_sec[2] = seconds
            fraction = fraction[:3]
    else:
        raise FormatError(f"Invalid timestamp {text!r}: expected 3 or 6 components, got {len(elems)}")

    year, month, day = (_to_int(e, text) for e in elems[:3])
    hour, minute, second = (_to_int(e, text) for e in hour_min_sec)
    millisecond = _to_int(fraction, text)
    try:
        return datetime(year, month, day, hour, minute, second, millisecond * 1000)
    except ValueError as e:
        raise FormatError(f"Invalid timestamp {text!r}: {e}") from e


def _parse_float(label: str, text: Optional[str]) -> Optional[float]:
    if text is None or not text.strip():
        return None
    try:
        return float(text.strip())
    except ValueError as e:
        raise FormatError(f"Invalid {label} value {text!r}") from e


def parse_waypoint(
    lat_text: Optional[str] = None,
    lon_text: Optional[str] = None,
    ele_text: Optional[str] = None,
    time_text: Optional[str] = None,
    name: Optional[str] = None,
) -> Waypoint:
    """
    Build a Waypoint from the raw attribute and child-element texts of a
    ``<trkpt>`` or ``<rtept>``. Missing values keep the Waypoint defaults.
    """
    waypoint = Waypoint(name=name)
    latitude = _parse_float("latitude", lat_text)
    if latitude is not None:
        waypoint.latitude = latitude
    longitude = _parse_float("longitude", lon_text)
    if longitude is not None:
        waypoint.longitude = longitude
    waypoint.elevation = _parse_float("elevation", ele_text)
    if time_text is not None and time_text.strip():
        waypoint.time = parse_gpx_time(time_text.strip())
    return waypoint


def compute_distance(w1: Waypoint, w2: Waypoint) -> Tuple[float, float]:
    """
    Distance between two waypoints in meters.

    Returns:
        (distance, elevation_change): the 3D point-to-point distance and the
        elevation change from ``w1`` to ``w2``. The elevation change is 0 when
        either elevation is unknown.
    """
    surface = surface_distance(w1.latitude, w1.longitude, w2.latitude, w2.longitude)
    elevation_change = 0.0
    if w1.has_elevation and w2.has_elevation:
        elevation_change = w2.elevation - w1.elevation
    return point_to_point_distance(surface, elevation_change), elevation_change
