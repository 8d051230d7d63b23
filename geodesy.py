import math

from geopy.distance import geodesic


def surface_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in meters along the WGS-84 ellipsoid."""
    return geodesic((lat1, lon1), (lat2, lon2)).meters


def point_to_point_distance(surface: float, elevation_change: float = 0.0) -> float:
    """Combine a surface distance with an elevation change (both meters)."""
    return math.hypot(surface, elevation_change)
