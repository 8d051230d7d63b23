import math
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional

from waypoint import Waypoint, compute_distance

MOTION_SPEED_THRESHOLD = 1.7  # km/h


def _ratio(numerator: float, denominator: float) -> float:
    # Zero durations give inf (or NaN for 0/0) instead of raising.
    if denominator == 0:
        return math.nan if numerator == 0 else math.copysign(math.inf, numerator)
    return numerator / denominator


def _hours(delta: timedelta) -> float:
    return delta.total_seconds() / 3600.0


@dataclass
class TrackStatistics:
    """Aggregated statistics of a track."""
    length: float = 0.0  # km
    absolute_climb: float = 0.0  # m
    absolute_descent: float = 0.0  # m, positive
    time_in_motion: timedelta = timedelta(0)
    average_speed: float = 0.0  # km/h including breaks
    average_speed_in_motion: float = 0.0  # km/h

    def __str__(self) -> str:
        return (
            f"{self.length:.2f} km at avg. speed of {self.average_speed:.2f} km/h "
            f"({self.average_speed_in_motion:.2f} km/h in motion), "
            f"{self.absolute_climb:.1f} m up and {self.absolute_descent:.1f} m down."
        )


class Track:
    """A GPS track or route: an ordered list of waypoints plus derived statistics."""

    def __init__(
        self,
        name: Optional[str] = None,
        waypoints: Optional[List[Waypoint]] = None,
        is_route: bool = False,
    ):
        self.name = name
        self.waypoints: List[Waypoint] = list(waypoints) if waypoints else []
        self.is_route = is_route
        self.motion_speed_threshold = MOTION_SPEED_THRESHOLD
        self._statistics: Optional[TrackStatistics] = None
        self._speeds: List[float] = []

    def __len__(self) -> int:
        return len(self.waypoints)

    def __repr__(self) -> str:
        kind = "route" if self.is_route else "track"
        return f"<Track {kind} {self.name!r} with {len(self.waypoints)} waypoints>"

    @property
    def min_lat(self) -> float:
        return min(w.latitude for w in self.waypoints)

    @property
    def max_lat(self) -> float:
        return max(w.latitude for w in self.waypoints)

    @property
    def min_lon(self) -> float:
        return min(w.longitude for w in self.waypoints)

    @property
    def max_lon(self) -> float:
        return max(w.longitude for w in self.waypoints)

    @property
    def statistics(self) -> TrackStatistics:
        """
        Track statistics, computed on first access and cached.

        The cache is not invalidated when waypoints change; call
        ``reset_statistics`` after editing ``waypoints``.
        """
        if self._statistics is None:
            self._compute_statistics()
        return self._statistics

    @property
    def speeds(self) -> List[float]:
        """Speed in km/h from each waypoint to the next; the last entry is 0.0."""
        if self._statistics is None:
            self._compute_statistics()
        return list(self._speeds)

    def reset_statistics(self) -> None:
        self._statistics = None
        self._speeds = []

    def split_at_distance_jumps(self, distance_threshold: float) -> List["Track"]:
        """
        Split the track wherever two consecutive waypoints are more than
        ``distance_threshold`` meters apart.

        Sub-tracks are named ``<name>_<n>`` with n starting at 1. A track with
        fewer than two waypoints is returned unchanged as the only element.
        """
        if len(self.waypoints) <= 1:
            return [self]

        split_tracks: List[Track] = []

        def start_track() -> Track:
            track = Track(f"{self.name or ''}_{len(split_tracks) + 1}", is_route=self.is_route)
            split_tracks.append(track)
            return track

        current = start_track()
        last_index = len(self.waypoints) - 1
        for i, waypoint in enumerate(self.waypoints):
            current.waypoints.append(waypoint)
            if i == last_index:
                break
            distance, _ = compute_distance(waypoint, self.waypoints[i + 1])
            if distance > distance_threshold:
                current = start_track()
        return split_tracks

    def _compute_statistics(self) -> None:
        if not self.waypoints:
            raise ValueError(f"Track {self.name!r} has no waypoints")

        stats = TrackStatistics()
        speeds = [0.0] * len(self.waypoints)
        length = 0.0
        for i in range(len(self.waypoints) - 1):
            w1 = self.waypoints[i]
            w2 = self.waypoints[i + 1]
            distance, elevation_change = compute_distance(w1, w2)
            if elevation_change < 0:
                stats.absolute_descent -= elevation_change
            else:
                stats.absolute_climb += elevation_change
            time_between = w2.time - w1.time
            speeds[i] = _ratio(distance / 1000.0, _hours(time_between))
            if speeds[i] > self.motion_speed_threshold:
                stats.time_in_motion += time_between
            length += distance

        stats.length = length / 1000.0
        duration = self.waypoints[-1].time - self.waypoints[0].time
        stats.average_speed = _ratio(stats.length, _hours(duration))
        stats.average_speed_in_motion = _ratio(stats.length, _hours(stats.time_in_motion))
        self._statistics = stats
        self._speeds = speeds
