"""Global pytest fixtures & helpers.

Adds project root to path and provides GPX samples, waypoint factories and an
offline tile provider shared by the test modules.
"""
from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta

import pytest
from PIL import Image

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from errors import TileFetchError  # noqa: E402
from waypoint import Waypoint  # noqa: E402

T0 = datetime(2020, 1, 2, 3, 4, 5)

SAMPLE_GPX = """<?xml version="1.0" encoding="UTF-8"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">
  <metadata><name>Metadata name</name><time>2020-01-02T00:00:00Z</time></metadata>
  <wpt lat="1.0" lon="1.0"><name>Ignored waypoint</name></wpt>
  <trk>
    <name> Morning ride </name>
    <trkseg>
      <trkpt lat="47.0" lon="8.0"><ele>400.0</ele><time>2020-01-02T03:04:05Z</time></trkpt>
      <trkpt lat="47.001" lon="8.0"><ele>410.5</ele><time>2020-01-02T03:05:05.250Z</time></trkpt>
    </trkseg>
    <trkseg>
      <trkpt lat="47.002" lon="8.0"><ele>405.0</ele><time>2020-01-02T03:06:05Z</time><name>Summit</name></trkpt>
    </trkseg>
  </trk>
  <rte>
    <name>Planned</name>
    <rtept lat="47.1" lon="8.1"/>
    <rtept lat="47.2" lon="8.2"><ele>500</ele></rtept>
  </rte>
</gpx>
"""


def make_waypoint(lat=0.0, lon=0.0, seconds=0, elevation=None, name=None):
    return Waypoint(latitude=lat, longitude=lon, elevation=elevation,
                    time=T0 + timedelta(seconds=seconds), name=name)


class FakeTileProvider:
    """Tile provider returning solid white tiles and recording requests."""

    def __init__(self, tile_size=256, fail_on=None):
        self.tile_size = tile_size
        self.fail_on = fail_on
        self.requests = []

    def get_tile(self, x, y, zoom):
        self.requests.append((x, y, zoom))
        if self.fail_on == (x, y, zoom):
            raise TileFetchError(f"https://tiles.test/{zoom}/{x}/{y}.png", "404 Not Found")
        return Image.new("RGB", (self.tile_size, self.tile_size), (255, 255, 255))


@pytest.fixture
def sample_gpx(tmp_path):
    path = tmp_path / "sample.gpx"
    path.write_text(SAMPLE_GPX, encoding="utf-8")
    return str(path)


@pytest.fixture
def fake_provider():
    return FakeTileProvider()


@pytest.fixture
def wp():
    """Factory for waypoints timed in seconds after a common start."""
    return make_waypoint


@pytest.fixture
def tile_provider_factory():
    return FakeTileProvider
