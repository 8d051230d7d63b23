import io
import logging
import math
import os
import time
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import requests
from PIL import Image

from errors import ConfigurationError, TileFetchError

logger = logging.getLogger(__name__)

MIN_ZOOM = 0
MAX_ZOOM = 19
TILE_SIZE = 256
DEFAULT_TILE_URL = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"


def validate_zoom(zoom: int) -> int:
    """Return ``zoom`` if it is an integer zoom level in [0, 19]."""
    if isinstance(zoom, bool) or not isinstance(zoom, int) or not MIN_ZOOM <= zoom <= MAX_ZOOM:
        raise ConfigurationError(f"Zoom level must be in [{MIN_ZOOM};{MAX_ZOOM}], got {zoom!r}.")
    return zoom


def lat_to_tile_y(lat: float, zoom: int) -> float:
    """Unfloored y tile number of a latitude; the fraction is the position inside the tile."""
    lat_rad = math.radians(lat)
    n = 2.0 ** zoom
    return (1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n


def lon_to_tile_x(lon: float, zoom: int) -> float:
    n = 2.0 ** zoom
    return (lon + 180.0) / 360.0 * n


def lat_lon_to_tile(lat: float, lon: float, zoom: int) -> Tuple[int, int]:
    """Convert latitude/longitude to tile coordinates."""
    return (math.floor(lon_to_tile_x(lon, zoom)), math.floor(lat_to_tile_y(lat, zoom)))


def tile_to_lat_lon(x: int, y: int, zoom: int) -> Tuple[float, float]:
    """Convert tile coordinates to latitude/longitude (NW corner)."""
    n = 2.0 ** zoom
    lon = x / n * 360.0 - 180.0
    lat_rad = math.atan(math.sinh(math.pi * (1 - 2 * y / n)))
    lat = math.degrees(lat_rad)
    return (lat, lon)


@dataclass(frozen=True)
class TileGrid:
    """Rectangular range of tiles at one zoom level and the pixel placement inside it."""
    zoom: int
    min_x: int
    min_y: int
    max_x: int
    max_y: int
    tile_width: int = TILE_SIZE
    tile_height: int = TILE_SIZE

    @classmethod
    def from_bounds(cls, min_lat: float, max_lat: float,
                    min_lon: float, max_lon: float, zoom: int) -> "TileGrid":
        """Smallest tile range covering the bounding box."""
        validate_zoom(zoom)
        # y grows from north to south, so the NW corner gives the minimum tile
        min_x, min_y = lat_lon_to_tile(max_lat, min_lon, zoom)
        max_x, max_y = lat_lon_to_tile(min_lat, max_lon, zoom)
        return cls(zoom, min_x, min_y, max_x, max_y)

    def with_tile_size(self, width: int, height: int) -> "TileGrid":
        return TileGrid(self.zoom, self.min_x, self.min_y, self.max_x, self.max_y, width, height)

    @property
    def tiles_x(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def tiles_y(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return (self.tiles_x * self.tile_width, self.tiles_y * self.tile_height)

    def tiles(self) -> Iterator[Tuple[int, int]]:
        """Tile indices row by row, north to south and west to east."""
        for y in range(self.min_y, self.max_y + 1):
            for x in range(self.min_x, self.max_x + 1):
                yield x, y

    def tile_offset(self, x: int, y: int) -> Tuple[int, int]:
        """Pixel position of a tile's top-left corner in the stitched image."""
        return ((x - self.min_x) * self.tile_width, (y - self.min_y) * self.tile_height)

    def row(self, lat: float) -> float:
        tile_num = lat_to_tile_y(lat, self.zoom)
        tile_idx = math.floor(tile_num)
        return (tile_idx - self.min_y) * self.tile_height + (tile_num - tile_idx) * self.tile_height

    def col(self, lon: float) -> float:
        _, lon_start = tile_to_lat_lon(self.min_x, self.min_y, self.zoom)
        _, lon_next = tile_to_lat_lon(self.min_x + 1, self.min_y, self.zoom)
        lon_increment = (lon_next - lon_start) / self.tile_width
        return (lon - lon_start) / lon_increment


class MapTileProvider:
    """Handle downloading and caching of map tiles from OpenStreetMap."""

    def __init__(self, email: str, cache_dir: Optional[str] = None,
                 base_url: str = DEFAULT_TILE_URL, timeout: float = 10.0,
                 request_delay: float = 0.1, session: Optional[requests.Session] = None):
        if not email or not email.strip():
            raise ConfigurationError("A contact e-mail address is required by the OSM tile usage policy.")
        self.cache_dir = cache_dir or None
        self.base_url = base_url
        self.timeout = timeout
        self.request_delay = request_delay
        self.session = session
        self.headers = {
            'User-Agent': f'gpx-track-renderer/1.0 contact {email.strip()}'  # Required by OSM tile usage policy
        }
        if self.cache_dir:
            try:
                os.makedirs(self.cache_dir, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(f"Could not create cache directory {self.cache_dir}") from e

    def cache_path(self, x: int, y: int, zoom: int) -> Optional[str]:
        if not self.cache_dir:
            return None
        return os.path.join(self.cache_dir, f"{zoom}_{x}_{y}.png")

    def get_tile(self, x: int, y: int, zoom: int) -> Image.Image:
        """Download a tile or retrieve from cache."""
        cache_path = self.cache_path(x, y, zoom)
        if cache_path and os.path.exists(cache_path):
            logger.debug("Tile %d/%d/%d from cache", zoom, x, y)
            with Image.open(cache_path) as cached:
                cached.load()
                return cached.copy()

        url = self.base_url.format(z=zoom, x=x, y=y)
        logger.debug("Downloading tile %s", url)
        try:
            http = self.session or requests
            response = http.get(url, headers=self.headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise TileFetchError(url, str(e)) from e

        try:
            tile = Image.open(io.BytesIO(response.content))
            tile.load()
        except OSError as e:
            raise TileFetchError(url, f"not an image ({e})") from e

        if cache_path:
            with open(cache_path, 'wb') as f:
                f.write(response.content)

        # Be respectful to OSM servers
        if self.request_delay > 0:
            time.sleep(self.request_delay)
        return tile
