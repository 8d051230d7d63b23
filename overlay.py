import logging
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw

from map_tiles import MapTileProvider, TileGrid
from track import Track

logger = logging.getLogger(__name__)

TRACK_COLOR = (255, 0, 0)
# (line width, alpha): a wide faint stroke under a narrow stronger one
TRACK_STROKES = ((3, 63), (1, 127))


class TrackMap:
    """Map image stitched from tiles, with tracks drawn on top of it."""

    def __init__(self, provider: MapTileProvider, min_lat: float, max_lat: float,
                 min_lon: float, max_lon: float, zoom: int):
        self.provider = provider
        self.grid = TileGrid.from_bounds(min_lat, max_lat, min_lon, max_lon, zoom)
        self.image: Optional[Image.Image] = None
        self._create_map_image()

    @classmethod
    def from_tracks(cls, provider: MapTileProvider, tracks: Iterable[Track], zoom: int) -> "TrackMap":
        """Create a map covering every waypoint of ``tracks``."""
        tracks = [t for t in tracks if t.waypoints]
        if not tracks:
            raise ValueError("No waypoints to draw")
        return cls(
            provider,
            min_lat=min(t.min_lat for t in tracks),
            max_lat=max(t.max_lat for t in tracks),
            min_lon=min(t.min_lon for t in tracks),
            max_lon=max(t.max_lon for t in tracks),
            zoom=zoom,
        )

    def _create_map_image(self) -> None:
        grid = self.grid
        logger.info("Stitching %dx%d tiles at zoom %d", grid.tiles_x, grid.tiles_y, grid.zoom)
        composite = None
        for x, y in grid.tiles():
            tile = self.provider.get_tile(x, y, grid.zoom)
            if composite is None:
                # all tiles of a server share the size of the first one
                grid = grid.with_tile_size(*tile.size)
                composite = Image.new('RGB', grid.pixel_size)
            composite.paste(tile.convert('RGB'), grid.tile_offset(x, y))
        self.grid = grid
        self.image = composite

    def to_pixel(self, lat: float, lon: float) -> Tuple[float, float]:
        """(column, row) of a coordinate in the map image."""
        return (self.grid.col(lon), self.grid.row(lat))

    def draw_track(self, track: Track, color: Tuple[int, int, int] = TRACK_COLOR) -> None:
        draw = ImageDraw.Draw(self.image, 'RGBA')
        previous = None
        for waypoint in track.waypoints:
            current = self.to_pixel(waypoint.latitude, waypoint.longitude)
            if previous is not None:
                for width, alpha in TRACK_STROKES:
                    draw.line([previous, current], fill=color + (alpha,), width=width)
            previous = current

    def save(self, path: str) -> None:
        self.image.save(path)
        logger.info("Map saved to %s", path)
