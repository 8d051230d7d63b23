#!/usr/bin/env python3

import argparse
import logging
import os
import sys
from typing import List, Optional

from config import DEFAULT_EMAIL_FILE, RenderConfig, load_email
from errors import ConfigurationError, FormatError
from gpx_reader import find_gpx_files, read_tracks_from_file
from map_tiles import MapTileProvider
from overlay import TrackMap
from track import Track


def _setup_logging() -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def output_path(input_path: str, zoom: int) -> str:
    """
    Image path next to the input: ``<dir>/<stem><zoom>.png`` for a file and
    ``<folder>/<folder name><zoom>.png`` for a folder, zoom padded to two digits.
    """
    input_path = os.path.normpath(input_path)
    if os.path.isdir(input_path):
        directory = input_path
        stem = os.path.basename(os.path.abspath(input_path))
    else:
        directory = os.path.dirname(input_path)
        stem = os.path.splitext(os.path.basename(input_path))[0]
    return os.path.join(directory, f"{stem}{zoom:02d}.png")


def load_tracks(input_path: str) -> List[Track]:
    """
    Read all tracks of a GPX file, or of every GPX file in a folder.

    In a folder, files that cannot be read are reported and skipped.
    """
    if not os.path.isdir(input_path):
        return read_tracks_from_file(input_path)

    tracks: List[Track] = []
    for gpx_path in find_gpx_files(input_path):
        try:
            tracks.extend(read_tracks_from_file(gpx_path))
        except (OSError, FormatError) as e:
            print(f"Cannot read GPX file {gpx_path}: {e}")
    return tracks


def render(input_path: str, config: RenderConfig) -> str:
    """Render the tracks of ``input_path`` onto a map and return the image path."""
    config.validate()
    if not os.path.exists(input_path):
        raise FileNotFoundError(f"Cannot find file {input_path}")

    tracks = load_tracks(input_path)
    provider = MapTileProvider(
        config.email,
        cache_dir=config.cache_dir,
        base_url=config.tile_url,
        timeout=config.timeout_seconds,
        request_delay=config.request_delay_seconds,
    )
    track_map = TrackMap.from_tracks(provider, tracks, config.zoom)
    for track in tracks:
        track_map.draw_track(track)

    path = output_path(input_path, config.zoom)
    track_map.save(path)
    return path


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Draw the tracks of GPX files on an OpenStreetMap map')
    parser.add_argument('gpx_path', help='Path to a GPX file or a folder of GPX files')
    parser.add_argument('zoom', type=int, help='Zoom level of the map tiles (0-19)')
    parser.add_argument('cache_dir', nargs='?', default=None, help='Directory to cache downloaded tiles in')
    parser.add_argument('--email-file', default=DEFAULT_EMAIL_FILE,
                        help='File containing the contact e-mail sent to the tile server')
    args = parser.parse_args(argv)

    _setup_logging()
    try:
        email = load_email(args.email_file)
        config = RenderConfig.from_env(email, args.zoom, args.cache_dir)
        path = render(args.gpx_path, config)
    except ConfigurationError as e:
        print(str(e))
        return 1
    except FormatError as e:
        print(f"Cannot read GPX file {args.gpx_path}: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Map written to {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
