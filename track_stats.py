#!/usr/bin/env python3

import argparse
import logging
import sys
from typing import List, Optional

from errors import FormatError
from gpx_reader import read_tracks_from_file
from track import Track


def summarize(track: Track) -> str:
    name = track.name or ""
    if not track.waypoints:
        return f"{name}: \nno waypoints"
    return f"{name}: \n{track.statistics}"


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Print statistics of the tracks and routes in a GPX file')
    parser.add_argument('gpx_file', help='Path to the GPX file')
    parser.add_argument('--split-distance', type=float, default=None,
                        help='Split tracks where two waypoints are more than this many meters apart')
    args = parser.parse_args(argv)

    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        tracks = read_tracks_from_file(args.gpx_file)
    except (OSError, FormatError) as e:
        print(f"Cannot read GPX file {args.gpx_file}: {e}")
        return 1

    if args.split_distance is not None:
        tracks = [part for track in tracks for part in track.split_at_distance_jumps(args.split_distance)]

    for track in tracks:
        print(summarize(track))
        print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
