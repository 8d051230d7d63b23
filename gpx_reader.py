import logging
import os
import xml.etree.ElementTree as ET
from typing import List, Optional

from errors import FormatError
from track import Track
from waypoint import Waypoint, parse_waypoint

logger = logging.getLogger(__name__)

_TRACK_TAGS = ("trk", "rte")
_POINT_TAGS = ("trkpt", "rtept")


def _local_name(tag: str) -> str:
    """Strip the XML namespace, e.g. ``{http://www.topografix.com/GPX/1/1}trk`` -> ``trk``."""
    return tag.rsplit("}", 1)[-1]


def _child_text(elem: ET.Element, name: str) -> Optional[str]:
    for child in elem:
        if _local_name(child.tag) == name:
            return child.text
    return None


def _read_waypoint(elem: ET.Element) -> Waypoint:
    name = _child_text(elem, "name")
    return parse_waypoint(
        lat_text=elem.get("lat"),
        lon_text=elem.get("lon"),
        ele_text=_child_text(elem, "ele"),
        time_text=_child_text(elem, "time"),
        name=name.strip() if name else None,
    )


def read_tracks_from_file(gpx_path: str) -> List[Track]:
    """
    Read all tracks and routes of a GPX file.

    Only ``<trk>`` and ``<rte>`` are read. Track segments are joined into one
    track; waypoints (``<wpt>``), metadata and extensions are ignored.

    Args:
        gpx_path (str): Path to the GPX file

    Returns:
        list[Track]: One Track per ``<trk>``/``<rte>`` in file order.

    Raises:
        FileNotFoundError: if the file does not exist.
        FormatError: if the XML or any value in it is malformed.
    """
    tracks: List[Track] = []
    current: Optional[Track] = None
    path: List[str] = []
    open_elems: List[ET.Element] = []

    try:
        for event, elem in ET.iterparse(gpx_path, events=("start", "end")):
            tag = _local_name(elem.tag)
            if event == "start":
                path.append(tag)
                open_elems.append(elem)
                if tag in _TRACK_TAGS:
                    current = Track(is_route=(tag == "rte"))
                    tracks.append(current)
                continue

            path.pop()
            open_elems.pop()
            if current is None:
                continue
            if tag in _POINT_TAGS:
                current.waypoints.append(_read_waypoint(elem))
            elif tag == "name" and path and path[-1] in _TRACK_TAGS:
                current.name = (elem.text or "").strip()
            elif tag in _TRACK_TAGS:
                current = None
            else:
                continue
            # Detach finished points and tracks so the tree does not grow with the file.
            elem.clear()
            if open_elems:
                open_elems[-1].remove(elem)
    except ET.ParseError as e:
        raise FormatError(f"Malformed GPX file {gpx_path}: {e}") from e
    except FormatError as e:
        raise FormatError(f"{gpx_path}: {e}") from e

    logger.info("Read %d track(s) from %s", len(tracks), gpx_path)
    return tracks


def find_gpx_files(path: str) -> List[str]:
    """Return ``path`` itself for a file, or the ``*.gpx`` files of a folder sorted by name."""
    if os.path.isdir(path):
        return sorted(
            os.path.join(path, entry)
            for entry in os.listdir(path)
            if entry.lower().endswith(".gpx") and os.path.isfile(os.path.join(path, entry))
        )
    if not os.path.exists(path):
        raise FileNotFoundError(f"Cannot find file {path}")
    return [path]
