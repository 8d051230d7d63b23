"""Rendering configuration: CLI values, environment overrides and the contact e-mail file."""

import os
from dataclasses import dataclass
from typing import Optional

from errors import ConfigurationError
from map_tiles import DEFAULT_TILE_URL, validate_zoom

DEFAULT_EMAIL_FILE = "email.txt"


def parse_env_float(name, default):
    """Parse a float environment value with fallback."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError):
        return default


def get_tile_url():
    return os.getenv("GPXRENDER_TILE_URL", "").strip() or DEFAULT_TILE_URL


def get_timeout_seconds():
    return max(1.0, parse_env_float("GPXRENDER_TIMEOUT_SECONDS", 10.0))


def get_request_delay_seconds():
    return max(0.0, parse_env_float("GPXRENDER_REQUEST_DELAY_SECONDS", 0.1))


def load_email(path=DEFAULT_EMAIL_FILE):
    """
    Return the contact address for the tile server.

    `GPXRENDER_EMAIL` takes precedence over the file.
    """
    email = os.getenv("GPXRENDER_EMAIL", "").strip()
    if email:
        return email
    try:
        with open(path, "r", encoding="utf-8") as f:
            email = f.read().strip()
    except OSError as e:
        raise ConfigurationError(
            f'Please create a file called "{path}" that contains your e-mail address. '
            "It is required for the Open Street Map API."
        ) from e
    if not email:
        raise ConfigurationError(f'"{path}" is empty; it must contain your e-mail address.')
    return email


@dataclass
class RenderConfig:
    email: str
    zoom: int
    cache_dir: Optional[str] = None
    tile_url: str = DEFAULT_TILE_URL
    timeout_seconds: float = 10.0
    request_delay_seconds: float = 0.1

    @classmethod
    def from_env(cls, email, zoom, cache_dir=None):
        return cls(
            email=email,
            zoom=zoom,
            cache_dir=cache_dir,
            tile_url=get_tile_url(),
            timeout_seconds=get_timeout_seconds(),
            request_delay_seconds=get_request_delay_seconds(),
        )

    def validate(self):
        """Check settings before any tile is requested."""
        validate_zoom(self.zoom)
        if self.cache_dir:
            try:
                os.makedirs(self.cache_dir, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(f"Could not create cache directory {self.cache_dir}") from e
            if not os.access(self.cache_dir, os.W_OK):
                raise ConfigurationError(f"Cache directory {self.cache_dir} is not writable")
        return self
