"""Error types shared by the GPX reader, tile provider and CLIs."""

from __future__ import annotations


class FormatError(ValueError):
    """Raised when GPX text (coordinates, timestamps, numbers, XML) is malformed."""


class ConfigurationError(ValueError):
    """Raised for invalid settings such as an out-of-range zoom level."""


class TileFetchError(OSError):
    """Raised when a map tile cannot be downloaded."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not fetch tile {url}: {reason}")
        self.url = url
        self.reason = reason


__all__ = [
    "FormatError",
    "ConfigurationError",
    "TileFetchError",
]
