"""Web Mercator conversions between geographic and scene coordinates."""

from __future__ import annotations

import math

MIN_LATITUDE = -85.05112878
MAX_LATITUDE = 85.05112878
DEFAULT_TILE_SIZE = 256


def clamp_latitude(lat: float) -> float:
    """Clamp a latitude to the range Web Mercator can represent."""
    return min(max(lat, MIN_LATITUDE), MAX_LATITUDE)


def normalize_longitude(lon: float) -> float:
    """Clamp a longitude to [-180, 180]."""
    return min(max(lon, -180.0), 180.0)


def lon_lat_to_scene(
    lon: float, lat: float, zoom: int, tile_size: int = DEFAULT_TILE_SIZE
) -> tuple[float, float]:
    """Project a longitude/latitude to pixel coordinates at ``zoom``."""
    lat = clamp_latitude(lat)
    lon = normalize_longitude(lon)
    n = 2.0**zoom
    xtile = (lon + 180.0) / 360.0 * n
    lat_rad = math.radians(lat)
    ytile = (1.0 - math.log(math.tan(lat_rad) + 1.0 / math.cos(lat_rad)) / math.pi) / 2.0 * n
    return xtile * tile_size, ytile * tile_size


def scene_to_lon_lat(
    x: float, y: float, zoom: int, tile_size: int = DEFAULT_TILE_SIZE
) -> tuple[float, float]:
    """Turn pixel coordinates at ``zoom`` back into a (longitude, latitude) pair."""
    n = 2.0**zoom
    lon = x / (tile_size * n) * 360.0 - 180.0
    ytile = y / tile_size
    mercator = math.pi * (1.0 - 2.0 * ytile / n)
    lat = math.degrees(math.atan(math.sinh(mercator)))
    return normalize_longitude(lon), clamp_latitude(lat)


def tile_key(z: int, x: int, y: int) -> str:
    """The ``z/x/y`` key identifying a tile."""
    return f"{z}/{x}/{y}"