"""Slippy-map tile math: tile centers, request URLs and viewpoint priorities."""

from __future__ import annotations

import math
from dataclasses import dataclass

from shared.constants import (
    REQUEST_SIZE,
    STATIC_MAPS_BASE,
    STATIC_MAPS_LANG,
    MapType,
)


@dataclass(frozen=True)
class TileCoordinate:
    x: int
    y: int
    z: int


@dataclass(frozen=True)
class GeoCoordinate:
    lat: float
    lon: float


def tiles_per_side(zoom: int) -> int:
    """Number of tiles along one side of the grid at ``zoom``."""
    return 2**zoom


def tile_to_geo(x: int, y: int, z: int) -> GeoCoordinate:
    """
    Return the geographic center of tile (x, y) at zoom z.

    Uses the standard Web Mercator tiling; the result always lies within
    lat [-85.06, 85.06] and lon [-180, 180).
    """
    n = tiles_per_side(z)
    center_x = x + 0.5
    center_y = y + 0.5
    lon = center_x / n * 360.0 - 180.0
    lat_rad = math.atan(math.sinh(math.pi * (1 - 2 * center_y / n)))
    return GeoCoordinate(lat=math.degrees(lat_rad), lon=lon)


def build_request_url(
    geo: GeoCoordinate,
    z: int,
    map_type: MapType | str,
    *,
    request_size: int = REQUEST_SIZE,
    lang: str = STATIC_MAPS_LANG,
    base_url: str = STATIC_MAPS_BASE,
) -> str:
    layer = map_type.value if isinstance(map_type, MapType) else map_type
    return (
        f'{base_url}?ll={geo.lon},{geo.lat}&z={z}&l={layer}'
        f'&size={request_size},{request_size}&lang={lang}'
    )


def viewpoint_center_x(viewpoint_lon_deg: float, n: int) -> float:
    """Map a viewpoint longitude onto the grid X axis (fractional tile units)."""
    normalized = (viewpoint_lon_deg + 180.0) / 360.0
    normalized -= math.floor(normalized)
    return normalized * n


def horizontal_distance(x: int, center_x: float, n: int) -> float:
    # Сетка замкнута по горизонтали
    dist = abs(x - center_x)
    return min(dist, n - dist)


def vertical_distance(y: int, n: int) -> float:
    return abs(y - n / 2 - 0.5)


def tile_priority(x: int, y: int, center_x: float, n: int) -> float:
    """Fetch priority of a slot; lower is more urgent, poles weigh half."""
    return horizontal_distance(x, center_x, n) + 0.5 * vertical_distance(y, n)


def is_admitted(dist_x: float, n: int) -> bool:
    """Only tiles within slightly more than the visible hemisphere are scheduled."""
    return dist_x < n / 2 + 1
