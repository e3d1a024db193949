"""Geo module - tile math and projection helpers."""

from geo.projection import (
    latitude_to_mercator_v,
    rotation_to_longitude,
)
from geo.tile_math import (
    GeoCoordinate,
    TileCoordinate,
    build_request_url,
    tile_priority,
    tile_to_geo,
    tiles_per_side,
    viewpoint_center_x,
)

__all__ = [
    'GeoCoordinate',
    'TileCoordinate',
    'build_request_url',
    'latitude_to_mercator_v',
    'rotation_to_longitude',
    'tile_priority',
    'tile_to_geo',
    'tiles_per_side',
    'viewpoint_center_x',
]
