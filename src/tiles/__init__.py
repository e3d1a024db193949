"""Tile streaming.

This module provides:
- TileStateTable: per-slot load state of the target grid
- TileScheduler: viewpoint-priority queue with a bounded fetch pool
- HttpImageFetcher: aiohttp image fetcher
"""

from tiles.fetcher import HttpImageFetcher, ImageFetcher, TileFetchError
from tiles.scheduler import TileRequest, TileScheduler
from tiles.state import TileLoadState, TileStateTable

__all__ = [
    'HttpImageFetcher',
    'ImageFetcher',
    'TileFetchError',
    'TileLoadState',
    'TileRequest',
    'TileScheduler',
    'TileStateTable',
]
