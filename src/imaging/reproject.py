"""Mercator buffer -> equirectangular image, the way the globe shader samples it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from geo.projection import MAX_LATITUDE_RAD
from shared.constants import MERCATOR_V_EPSILON, OUTSIDE_MERCATOR_COLOR

if TYPE_CHECKING:
    from imaging.composite import CompositeBuffer

logger = logging.getLogger(__name__)


def mercator_source_rows(height: int, source_height: int) -> tuple[np.ndarray, np.ndarray]:
    """
    For each output row of an equirectangular image return the buffer row to
    sample and whether the row lies inside the Mercator latitude range.
    """
    rows = np.arange(height, dtype=np.float64)
    lat = (0.5 - (rows + 0.5) / height) * np.pi
    inside = np.abs(lat) <= MAX_LATITUDE_RAD
    lat = np.clip(lat, -MAX_LATITUDE_RAD, MAX_LATITUDE_RAD)
    v = 0.5 + 0.5 * np.log(np.tan(np.pi / 4 + lat / 2)) / np.pi
    v = np.clip(v, MERCATOR_V_EPSILON, 1.0 - MERCATOR_V_EPSILON)
    # V=1 is the north edge, buffer row 0 is north
    src = ((1.0 - v) * source_height).astype(np.intp)
    return np.clip(src, 0, source_height - 1), inside


def reproject_to_equirectangular(
    buffer_array: np.ndarray,
    height: int | None = None,
    *,
    outside_color: tuple[int, int, int] = OUTSIDE_MERCATOR_COLOR,
) -> np.ndarray:
    """
    Resample a Web Mercator raster into an equirectangular (plate carree) one.

    Columns map 1:1 (longitude is linear in both projections). Rows beyond the
    Mercator latitude limit are filled with ``outside_color``.
    """
    src_h, src_w = buffer_array.shape[:2]
    if height is None:
        height = src_w // 2
    if height <= 0:
        msg = f'height must be positive, got {height}'
        raise ValueError(msg)

    src_rows, inside = mercator_source_rows(height, src_h)
    out = buffer_array[src_rows]
    out[~inside] = outside_color
    return out


def render_equirectangular(
    buffer: CompositeBuffer,
    height: int | None = None,
) -> Image.Image:
    arr = reproject_to_equirectangular(buffer.array, height)
    logger.debug('Reprojected %dx%d buffer to %dx%d', *buffer.size, arr.shape[1], arr.shape[0])
    return Image.fromarray(arr)
