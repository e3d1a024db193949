"""Imaging - composite raster and reprojection."""
from imaging.composite import CompositeBuffer, crop_rect_for
from imaging.reproject import render_equirectangular, reproject_to_equirectangular

__all__ = [
    'CompositeBuffer',
    'crop_rect_for',
    'render_equirectangular',
    'reproject_to_equirectangular',
]
