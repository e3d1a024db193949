"""Композитный буфер: единый растр, в который рисуются тайлы."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from shared.constants import BACKGROUND_COLOR, Resample

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_PIL_RESAMPLE = {
    Resample.NEAREST: Image.Resampling.NEAREST,
    Resample.BILINEAR: Image.Resampling.BILINEAR,
}


def crop_rect_for(request_size: int, tile_size: int) -> tuple[int, int, int, int]:
    """
    Прямоугольник центрального тайла в ответе провайдера.

    Returns:
        (left, top, width, height); рамка шириной (request_size - tile_size) / 2
        срезается со всех сторон.

    """
    if request_size < tile_size:
        msg = f'request_size ({request_size}) must be >= tile_size ({tile_size})'
        raise ValueError(msg)
    offset = (request_size - tile_size) // 2
    return offset, offset, tile_size, tile_size


class CompositeBuffer:
    """
    Квадратный RGB-растр фиксированного размера.

    Attributes:
        side: Сторона растра в пикселях
        background: Цвет заливки до загрузки тайлов (RGB)

    Рендерер только читает ``array`` и сбрасывает флаг ``clear_dirty()`` после
    перезагрузки текстуры; запись идёт исключительно через draw_tile_image().

    """

    def __init__(
        self,
        side: int,
        background: tuple[int, int, int] = BACKGROUND_COLOR,
        resample: Resample = Resample.BILINEAR,
    ) -> None:
        self.side = side
        self.background = background
        self.resample = resample
        self._dirty = False
        self.initialize()

    def initialize(self) -> None:
        """Выделяет растр и заливает его фоном целиком."""
        self._array = np.empty((self.side, self.side, 3), dtype=np.uint8)
        self._array[:] = self.background
        self._dirty = True
        logger.debug(
            'CompositeBuffer created: %dx%d, background=%s',
            self.side,
            self.side,
            self.background,
        )

    @property
    def array(self) -> np.ndarray:
        """Read-only view of the raster, shape (side, side, 3), uint8."""
        view = self._array.view()
        view.flags.writeable = False
        return view

    @property
    def size(self) -> tuple[int, int]:
        """Размер (width, height) как у PIL.Image."""
        return (self.side, self.side)

    def draw_tile_image(
        self,
        image: Image.Image,
        dest_x: int,
        dest_y: int,
        dest_size: int,
        source_crop_rect: tuple[int, int, int, int],
        *,
        keep: Iterable[tuple[int, int, int, int]] = (),
    ) -> None:
        """
        Вырезает source_crop_rect из image и рисует его в квадрат буфера.

        Args:
            image: Декодированный тайл
            dest_x: X левого верхнего угла в буфере
            dest_y: Y левого верхнего угла в буфере
            dest_size: Сторона квадрата назначения (масштабирование)
            source_crop_rect: (left, top, width, height) в координатах image
            keep: Прямоугольники буфера (x0, y0, x1, y1), которые не перезаписываются

        """
        left, top, width, height = source_crop_rect
        tile = image.crop((left, top, left + width, top + height))
        if tile.mode != 'RGB':
            tile = tile.convert('RGB')
        if tile.size != (dest_size, dest_size):
            tile = tile.resize((dest_size, dest_size), _PIL_RESAMPLE[self.resample])
        tile_arr = np.asarray(tile, dtype=np.uint8)

        # Пересечение с границами буфера
        x0 = max(dest_x, 0)
        y0 = max(dest_y, 0)
        x1 = min(dest_x + dest_size, self.side)
        y1 = min(dest_y + dest_size, self.side)
        if x0 >= x1 or y0 >= y1:
            logger.debug(
                'Tile at (%d, %d) size %d is outside the buffer', dest_x, dest_y, dest_size
            )
            return

        preserved = [
            (rect, self._array[rect[1] : rect[3], rect[0] : rect[2]].copy()) for rect in keep
        ]
        self._array[y0:y1, x0:x1] = tile_arr[
            y0 - dest_y : y1 - dest_y, x0 - dest_x : x1 - dest_x
        ]
        for (kx0, ky0, kx1, ky1), pixels in preserved:
            self._array[ky0:ky1, kx0:kx1] = pixels
        self._dirty = True

    def is_dirty(self) -> bool:
        return self._dirty

    def clear_dirty(self) -> None:
        self._dirty = False

    def to_image(self) -> Image.Image:
        """Копия растра как PIL.Image (RGB)."""
        return Image.fromarray(self._array.copy())
