"""
Tile stream manager.

Owns the composite buffer and the target-zoom load-state table, fills the
buffer with a coarse base layer, then streams target tiles by viewpoint
priority through the scheduler.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from domain.models import StreamSettings
from geo.tile_math import build_request_url, tile_to_geo
from imaging.composite import CompositeBuffer, crop_rect_for
from tiles.fetcher import TileFetchError
from tiles.scheduler import TileScheduler
from tiles.state import TileLoadState, TileStateTable

if TYPE_CHECKING:
    from collections.abc import Callable

    from PIL import Image

    from tiles.fetcher import ImageFetcher
    from tiles.scheduler import TileRequest

logger = logging.getLogger(__name__)


class TileStreamManager:
    def __init__(
        self,
        fetcher: ImageFetcher,
        settings: StreamSettings | None = None,
        *,
        on_update: Callable[[], None] | None = None,
    ) -> None:
        self.settings = settings or StreamSettings()
        self.fetcher = fetcher
        self._on_update = on_update
        self._destroyed = False

        s = self.settings
        self._crop_rect = crop_rect_for(s.request_size, s.tile_size)
        self._buffer = CompositeBuffer(
            s.buffer_side_px, background=s.background_color, resample=s.resample
        )
        self._states = TileStateTable(s.tiles_per_side)
        self._base_loaded = 0
        self._base_started = False
        self._scheduler = TileScheduler(
            self._states,
            fetcher,
            zoom=s.target_zoom,
            on_tile_loaded=self._draw_target_tile,
            map_type=s.map_type,
            max_concurrency=s.max_concurrency,
            request_size=s.request_size,
            lang=s.lang,
            base_url=s.base_url,
        )
        logger.info(
            'Tile stream: %s, target z=%d (%dx%d), base z=%d, buffer %dpx, concurrency %d',
            s.map_type.value,
            s.target_zoom,
            s.tiles_per_side,
            s.tiles_per_side,
            s.base_zoom,
            s.buffer_side_px,
            s.max_concurrency,
        )

    @property
    def buffer(self) -> CompositeBuffer:
        return self._buffer

    @property
    def scheduler(self) -> TileScheduler:
        return self._scheduler

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def _notify(self) -> None:
        if self._on_update is not None and self._buffer.is_dirty():
            self._on_update()

    async def load_base_layer(self) -> None:
        """
        Fill the whole buffer from the coarse base zoom, one upscaled tile at a time.

        All base tiles are fetched at once; failures are logged and leave the
        background showing through. Runs once; later calls and calls after
        destroy() return immediately. Target tiles that are already LOADED are
        never painted over.
        """
        if self._destroyed or self._base_started:
            logger.debug('Base layer skipped: destroyed=%s', self._destroyed)
            return
        self._base_started = True

        s = self.settings
        n = s.base_tiles_per_side
        draw_size = s.tile_size * s.base_scale

        async def _load_one(x: int, y: int) -> None:
            url = build_request_url(
                tile_to_geo(x, y, s.base_zoom),
                s.base_zoom,
                s.map_type,
                request_size=s.request_size,
                lang=s.lang,
                base_url=s.base_url,
            )
            try:
                img = await self.fetcher.fetch(url)
            except TileFetchError as e:
                logger.warning('Base tile %d/%d/%d failed: %s', s.base_zoom, x, y, e)
                return
            except Exception:
                logger.exception('Base tile %d/%d/%d failed unexpectedly', s.base_zoom, x, y)
                return
            if self._destroyed:
                return
            self._buffer.draw_tile_image(
                img,
                x * draw_size,
                y * draw_size,
                draw_size,
                self._crop_rect,
                keep=self._loaded_rects_under(x, y),
            )
            self._base_loaded += 1
            self._notify()

        await asyncio.gather(*(_load_one(x, y) for x in range(n) for y in range(n)))
        logger.info('Base layer: %d/%d tiles loaded', self._base_loaded, n * n)

    def _loaded_rects_under(self, base_x: int, base_y: int) -> list[tuple[int, int, int, int]]:
        """Buffer rectangles of LOADED target tiles covered by base tile (base_x, base_y)."""
        scale = self.settings.base_scale
        size = self.settings.tile_size
        rects = []
        for ty in range(base_y * scale, (base_y + 1) * scale):
            for tx in range(base_x * scale, (base_x + 1) * scale):
                if self._states.get(tx, ty) is TileLoadState.LOADED:
                    rects.append((tx * size, ty * size, (tx + 1) * size, (ty + 1) * size))
        return rects

    def update(self, viewpoint_lon_deg: float) -> None:
        """Reprioritize pending tiles for the viewpoint and keep the pool full."""
        if self._destroyed:
            return
        self._scheduler.recompute_priorities(viewpoint_lon_deg)
        self._scheduler.drain()

    def _draw_target_tile(self, request: TileRequest, image: Image.Image) -> None:
        size = self.settings.tile_size
        self._buffer.draw_tile_image(
            image, request.x * size, request.y * size, size, self._crop_rect
        )
        self._notify()

    def get_progress(self) -> int:
        """Percentage of target-zoom tiles loaded, 0..100."""
        return self._states.loaded_count * 100 // len(self._states)

    def get_base_progress(self) -> int:
        total = self.settings.base_tiles_per_side**2
        return self._base_loaded * 100 // total

    def tile_state(self, x: int, y: int) -> TileLoadState:
        return self._states.get(x, y)

    async def wait_idle(self) -> None:
        await self._scheduler.wait_idle()

    def destroy(self) -> None:
        """Make all pending and future completions inert. Safe to call twice."""
        if self._destroyed:
            return
        self._destroyed = True
        self._scheduler.close()
        logger.info('Tile stream destroyed at %d%%', self.get_progress())
