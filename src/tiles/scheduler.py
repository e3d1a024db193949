"""
Priority scheduler for target-zoom tiles.

Pending slots are ordered by their distance from the current viewpoint and
fed to the fetcher through a bounded pool of asyncio tasks. Finished fetches
are pushed onto a completion queue that is consumed by a single pump
(``drain``), so state and buffer mutations never interleave.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from geo.tile_math import (
    build_request_url,
    horizontal_distance,
    is_admitted,
    tile_priority,
    tile_to_geo,
    viewpoint_center_x,
)
from shared.constants import (
    MAX_CONCURRENT_REQUESTS,
    REQUEST_SIZE,
    STATIC_MAPS_BASE,
    STATIC_MAPS_LANG,
    MapType,
)
from tiles.fetcher import TileFetchError

if TYPE_CHECKING:
    from collections.abc import Callable

    from PIL import Image

    from tiles.fetcher import ImageFetcher
    from tiles.state import TileStateTable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TileRequest:
    x: int
    y: int
    url: str
    priority: float


@dataclass(frozen=True)
class _Completion:
    request: TileRequest
    image: Image.Image | None
    error: BaseException | None


class TileScheduler:
    def __init__(
        self,
        states: TileStateTable,
        fetcher: ImageFetcher,
        *,
        zoom: int,
        on_tile_loaded: Callable[[TileRequest, Image.Image], None],
        map_type: MapType = MapType.SAT,
        max_concurrency: int = MAX_CONCURRENT_REQUESTS,
        request_size: int = REQUEST_SIZE,
        lang: str = STATIC_MAPS_LANG,
        base_url: str = STATIC_MAPS_BASE,
    ) -> None:
        if max_concurrency < 1:
            msg = f'max_concurrency must be >= 1, got {max_concurrency}'
            raise ValueError(msg)
        self.states = states
        self.fetcher = fetcher
        self.zoom = zoom
        self.map_type = map_type
        self.max_concurrency = max_concurrency
        self.request_size = request_size
        self.lang = lang
        self.base_url = base_url
        self._on_tile_loaded = on_tile_loaded

        self._queue: list[TileRequest] = []
        self._in_flight = 0
        self._completions: deque[_Completion] = deque()
        self._tasks: set[asyncio.Task] = set()
        self._pumping = False
        self._closed = False
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def pending(self) -> tuple[TileRequest, ...]:
        return tuple(self._queue)

    @property
    def closed(self) -> bool:
        return self._closed

    def _request_url(self, x: int, y: int) -> str:
        return build_request_url(
            tile_to_geo(x, y, self.zoom),
            self.zoom,
            self.map_type,
            request_size=self.request_size,
            lang=self.lang,
            base_url=self.base_url,
        )

    def recompute_priorities(self, viewpoint_lon_deg: float) -> int:
        """
        Rebuild the pending queue for the given viewpoint.

        Only NOT_LOADED slots are considered: QUEUED ones are already in flight
        and LOADED ones are final. Undispatched entries from the previous call
        are replaced, never duplicated.

        Returns:
            Number of requests now pending.

        """
        if self._closed:
            return 0
        n = self.states.tiles_per_side
        center_x = viewpoint_center_x(viewpoint_lon_deg, n)

        queue: list[TileRequest] = []
        for x, y in self.states.iter_not_loaded():
            if not is_admitted(horizontal_distance(x, center_x, n), n):
                continue
            queue.append(
                TileRequest(
                    x=x,
                    y=y,
                    url=self._request_url(x, y),
                    priority=tile_priority(x, y, center_x, n),
                )
            )
        # list.sort стабилен: при равном приоритете сохраняется порядок обхода
        queue.sort(key=lambda r: r.priority)
        self._queue = queue
        if queue:
            self._idle.clear()
        return len(queue)

    def drain(self) -> None:
        """Consume finished fetches, then dispatch up to the concurrency slack."""
        if self._closed or self._pumping:
            return
        self._pumping = True
        try:
            self._process_completions()
            if not self._closed:
                self._dispatch_available()
        finally:
            self._pumping = False
            if self._in_flight == 0 and not self._queue:
                self._idle.set()

    def _process_completions(self) -> None:
        while self._completions and not self._closed:
            done = self._completions.popleft()
            req = done.request
            self._in_flight -= 1
            if done.image is not None:
                self.states.mark_loaded(req.x, req.y)
                try:
                    self._on_tile_loaded(req, done.image)
                except Exception:
                    # Слот остаётся LOADED
                    logger.exception(
                        'Tile %d/%d/%d loaded but the draw callback failed',
                        self.zoom,
                        req.x,
                        req.y,
                    )
                continue
            self.states.mark_failed(req.x, req.y)
            if isinstance(done.error, TileFetchError):
                logger.warning('Tile %d/%d/%d failed: %s', self.zoom, req.x, req.y, done.error)
            else:
                logger.warning(
                    'Tile %d/%d/%d failed unexpectedly',
                    self.zoom,
                    req.x,
                    req.y,
                    exc_info=done.error,
                )

    def _dispatch_available(self) -> None:
        while self._in_flight < self.max_concurrency and self._queue:
            req = self._queue.pop(0)
            self.states.mark_queued(req.x, req.y)
            self._in_flight += 1
            self._idle.clear()
            task = asyncio.create_task(self.fetcher.fetch(req.url))
            self._tasks.add(task)
            task.add_done_callback(lambda t, r=req: self._on_fetch_done(r, t))

    def _on_fetch_done(self, request: TileRequest, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            error: BaseException | None = TileFetchError('fetch cancelled')
            image = None
        else:
            error = task.exception()
            image = task.result() if error is None else None
        if self._closed:
            logger.debug('Ignoring tile %d/%d after close', request.x, request.y)
            return
        self._completions.append(_Completion(request, image, error))
        self.drain()

    async def wait_idle(self) -> None:
        """Wait until nothing is in flight or pending (or the scheduler is closed)."""
        if not self._in_flight:
            self.drain()
        while not self._closed and (self._in_flight or self._queue):
            await self._idle.wait()

    def close(self) -> None:
        """Terminal and idempotent. In-flight fetches finish but are ignored."""
        if self._closed:
            return
        self._closed = True
        self._queue.clear()
        self._completions.clear()
        self._idle.set()
        logger.debug('Scheduler closed with %d fetches in flight', self._in_flight)
