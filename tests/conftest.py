"""Pytest configuration and fixtures for globe tile streaming tests."""

import asyncio
import sys
from pathlib import Path

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from PIL import Image  # noqa: E402

from geo.tile_math import build_request_url, tile_to_geo  # noqa: E402
from shared.constants import REQUEST_SIZE, MapType  # noqa: E402
from tiles.fetcher import TileFetchError  # noqa: E402


class StubFetcher:
    """In-memory ImageFetcher returning solid-color images.

    - ``fail_urls``: URLs answered with TileFetchError
    - ``gate``: if set, every fetch waits for this event
    - ``delay``: callable url -> seconds to sleep before answering
    """

    def __init__(
        self,
        color=(200, 40, 40),
        *,
        size=REQUEST_SIZE,
        fail_urls=(),
        gate=None,
        delay=None,
        error=None,
    ):
        self.color = color
        self.size = size
        self.fail_urls = set(fail_urls)
        self.gate = gate
        self.delay = delay
        self.error = error
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def fetch(self, url):
        self.calls.append(url)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            elif self.delay is not None:
                await asyncio.sleep(self.delay(url))
            else:
                await asyncio.sleep(0)
            if url in self.fail_urls:
                raise TileFetchError(f'stub failure for {url}')
            if self.error is not None:
                raise self.error
            return Image.new('RGB', (self.size, self.size), self.color)
        finally:
            self.active -= 1


@pytest.fixture
def stub_fetcher_cls():
    return StubFetcher


@pytest.fixture
def tile_url():
    """Build the request URL of tile (x, y, z) with default settings."""

    def _url(x, y, z, map_type=MapType.SAT):
        return build_request_url(tile_to_geo(x, y, z), z, map_type)

    return _url
