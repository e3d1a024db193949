from __future__ import annotations

import logging
from http import HTTPStatus
from io import BytesIO
from typing import Protocol

import aiohttp
from PIL import Image, UnidentifiedImageError

from shared.constants import HTTP_TIMEOUT_DEFAULT

logger = logging.getLogger(__name__)


class TileFetchError(RuntimeError):
    """A tile image could not be retrieved or decoded."""


class ImageFetcher(Protocol):
    async def fetch(self, url: str) -> Image.Image:
        """Return the decoded image at ``url`` or raise TileFetchError."""
        ...


class HttpImageFetcher:
    """
    Fetches tile images over HTTP with a shared aiohttp session.

    Every failure (network, non-200 status, undecodable payload) is reported as
    TileFetchError. There is no retry: a failed slot is simply rescheduled by
    the next viewpoint update.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        *,
        timeout_s: float = HTTP_TIMEOUT_DEFAULT,
    ) -> None:
        self.client = client
        self.timeout_s = timeout_s
        self._stats_downloads = 0
        self._stats_errors = 0

    @property
    def stats(self) -> dict[str, int]:
        return {'downloads': self._stats_downloads, 'errors': self._stats_errors}

    async def fetch(self, url: str) -> Image.Image:
        try:
            data = await self._download(url)
        except TileFetchError:
            self._stats_errors += 1
            raise
        except (aiohttp.ClientError, TimeoutError) as e:
            self._stats_errors += 1
            msg = f'Network error for {url}: {e}'
            raise TileFetchError(msg) from e

        try:
            # Контент может быть png/jpg, PIL откроет всё; конвертируем в RGB
            img = Image.open(BytesIO(data)).convert('RGB')
        except (UnidentifiedImageError, OSError) as e:
            self._stats_errors += 1
            msg = f'Cannot decode image from {url}: {e}'
            raise TileFetchError(msg) from e

        self._stats_downloads += 1
        return img

    async def _download(self, url: str) -> bytes:
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        resp = await self.client.get(url, timeout=timeout)
        try:
            sc = resp.status
            if sc != HTTPStatus.OK:
                msg = f'Unexpected HTTP {sc} for {url}'
                raise TileFetchError(msg)
            return await resp.read()
        finally:
            try:
                release = getattr(resp, 'release', None)
                if callable(release):
                    release()
            except Exception as e:
                logger.debug('Failed to release HTTP response: %s', e, exc_info=True)

