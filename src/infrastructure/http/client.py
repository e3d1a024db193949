from __future__ import annotations

import ssl

import aiohttp
import certifi

from shared.constants import MAX_CONCURRENT_REQUESTS

USER_AGENT = 'globestream/0.1 (tile streaming)'


def make_ssl_context() -> ssl.SSLContext:
    # SSL-контекст с сертификатами из certifi
    return ssl.create_default_context(cafile=certifi.where())


def make_http_session(
    *, max_connections: int = MAX_CONCURRENT_REQUESTS * 4
) -> aiohttp.ClientSession:
    """
    Session for tile requests.

    Nothing is cached: every session starts from an empty buffer.
    """
    connector = aiohttp.TCPConnector(ssl=make_ssl_context(), limit=max_connections)
    return aiohttp.ClientSession(
        connector=connector,
        headers={'User-Agent': USER_AGENT},
    )
