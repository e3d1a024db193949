"""Tests for http_client module."""

import ssl

import aiohttp
import pytest

from infrastructure.http.client import USER_AGENT, make_http_session, make_ssl_context


class TestMakeSslContext:
    def test_returns_context(self):
        ctx = make_ssl_context()
        assert isinstance(ctx, ssl.SSLContext)
        assert ctx.verify_mode == ssl.CERT_REQUIRED


class TestMakeHttpSession:
    @pytest.mark.asyncio
    async def test_session_type(self):
        session = make_http_session()
        try:
            assert isinstance(session, aiohttp.ClientSession)
            assert session.headers['User-Agent'] == USER_AGENT
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_connection_limit(self):
        async with make_http_session(max_connections=3) as session:
            assert session.connector.limit == 3
