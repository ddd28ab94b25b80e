"""Tests for the shared async HTTP helpers."""

import asyncio
from unittest.mock import AsyncMock, patch

import aiohttp

from vbablocks.common import http_client
from vbablocks.common.http_client import get_json, robust_get
from vbablocks.constants import Constants

URL = "https://registry.example.com/index/dictionary.json"
SESSION = object()


class TestRobustGet:
    """Tests for robust_get() retries."""

    def test_success(self):
        """A 200 response is returned from the first attempt."""
        fetch = AsyncMock(return_value=(200, {"ETag": "x"}, "{}"))
        with patch.object(http_client, "_fetch_once", new=fetch):
            result = asyncio.run(robust_get(URL, session=SESSION))
        assert result == (200, {"ETag": "x"}, "{}")
        assert fetch.await_count == 1

    def test_retries_server_errors(self):
        """5xx responses are retried until success."""
        fetch = AsyncMock(side_effect=[(503, {}, ""), (200, {}, "ok")])
        with patch.object(http_client, "_fetch_once", new=fetch), \
                patch.object(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0):
            result = asyncio.run(robust_get(URL, session=SESSION, retries=3))
        assert result[0] == 200
        assert fetch.await_count == 2

    def test_client_error_not_retried(self):
        """4xx responses are returned immediately."""
        fetch = AsyncMock(return_value=(404, {}, "missing"))
        with patch.object(http_client, "_fetch_once", new=fetch):
            result = asyncio.run(robust_get(URL, session=SESSION, retries=3))
        assert result[0] == 404
        assert fetch.await_count == 1

    def test_transport_errors_exhaust_retries(self):
        """Status 0 is returned when no attempt got a response."""
        fetch = AsyncMock(side_effect=[asyncio.TimeoutError(), aiohttp.ClientError("reset")])
        with patch.object(http_client, "_fetch_once", new=fetch), \
                patch.object(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0):
            status, headers, text = asyncio.run(robust_get(URL, session=SESSION, retries=2))
        assert status == 0
        assert headers == {}
        assert "reset" in text

    def test_last_server_error_is_returned(self):
        """When every attempt is a 5xx the last response is returned."""
        fetch = AsyncMock(return_value=(502, {}, "bad gateway"))
        with patch.object(http_client, "_fetch_once", new=fetch), \
                patch.object(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0):
            result = asyncio.run(robust_get(URL, session=SESSION, retries=2))
        assert result == (502, {}, "bad gateway")


class TestGetJson:
    """Tests for get_json() decoding."""

    def test_parses_json(self):
        """JSON bodies of 200 responses are decoded."""
        with patch.object(http_client, "robust_get", new=AsyncMock(return_value=(200, {}, '{"versions": []}'))):
            assert asyncio.run(get_json(URL)) == (200, {}, {"versions": []})

    def test_invalid_json(self):
        """Undecodable bodies yield None."""
        with patch.object(http_client, "robust_get", new=AsyncMock(return_value=(200, {}, "<html>"))):
            assert asyncio.run(get_json(URL))[2] is None

    def test_non_200(self):
        """Non-200 responses are not decoded."""
        with patch.object(http_client, "robust_get", new=AsyncMock(return_value=(404, {}, '{"error": 1}'))):
            assert asyncio.run(get_json(URL)) == (404, {}, None)
