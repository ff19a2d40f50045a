"""
Tests for the HTTP transport (HttpJsonFetcher) using httpx.MockTransport.

Run with: python -m pytest tests/test_transport.py -v
"""

import logging
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from dry_spot.config import Settings
from dry_spot.errors import FetchError, IncompleteData
from dry_spot.resilience import ErrorType, RetryConfig, categorize_error
from dry_spot.transport import HttpJsonFetcher, apply_proxy, build_url

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)


def make_fetcher(handler, max_retries=0, **settings_kwargs):
    return HttpJsonFetcher(
        Settings(max_retries=max_retries, **settings_kwargs),
        retry_config=RetryConfig(max_retries=max_retries, base_delay_seconds=0.0, jitter=False),
        transport=httpx.MockTransport(handler),
    )


class TestUrlHelpers:

    def test_build_url_merges_params(self):
        url = build_url("https://geo.example/v1/search", {"name": "Frankfurt am Main", "count": 1})
        parsed = httpx.URL(url)
        assert parsed.host == "geo.example"
        assert parsed.path == "/v1/search"
        assert parsed.params["name"] == "Frankfurt am Main"
        assert parsed.params["count"] == "1"

    def test_build_url_without_params(self):
        assert build_url("https://wttr.in/1.0000,2.0000") == "https://wttr.in/1.0000,2.0000"

    def test_apply_proxy_encodes_target(self):
        target = "https://wttr.in/1.0000,2.0000?format=j1"
        proxied = apply_proxy(target, "https://api.allorigins.win/raw?url=")
        assert proxied == "https://api.allorigins.win/raw?url=https%3A%2F%2Fwttr.in%2F1.0000%2C2.0000%3Fformat%3Dj1"

    def test_apply_proxy_disabled(self):
        assert apply_proxy("https://wttr.in/x", "") == "https://wttr.in/x"


class TestHttpJsonFetcher:

    @pytest.mark.asyncio
    async def test_returns_json(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"ok": True})

        fetcher = make_fetcher(handler, user_agent="DrySpotTest/0.1")
        data = await fetcher("https://wttr.in/1.0000,2.0000", {"format": "j1"})

        assert data == {"ok": True}
        assert seen[0].url.params["format"] == "j1"
        assert seen[0].headers["User-Agent"] == "DrySpotTest/0.1"

    @pytest.mark.asyncio
    async def test_requests_go_through_proxy(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[])

        fetcher = make_fetcher(handler, proxy_prefix="https://proxy.example/raw?url=")
        await fetcher("https://wttr.in/1.0000,2.0000", {"format": "j1"})

        logger.info(f"[TEST] Proxied request: {seen[0].url}")
        assert seen[0].url.host == "proxy.example"
        assert seen[0].url.params["url"] == "https://wttr.in/1.0000,2.0000?format=j1"

    @pytest.mark.asyncio
    async def test_retries_server_errors(self):
        statuses = [503, 200]
        calls = []

        def handler(request):
            calls.append(request)
            status = statuses[len(calls) - 1]
            return httpx.Response(status, json={"attempt": len(calls)})

        fetcher = make_fetcher(handler, max_retries=2)
        data = await fetcher("https://api.example/forecast")

        assert data == {"attempt": 2}
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404, text="missing")

        fetcher = make_fetcher(handler, max_retries=2)
        with pytest.raises(FetchError, match="HTTP 404") as excinfo:
            await fetcher("https://api.example/forecast")

        assert len(calls) == 1
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
        assert categorize_error(excinfo.value)[0] == ErrorType.API_ERROR

    @pytest.mark.asyncio
    async def test_timeout_becomes_fetch_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("read timed out", request=request)

        fetcher = make_fetcher(handler, max_retries=1, timeout_seconds=2)
        with pytest.raises(FetchError, match="timed out") as excinfo:
            await fetcher("https://api.example/forecast")

        assert len(calls) == 2
        assert categorize_error(excinfo.value)[0] == ErrorType.TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_error_becomes_fetch_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(FetchError, match="connection refused"):
            await make_fetcher(handler)("https://api.example/forecast")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        def handler(request):
            return httpx.Response(200, content=b"<html>not json</html>")

        with pytest.raises(IncompleteData, match="not valid JSON"):
            await make_fetcher(handler, max_retries=2)("https://api.example/forecast")

    @pytest.mark.asyncio
    async def test_shared_client_context(self):
        def handler(request):
            return httpx.Response(200, json={"path": request.url.path})

        fetcher = make_fetcher(handler)
        async with fetcher as fetch:
            assert fetch._client is not None
            first = await fetch("https://api.example/a")
            second = await fetch("https://api.example/b")

        assert first == {"path": "/a"}
        assert second == {"path": "/b"}
        assert fetcher._client is None


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
