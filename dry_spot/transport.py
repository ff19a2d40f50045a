"""
HTTP transport for Dry Spot Finder.

Providers never talk to httpx directly: they receive a FetchJson callable
(url, params) -> decoded JSON. HttpJsonFetcher is the production one:
per-request timeout, optional URL-rewriting proxy, retry with backoff.
Tests swap in plain async functions.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from dry_spot.config import Settings
from dry_spot.errors import FetchError, IncompleteData
from dry_spot.resilience import RetryConfig, with_retry

logger = logging.getLogger(__name__)

FetchJson = Callable[[str, Optional[Dict[str, Any]]], Awaitable[Any]]


def build_url(url: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Merge query parameters into url."""
    if not params:
        return str(httpx.URL(url))
    return str(httpx.URL(url, params=params))


def apply_proxy(url: str, proxy_prefix: str) -> str:
    """
    Route url through a URL-rewriting proxy.

    allorigins-style proxies take the fully encoded target appended to
    their prefix, e.g. https://api.allorigins.win/raw?url=<encoded>.
    """
    if not proxy_prefix:
        return url
    return proxy_prefix + quote(url, safe="")


class HttpJsonFetcher:
    """
    Default FetchJson implementation on httpx.AsyncClient.

    Use as an async context manager to share one connection pool across a
    search; called outside a context it opens a client per request.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        retry_config: Optional[RetryConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or Settings()
        self.retry_config = retry_config or RetryConfig(max_retries=self.settings.max_retries)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            headers={"User-Agent": self.settings.user_agent, "Accept": "application/json"},
            follow_redirects=True,
            transport=self._transport,
        )

    async def __aenter__(self) -> "HttpJsonFetcher":
        self._client = self._new_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_json(self, url: str) -> Any:
        if self._client is not None:
            resp = await self._client.get(url)
        else:
            async with self._new_client() as client:
                resp = await client.get(url)
        logger.debug(f"[HttpJsonFetcher] HTTP {resp.status_code} from {url[:120]}")
        resp.raise_for_status()
        return resp.json()

    async def __call__(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        target = build_url(url, params)
        host = httpx.URL(target).host or "http"
        request_url = apply_proxy(target, self.settings.proxy_prefix)

        fetch = with_retry(config=self.retry_config, provider_name=host)(self._get_json)
        try:
            return await fetch(request_url)
        except httpx.TimeoutException as e:
            raise FetchError(f"Request to {host} timed out after {self.settings.timeout_seconds:g}s") from e
        except httpx.HTTPStatusError as e:
            raise FetchError(f"Request to {host} failed with HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise FetchError(f"Request to {host} failed: {e}") from e
        except ValueError as e:
            raise IncompleteData(f"Response from {host} is not valid JSON") from e
