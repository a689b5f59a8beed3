"""HTTP utilities for fetching listing pages, article pages and JSON feeds."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping
from urllib.parse import urlsplit

import httpx

from .config import ScraperConfig

LOGGER = logging.getLogger(__name__)

DEFAULT_BROWSER_HEADERS: dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8",
    "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
    "Referer": "https://www.google.com/",
}

JSON_ACCEPT = "application/json"

Payload = str | dict | list
SleepFunc = Callable[[float], Awaitable[None]]


def looks_like_json_url(url: str) -> bool:
    return ".json" in urlsplit(url).path.lower()


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    merged: dict[str, str] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


class AsyncHttpFetcher:
    """Single-GET fetcher that maps every failure to ``None``.

    Callers are expected to null-check the result instead of handling
    exceptions: transport errors, timeouts and non-2xx statuses never escape.
    A 429 response additionally waits for the configured cooldown before
    returning.
    """

    def __init__(
        self,
        config: ScraperConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: SleepFunc | None = None,
    ) -> None:
        self._config = config or ScraperConfig()
        self._transport = transport
        self._client = client or self._build_client()
        self._owns_client = client is None
        self._sleep = sleep or asyncio.sleep

    def _build_client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {
            "timeout": self._config.timeout.request_timeout,
            "headers": DEFAULT_BROWSER_HEADERS,
            "follow_redirects": True,
        }
        if self._transport:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def fetch(self, url: str, headers: Mapping[str, str] | None = None) -> Payload | None:
        json_expected = looks_like_json_url(url)
        request_headers = merge_headers(DEFAULT_BROWSER_HEADERS, headers)
        if json_expected:
            request_headers["Accept"] = JSON_ACCEPT

        # httpx timeouts apply per phase; the whole request shares one ceiling.
        try:
            response = await asyncio.wait_for(
                self._client.get(url, headers=request_headers),
                timeout=self._config.timeout.request_timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError):
            LOGGER.warning("Timed out after %.1fs fetching %s", self._config.timeout.request_timeout, url)
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            LOGGER.warning("Error fetching %s: %s", url, exc)
            return None

        status = response.status_code
        if status == httpx.codes.TOO_MANY_REQUESTS:
            cooldown = self._config.rate_limit.cooldown
            LOGGER.warning("Rate limited by %s; cooling down for %.0fs", url, cooldown)
            await self._sleep(cooldown)
            return None
        if status == httpx.codes.FORBIDDEN:
            LOGGER.warning("Access forbidden (403) for %s", url)
            return None
        if status == httpx.codes.NOT_FOUND:
            LOGGER.warning("Page not found (404): %s", url)
            return None
        if not response.is_success:
            LOGGER.warning("Unexpected status %d for %s", status, url)
            return None

        content_type = response.headers.get("content-type", "").lower()
        if json_expected or "application/json" in content_type:
            return self._decode_json(response, url)
        return response.text

    @staticmethod
    def _decode_json(response: httpx.Response, url: str) -> Payload:
        try:
            return response.json()
        except ValueError:
            LOGGER.debug("Response from %s is not valid JSON; returning raw body", url)
            return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpFetcher":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        await self.aclose()


__all__ = ["AsyncHttpFetcher", "DEFAULT_BROWSER_HEADERS", "looks_like_json_url", "merge_headers"]
