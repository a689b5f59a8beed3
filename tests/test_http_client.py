import asyncio
import unittest

import httpx

from scraper.config import ScraperConfig
from scraper.http_client import DEFAULT_BROWSER_HEADERS, AsyncHttpFetcher, looks_like_json_url


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


class AsyncHttpFetcherTestCase(unittest.IsolatedAsyncioTestCase):
    def _fetcher(self, handler, config: ScraperConfig | None = None) -> tuple[AsyncHttpFetcher, RecordingSleep]:
        sleep = RecordingSleep()
        fetcher = AsyncHttpFetcher(config, transport=httpx.MockTransport(handler), sleep=sleep)
        return fetcher, sleep

    async def test_returns_markup_and_sends_browser_headers(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="<html><body>ok</body></html>", headers={"content-type": "text/html"})

        fetcher, _ = self._fetcher(handler)
        async with fetcher:
            body = await fetcher.fetch("https://news.example.pe/ultimas", headers={"Referer": "https://news.example.pe"})

        self.assertEqual(body, "<html><body>ok</body></html>")
        request = seen[0]
        self.assertEqual(request.headers["User-Agent"], DEFAULT_BROWSER_HEADERS["User-Agent"])
        self.assertEqual(request.headers["Accept-Language"], DEFAULT_BROWSER_HEADERS["Accept-Language"])
        self.assertEqual(request.headers["Referer"], "https://news.example.pe")

    async def test_json_url_requests_and_parses_json(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            self.assertEqual(request.headers["Accept"], "application/json")
            return httpx.Response(200, json={"data": {"children": []}})

        fetcher, _ = self._fetcher(handler)
        async with fetcher:
            payload = await fetcher.fetch("https://www.reddit.com/r/peru/hot.json?limit=15")

        self.assertEqual(payload, {"data": {"children": []}})

    async def test_json_content_type_is_parsed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[1, 2, 3])

        fetcher, _ = self._fetcher(handler)
        async with fetcher:
            payload = await fetcher.fetch("https://api.example.pe/feed")

        self.assertEqual(payload, [1, 2, 3])

    async def test_invalid_json_returns_raw_text(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="not json", headers={"content-type": "application/json"})

        fetcher, _ = self._fetcher(handler)
        async with fetcher:
            payload = await fetcher.fetch("https://api.example.pe/feed.json")

        self.assertEqual(payload, "not json")

    async def test_rate_limit_sleeps_cooldown_and_returns_none(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429)

        config = ScraperConfig()
        config.rate_limit.cooldown = 30.0
        fetcher, sleep = self._fetcher(handler, config)
        async with fetcher:
            body = await fetcher.fetch("https://news.example.pe/")

        self.assertIsNone(body)
        self.assertEqual(sleep.calls, [30.0])

    async def test_forbidden_and_not_found_return_none_without_sleeping(self) -> None:
        statuses = iter([403, 404, 500])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses))

        fetcher, sleep = self._fetcher(handler)
        async with fetcher:
            results = [await fetcher.fetch("https://news.example.pe/") for _ in range(3)]

        self.assertEqual(results, [None, None, None])
        self.assertEqual(sleep.calls, [])

    async def test_timeout_and_transport_errors_return_none(self) -> None:
        errors = iter(
            [
                httpx.ReadTimeout("too slow"),
                httpx.ConnectError("refused"),
            ]
        )

        def handler(request: httpx.Request) -> httpx.Response:
            raise next(errors)

        fetcher, _ = self._fetcher(handler)
        async with fetcher:
            self.assertIsNone(await fetcher.fetch("https://news.example.pe/slow"))
            self.assertIsNone(await fetcher.fetch("https://news.example.pe/down"))

    async def test_request_timeout_bounds_the_whole_request(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(5)
            return httpx.Response(200, text="<html>late</html>")

        config = ScraperConfig()
        config.timeout.request_timeout = 0.05
        fetcher, _ = self._fetcher(handler, config)
        async with fetcher:
            with self.assertLogs("scraper.http_client", level="WARNING"):
                self.assertIsNone(await fetcher.fetch("https://news.example.pe/trickle"))


class LooksLikeJsonUrlTestCase(unittest.TestCase):
    def test_detects_json_paths(self) -> None:
        self.assertTrue(looks_like_json_url("https://www.reddit.com/r/news/hot.json?limit=15"))
        self.assertFalse(looks_like_json_url("https://news.example.pe/json-news?format=.json"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
