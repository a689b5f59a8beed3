import unittest

import httpx

from scraper.config import PacingConfig
from scraper.extractors import ExtractorContext
from scraper.extractors.generic import GenericExtractor
from scraper.http_client import AsyncHttpFetcher
from scraper.persistence import NewsDraft, PreviewSink
from scraper.selectors import SelectorConfig, SourceDefinition


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.calls.append(delay)


async def no_sleep(_delay: float) -> None:
    return None


class GenericExtractorTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.pages: dict[str, str] = {}
        self.requested: list[str] = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)
        body = self.pages.get(url)
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body, headers={"content-type": "text/html"})

    async def _scrape(self, source: SourceDefinition) -> tuple[list, PreviewSink]:
        sink = PreviewSink()
        fetcher = AsyncHttpFetcher(transport=httpx.MockTransport(self._handler), sleep=no_sleep)
        async with fetcher:
            context = ExtractorContext.build(fetcher, sink, sleep=no_sleep)
            results = await GenericExtractor(context, "category-1", source).scrape()
        return results, sink

    async def test_configured_selectors_are_used(self) -> None:
        self.pages["https://local.example.pe/portada"] = """
        <ul>
          <li class="nota">
            <a class="enlace" href="/n/obras-viales">
              <span class="tit">Municipio inicia obras viales en el centro</span>
            </a>
            <img class="foto" src="/f/obras.jpg">
            <p class="bajada">Las obras durarán tres meses.</p>
          </li>
        </ul>
        """
        source = SourceDefinition(
            name="Diario Local",
            url="https://local.example.pe/portada",
            selectors=SelectorConfig(
                article_selector="li.nota",
                title_selector="span.tit",
                link_selector="a.enlace",
                image_selector="img.foto",
                summary_selector="p.bajada",
            ),
        )

        results, _ = await self._scrape(source)

        self.assertEqual(len(results), 1)
        draft = results[0]
        self.assertIsInstance(draft, NewsDraft)
        self.assertEqual(draft.title, "Municipio inicia obras viales en el centro")
        self.assertEqual(draft.source_url, "https://local.example.pe/n/obras-viales")
        self.assertEqual(draft.image_url, "https://local.example.pe/f/obras.jpg")
        self.assertEqual(draft.summary, "Las obras durarán tres meses.")
        self.assertEqual(draft.content, "Las obras durarán tres meses.")
        self.assertEqual(self.requested, ["https://local.example.pe/portada"])

    async def test_defaults_and_meta_image_lookup(self) -> None:
        self.pages["https://blog.example.pe/"] = """
        <div class="card">
          <h2>Festival gastronómico llega a Trujillo</h2>
          <a href="https://blog.example.pe/festival">Leer</a>
        </div>
        """
        self.pages["https://blog.example.pe/festival"] = (
            '<html><head><meta name="twitter:image" content="https://cdn.example.pe/festival.png"></head></html>'
        )
        source = SourceDefinition(name="Blog", url="https://blog.example.pe/")

        results, _ = await self._scrape(source)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].image_url, "https://cdn.example.pe/festival.png")
        self.assertEqual(results[0].summary, "Festival gastronómico llega a Trujillo")
        self.assertEqual(results[0].content, "See the full story at blog.example.pe.")

    async def test_article_page_lookups_are_paced(self) -> None:
        cards = "".join(
            f'<article><h2>Titular sin imagen número {index}</h2><a href="/n/{index}">ver</a></article>'
            for index in range(5)
        )
        self.pages["https://pausa.example.pe/"] = f"<main>{cards}</main>"
        for index in range(5):
            self.pages[f"https://pausa.example.pe/n/{index}"] = (
                f'<html><head><meta property="og:image" content="https://cdn.example.pe/{index}.jpg"></head></html>'
            )
        sleep = RecordingSleep()
        pacing = PacingConfig(article_delay_min=1.0, article_delay_max=1.0)
        source = SourceDefinition(name="Pausa", url="https://pausa.example.pe/")

        fetcher = AsyncHttpFetcher(transport=httpx.MockTransport(self._handler), sleep=sleep)
        async with fetcher:
            context = ExtractorContext.build(fetcher, PreviewSink(), pacing=pacing, sleep=sleep)
            results = await GenericExtractor(context, "category-1", source).scrape()

        self.assertEqual(len(results), 5)
        self.assertEqual(results[4].image_url, "https://cdn.example.pe/4.jpg")
        self.assertEqual(len(self.requested), 6)
        self.assertEqual(sleep.calls, [1.0] * 4)

    async def test_duplicate_cards_skip_the_image_lookup(self) -> None:
        card = '<div class="card"><h2>Feria del libro abre sus puertas en Lima</h2><a href="/feria">Leer</a></div>'
        self.pages["https://dup.example.pe/"] = f"<section>{card}{card}{card}</section>"
        source = SourceDefinition(name="Duplicados", url="https://dup.example.pe/")

        results, _ = await self._scrape(source)

        self.assertEqual(len(results), 1)
        self.assertEqual(self.requested, ["https://dup.example.pe/", "https://dup.example.pe/feria"])

    async def test_unreachable_source_yields_nothing(self) -> None:
        results, sink = await self._scrape(SourceDefinition(name="Caído", url="https://down.example.pe/"))
        self.assertEqual(results, [])
        self.assertEqual(sink.drafts, [])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
