import unittest

import httpx

from scraper.extractors import ExtractorContext
from scraper.extractors.elcomercio import ElComercioExtractor
from scraper.extractors.rpp import RppExtractor
from scraper.http_client import AsyncHttpFetcher
from scraper.persistence import PreviewSink


async def no_sleep(_delay: float) -> None:
    return None


class SiteExtractorTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.pages: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def _handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.pages.get(str(request.url))
        if body is None:
            return httpx.Response(404)
        return httpx.Response(200, text=body, headers={"content-type": "text/html"})

    async def _scrape(self, extractor_cls) -> list:
        fetcher = AsyncHttpFetcher(transport=httpx.MockTransport(self._handler), sleep=no_sleep)
        async with fetcher:
            context = ExtractorContext.build(fetcher, PreviewSink(), sleep=no_sleep)
            return await extractor_cls(context, "category-1").scrape()

    async def test_rpp_story_items(self) -> None:
        self.pages["https://rpp.pe/ultimas-noticias"] = """
        <section>
          <div class="story-item">
            <a href="/economia/precio-del-dolar-hoy-noticia-1500"><img data-src="https://e.rpp-noticias.io/dolar.jpg"></a>
            <h3 class="story-item__title">Precio del dólar hoy cierra a la baja</h3>
            <p class="story-item__summary">El tipo de cambio retrocedió 0.3%.</p>
          </div>
        </section>
        """
        self.pages["https://rpp.pe/economia/precio-del-dolar-hoy-noticia-1500"] = """
        <div itemprop="articleBody">
          <p>El dólar cerró la jornada a la baja en el mercado cambiario local, según datos del Banco Central de Reserva.</p>
          <p>Los analistas esperan que la moneda estadounidense se mantenga estable durante el resto de la semana.</p>
        </div>
        """

        results = await self._scrape(RppExtractor)

        self.assertEqual(len(results), 1)
        draft = results[0]
        self.assertEqual(draft.title, "Precio del dólar hoy cierra a la baja")
        self.assertEqual(draft.image_url, "https://e.rpp-noticias.io/dolar.jpg")
        self.assertIn("mercado cambiario", draft.content)
        self.assertEqual(self.requests[0].headers["Referer"], "https://rpp.pe")

    async def test_unusable_anchor_before_headline_link(self) -> None:
        self.pages["https://rpp.pe/ultimas-noticias"] = """
        <article class="story-item">
          <a href="#">Compartir</a>
          <a href="javascript:void(0)">Guardar</a>
          <h2><a href="/politica/congreso-aprueba-reforma">Congreso aprueba reforma electoral</a></h2>
        </article>
        """

        results = await self._scrape(RppExtractor)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].source_url, "https://rpp.pe/politica/congreso-aprueba-reforma")
        self.assertEqual(results[0].title, "Congreso aprueba reforma electoral")

    async def test_elcomercio_title_floor_and_subscription_filter(self) -> None:
        class SingleSectionElComercio(ElComercioExtractor):
            sections = ("/politica",)

        self.pages["https://elcomercio.pe/politica"] = """
        <article>
          <h2>Ejecutivo presenta proyecto de presupuesto 2027</h2>
          <a href="/politica/gobierno/presupuesto-2027-noticia/">Ver</a>
        </article>
        <article>
          <h2>Breve nota</h2>
          <a href="/politica/breve-noticia/">Ver</a>
        </article>
        """
        self.pages["https://elcomercio.pe/politica/gobierno/presupuesto-2027-noticia/"] = """
        <article>
          <p>El Ejecutivo presentó al Congreso el proyecto de presupuesto para el año fiscal 2027 con un alza moderada.</p>
          <p>Para seguir leyendo este contenido premium, suscríbete hoy y accede a todas nuestras notas exclusivas.</p>
          <p>El ministro de Economía sustentará la propuesta ante la comisión de presupuesto la próxima semana.</p>
        </article>
        """

        results = await self._scrape(SingleSectionElComercio)

        self.assertEqual([draft.title for draft in results], ["Ejecutivo presenta proyecto de presupuesto 2027"])
        self.assertNotIn("suscríbete", results[0].content)
        self.assertIn("comisión de presupuesto", results[0].content)
        self.assertEqual(self.requests[0].headers["Accept-Language"], "es-PE,es;q=0.9")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
