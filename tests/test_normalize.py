import unittest

import httpx
from bs4 import BeautifulSoup

from scraper.http_client import AsyncHttpFetcher
from scraper.normalize import (
    ImageExtractor,
    clean_content,
    clean_text,
    extract_domain,
    generate_slug,
    is_valid_image_url,
    resolve_url,
)


class SlugTestCase(unittest.TestCase):
    def test_slug_is_lowercase_accent_free_and_hyphenated(self) -> None:
        self.assertEqual(generate_slug("Café del Perú: ¡Vamos!"), "cafe-del-peru-vamos")

    def test_slug_is_deterministic(self) -> None:
        title = "Ñandú en la Amazonía: ¿récord?"
        self.assertEqual(generate_slug(title), generate_slug(title))
        self.assertEqual(generate_slug(title), "nandu-en-la-amazonia-record")

    def test_trailing_punctuation_does_not_change_slug(self) -> None:
        self.assertEqual(generate_slug("Lluvias en Lima"), generate_slug("Lluvias en Lima!!"))

    def test_slug_is_truncated_without_dangling_hyphen(self) -> None:
        slug = generate_slug("palabra " * 30, max_length=20)
        self.assertLessEqual(len(slug), 20)
        self.assertFalse(slug.endswith("-"))
        self.assertFalse(slug.startswith("-"))

    def test_symbol_only_title_yields_empty_slug(self) -> None:
        self.assertEqual(generate_slug("¡¿!?"), "")
        self.assertEqual(generate_slug(""), "")


class TextCleaningTestCase(unittest.TestCase):
    def test_clean_text_strips_tags_and_whitespace(self) -> None:
        self.assertEqual(clean_text("  <b>Hola</b>\n\n  mundo \t "), "Hola mundo")
        self.assertEqual(clean_text(None), "")

    def test_clean_content_removes_markdown(self) -> None:
        raw = "# Titular\n\n> cita\n\nVer [la nota](https://example.pe) con **énfasis** y *cursiva*.\n\n\n\nFin"
        self.assertEqual(clean_content(raw), "Titular\n\ncita\n\nVer la nota con énfasis y cursiva.\n\nFin")


class ImageValidityTestCase(unittest.TestCase):
    def test_accepts_image_extensions(self) -> None:
        self.assertTrue(is_valid_image_url("https://site.com/photo.jpg"))
        self.assertTrue(is_valid_image_url("https://site.com/photo.WEBP?w=640"))

    def test_rejects_sentinels_and_pages(self) -> None:
        for value in ("self", "default", "image", "nsfw", "", None):
            self.assertFalse(is_valid_image_url(value), value)
        self.assertFalse(is_valid_image_url("https://site.com/page.html"))

    def test_accepts_known_image_hosts(self) -> None:
        self.assertTrue(is_valid_image_url("https://imgur.com/a1B2c3"))
        self.assertTrue(is_valid_image_url("https://i.redd.it/abc123.jpeg"))
        self.assertTrue(is_valid_image_url("https://redd.it/abc123"))


class UrlHelpersTestCase(unittest.TestCase):
    def test_resolve_url(self) -> None:
        base = "https://rpp.pe/ultimas-noticias"
        self.assertEqual(resolve_url("/politica/nota-1", base), "https://rpp.pe/politica/nota-1")
        self.assertEqual(resolve_url("//cdn.rpp.pe/a.jpg", base), "https://cdn.rpp.pe/a.jpg")
        self.assertIsNone(resolve_url("javascript:void(0)", base))
        self.assertIsNone(resolve_url("#top", base))
        self.assertIsNone(resolve_url("", base))

    def test_extract_domain(self) -> None:
        self.assertEqual(extract_domain("https://elcomercio.pe/politica/nota"), "elcomercio.pe")
        self.assertIsNone(extract_domain(""))


class ImageExtractorTestCase(unittest.IsolatedAsyncioTestCase):
    def _images(self, handler) -> tuple[ImageExtractor, AsyncHttpFetcher]:
        fetcher = AsyncHttpFetcher(transport=httpx.MockTransport(handler))
        return ImageExtractor(fetcher), fetcher

    @staticmethod
    def _card(markup: str):
        return BeautifulSoup(markup, "html.parser").find("article")

    async def test_element_tiers(self) -> None:
        images, fetcher = self._images(lambda request: httpx.Response(404))
        async with fetcher:
            lazy = self._card('<article><img src="data:image/gif;base64,R0l" data-src="/img/a.jpg"></article>')
            self.assertEqual(images.from_element(lazy, "https://ojo.pe/"), "https://ojo.pe/img/a.jpg")

            srcset = self._card('<article><img srcset="/img/b-320.png 320w, /img/b-640.png 640w"></article>')
            self.assertEqual(images.from_element(srcset, "https://ojo.pe/"), "https://ojo.pe/img/b-320.png")

            styled = self._card(
                "<article><div style=\"background-image: url('https://cdn.ojo.pe/c.webp')\"></div></article>"
            )
            self.assertEqual(images.from_element(styled, "https://ojo.pe/"), "https://cdn.ojo.pe/c.webp")

    async def test_falls_back_to_article_meta_tags(self) -> None:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            return httpx.Response(
                200,
                text='<html><head><meta property="og:image" content="/og/nota.jpg"></head></html>',
                headers={"content-type": "text/html"},
            )

        images, fetcher = self._images(handler)
        async with fetcher:
            card = self._card("<article><h2>Sin imagen</h2></article>")
            image_url = await images.extract_image(card, "https://gestion.pe/", "https://gestion.pe/nota-1")

        self.assertEqual(image_url, "https://gestion.pe/og/nota.jpg")
        self.assertEqual(requested, ["https://gestion.pe/nota-1"])

    async def test_meta_lookup_failure_returns_none(self) -> None:
        images, fetcher = self._images(lambda request: httpx.Response(500))
        async with fetcher:
            card = self._card("<article><h2>Sin imagen</h2></article>")
            self.assertIsNone(await images.extract_image(card, "https://gestion.pe/", "https://gestion.pe/nota-2"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
