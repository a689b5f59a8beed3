"""Selector-driven extractor for operator-configured sources."""

from __future__ import annotations

from typing import Any

from bs4 import Tag

from ..selectors import SourceDefinition
from . import ExtractorContext
from .listing import ListingExtractor

GENERIC_MAX_CARDS = 20


class GenericExtractor(ListingExtractor):
    """Reads a single listing page using the source's stored selectors.

    Missing selectors fall back to the shared defaults. No article body is
    fetched; the card image may still be looked up on the article page, and
    those lookups are paced like detail fetches.
    """

    fetch_detail = False
    max_cards_per_section = GENERIC_MAX_CARDS

    def __init__(self, context: ExtractorContext, category_id: Any, source: SourceDefinition) -> None:
        super().__init__(context, category_id)
        self.source = source
        selectors = source.selectors
        self.card_selectors = (selectors.article_selector,) if selectors.article_selector else ()
        self.title_selector = selectors.title_selector
        self.link_selector = selectors.link_selector
        self.image_selector = selectors.image_selector
        self.summary_selector = selectors.summary_selector
        self._page_lookups = 0

    @property
    def display_name(self) -> str:
        return self.source.name

    def section_urls(self) -> list[str]:
        return [self.source.url]

    async def run(self, saved: list) -> None:
        self._page_lookups = 0
        await super().run(saved)

    async def find_image(self, card: Tag, page_url: str, link: str) -> str | None:
        images = self.context.images
        if self.image_selector:
            image_url = images.from_element(card.select_one(self.image_selector), page_url)
            if image_url:
                return image_url
        image_url = images.from_element(card, page_url)
        if image_url:
            return image_url

        if self._page_lookups:
            await self.context.pause(self._article_delay())
        self._page_lookups += 1
        return await images.extract_image(None, page_url, article_url=link)


__all__ = ["GENERIC_MAX_CARDS", "GenericExtractor"]
