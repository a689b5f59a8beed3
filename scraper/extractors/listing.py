"""Listing-page extractor shared by the per-site news sources."""

from __future__ import annotations

import logging
from typing import ClassVar

from bs4 import BeautifulSoup, Tag

from ..normalize import clean_text, resolve_url
from ..selectors import DEFAULT_ARTICLE_SELECTORS, DEFAULT_LINK_SELECTORS, DEFAULT_TITLE_SELECTORS
from . import Extractor, RawArticleCandidate, apply_content_floor, first_text, select_first

LOGGER = logging.getLogger(__name__)

DEFAULT_CONTENT_SELECTORS: tuple[str, ...] = (
    "article p",
    'div[itemprop="articleBody"] p',
    ".article-content p",
    ".article-body p",
    ".story-content p",
    ".entry-content p",
    ".post-content p",
    "main p",
)
BODY_TARGET_LENGTH = 200


class ListingExtractor(Extractor):
    """Scrapes a fixed set of listing pages and follows each card one hop.

    Site subclasses only declare selectors, sections and limits. Every
    section and every card is isolated: a failure is logged and the loop
    moves on to the next one.
    """

    sections: ClassVar[tuple[str, ...]] = ("",)
    card_selectors: ClassVar[tuple[str, ...]] = ()
    title_selector: ClassVar[str | None] = None
    link_selector: ClassVar[str | None] = None
    summary_selector: ClassVar[str | None] = "p"
    image_selector: ClassVar[str | None] = None
    content_selectors: ClassVar[tuple[str, ...]] = ()
    boilerplate_phrases: ClassVar[tuple[str, ...]] = ()
    max_cards_per_section: ClassVar[int] = 10
    min_title_length: ClassVar[int] = 10
    min_paragraph_length: ClassVar[int] = 50
    fetch_detail: ClassVar[bool] = True
    section_delay: ClassVar[float | None] = None
    article_delay: ClassVar[float | tuple[float, float] | None] = None

    def section_urls(self) -> list[str]:
        urls = []
        for path in self.sections:
            url = resolve_url(path, self.base_url) if path else self.base_url
            if url:
                urls.append(url)
        return urls

    async def run(self, saved: list) -> None:
        seen_titles: set[str] = set()
        seen_links: set[str] = set()

        for index, url in enumerate(self.section_urls()):
            if index:
                await self.context.pause(self._section_delay())
            try:
                candidates = await self.collect_candidates(url, seen_titles, seen_links)
            except Exception:
                LOGGER.exception("%s: failed to read section %s", self.display_name, url)
                continue

            LOGGER.info("%s: %d candidates in %s", self.display_name, len(candidates), url)
            for candidate in candidates:
                try:
                    record = await self.process_candidate(candidate)
                except Exception:
                    LOGGER.exception("%s: error processing %r", self.display_name, candidate.title)
                    record = None
                if record is not None:
                    saved.append(record)
                if self.fetch_detail:
                    await self.context.pause(self._article_delay())

    def _section_delay(self) -> float:
        if self.section_delay is None:
            return self.context.pacing.section_delay
        return self.section_delay

    def _article_delay(self) -> float | tuple[float, float]:
        if self.article_delay is None:
            return self.context.pacing.article_delay
        return self.article_delay

    async def collect_candidates(
        self,
        url: str,
        seen_titles: set[str],
        seen_links: set[str],
    ) -> list[RawArticleCandidate]:
        soup = await self.fetch_document(url)
        if soup is None:
            LOGGER.warning("%s: could not fetch %s", self.display_name, url)
            return []

        cards = self.find_cards(soup)
        candidates: list[RawArticleCandidate] = []
        for card in cards[: self.max_cards_per_section]:
            candidate = self.build_candidate(card, url)
            if candidate is None:
                continue
            if candidate.title in seen_titles or candidate.link in seen_links:
                LOGGER.debug("%s: duplicate card %r", self.display_name, candidate.title)
                continue
            seen_titles.add(candidate.title)
            seen_links.add(candidate.link)
            # Image lookup may hit the network, so it runs after the duplicate check.
            candidate.image_url = await self.find_image(card, url, candidate.link)
            candidates.append(candidate)
        return candidates

    def card_chain(self) -> tuple[str, ...]:
        return (*self.card_selectors, *DEFAULT_ARTICLE_SELECTORS)

    def title_chain(self) -> tuple[str | None, ...]:
        return (self.title_selector, *DEFAULT_TITLE_SELECTORS)

    def link_chain(self) -> tuple[str | None, ...]:
        return (self.link_selector, *DEFAULT_LINK_SELECTORS)

    def find_cards(self, soup: BeautifulSoup) -> list[Tag]:
        for selector in self.card_chain():
            cards = soup.select(selector)
            if cards:
                LOGGER.debug("%s: using card selector %r (%d matches)", self.display_name, selector, len(cards))
                return cards
        return []

    def build_candidate(self, card: Tag, page_url: str) -> RawArticleCandidate | None:
        title = self.extract_title(card)
        if not title:
            return None
        link = self.extract_link(card, page_url)
        if not link:
            return None
        if len(title) < self.min_title_length:
            LOGGER.debug("%s: title too short %r", self.display_name, title)
            return None

        summary = first_text(card, (self.summary_selector,)) if self.summary_selector else ""
        return RawArticleCandidate(title=title, link=link, summary=summary)

    def extract_title(self, card: Tag) -> str:
        title = first_text(card, self.title_chain())
        if title:
            return title
        anchor = card if card.name == "a" else card.find("a")
        return clean_text(anchor.get_text(" ")) if anchor is not None else ""

    def extract_link(self, card: Tag, page_url: str) -> str | None:
        for selector in self.link_chain():
            if not selector:
                continue
            for anchor in card.select(selector):
                resolved = resolve_url(anchor.get("href"), page_url)
                if resolved:
                    return resolved
        if card.name == "a":
            return resolve_url(card.get("href"), page_url)
        return None

    async def find_image(self, card: Tag, page_url: str, link: str) -> str | None:
        images = self.context.images
        if self.image_selector:
            image_url = images.from_element(card.select_one(self.image_selector), page_url)
            if image_url:
                return image_url
        return images.from_element(card, page_url)

    async def process_candidate(self, candidate: RawArticleCandidate):
        if self.fetch_detail:
            await self.enrich_from_detail(candidate)
        apply_content_floor(candidate)
        return await self.save(candidate)

    async def enrich_from_detail(self, candidate: RawArticleCandidate) -> None:
        soup = await self.fetch_document(candidate.link)
        if soup is None:
            LOGGER.warning("%s: article page unavailable %s", self.display_name, candidate.link)
            return
        candidate.content = self.extract_body(soup)
        if not candidate.image_url:
            candidate.image_url = self.context.images.from_document(soup, candidate.link)

    def extract_body(self, soup: BeautifulSoup) -> str:
        paragraphs: list[str] = []
        seen: set[str] = set()
        collected = 0
        for selector in (*self.content_selectors, *DEFAULT_CONTENT_SELECTORS):
            for node in soup.select(selector):
                text = clean_text(node.get_text(" "))
                if len(text) < self.min_paragraph_length or text in seen or self.is_boilerplate(text):
                    continue
                seen.add(text)
                paragraphs.append(text)
                collected += len(text)
            if collected > BODY_TARGET_LENGTH:
                break
        return "\n\n".join(paragraphs)

    def is_boilerplate(self, text: str) -> bool:
        lowered = text.lower()
        return any(phrase.lower() in lowered for phrase in self.boilerplate_phrases)


__all__ = ["BODY_TARGET_LENGTH", "DEFAULT_CONTENT_SELECTORS", "ListingExtractor"]
