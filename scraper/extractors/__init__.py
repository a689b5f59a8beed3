"""Extractor interfaces and the helpers shared by every news source."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Iterable, Mapping

from bs4 import BeautifulSoup, Tag

from ..config import PacingConfig
from ..http_client import AsyncHttpFetcher, SleepFunc
from ..normalize import ImageExtractor, clean_text, extract_domain
from ..persistence import NewsSink

LOGGER = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100


@dataclass(slots=True)
class RawArticleCandidate:
    title: str
    link: str
    image_url: str | None = None
    summary: str = ""
    content: str = ""
    published_at: datetime | None = None


@dataclass(slots=True)
class ExtractorContext:
    """Collaborators injected into every extractor of a run."""

    fetcher: AsyncHttpFetcher
    sink: NewsSink
    images: ImageExtractor
    pacing: PacingConfig = field(default_factory=PacingConfig)
    sleep: SleepFunc = asyncio.sleep
    rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def build(
        cls,
        fetcher: AsyncHttpFetcher,
        sink: NewsSink,
        *,
        pacing: PacingConfig | None = None,
        sleep: SleepFunc | None = None,
        rng: random.Random | None = None,
    ) -> "ExtractorContext":
        return cls(
            fetcher=fetcher,
            sink=sink,
            images=ImageExtractor(fetcher),
            pacing=pacing or PacingConfig(),
            sleep=sleep or asyncio.sleep,
            rng=rng or random.Random(),
        )

    async def pause(self, delay: float | tuple[float, float]) -> None:
        if isinstance(delay, tuple):
            low, high = delay
            delay = self.rng.uniform(low, high) if high > low else low
        if delay > 0:
            await self.sleep(delay)


class Extractor:
    """Base class for a news source.

    Subclasses implement :meth:`run`, appending stored records to the list
    they receive. :meth:`scrape` never raises: an unexpected error ends the
    source early and whatever was stored until then is returned.
    """

    name: ClassVar[str] = ""
    base_url: ClassVar[str] = ""
    headers: ClassVar[Mapping[str, str]] = {}

    def __init__(self, context: ExtractorContext, category_id: Any) -> None:
        self.context = context
        self.category_id = category_id

    @property
    def display_name(self) -> str:
        return self.name

    async def scrape(self) -> list:
        saved: list = []
        LOGGER.info("Scraping %s", self.display_name)
        try:
            await self.run(saved)
        except Exception:
            LOGGER.exception("Scraping %s failed", self.display_name)
        LOGGER.info("%s finished: %d new records", self.display_name, len(saved))
        return saved

    async def run(self, saved: list) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    async def fetch(self, url: str):
        return await self.context.fetcher.fetch(url, headers=self.headers)

    async def fetch_document(self, url: str) -> BeautifulSoup | None:
        payload = await self.fetch(url)
        if not isinstance(payload, str):
            return None
        return BeautifulSoup(payload, "html.parser")

    async def save(self, candidate: RawArticleCandidate):
        return await self.context.sink.save(candidate, self.category_id)


def select_first(node: Tag, selectors: Iterable[str | None]) -> Tag | None:
    for selector in selectors:
        if not selector:
            continue
        match = node.select_one(selector)
        if match is not None:
            return match
    return None


def first_text(node: Tag, selectors: Iterable[str | None]) -> str:
    """Cleaned text of the first selector whose match has any text."""
    for selector in selectors:
        if not selector:
            continue
        match = node.select_one(selector)
        if match is None:
            continue
        text = clean_text(match.get_text(" "))
        if text:
            return text
    return ""


def apply_content_floor(candidate: RawArticleCandidate) -> RawArticleCandidate:
    if len((candidate.content or "").strip()) >= MIN_CONTENT_LENGTH:
        return candidate
    if candidate.summary:
        candidate.content = candidate.summary
    else:
        domain = extract_domain(candidate.link) or "the original site"
        candidate.content = f"See the full story at {domain}."
    return candidate


__all__ = [
    "Extractor",
    "ExtractorContext",
    "MIN_CONTENT_LENGTH",
    "RawArticleCandidate",
    "apply_content_floor",
    "first_text",
    "select_first",
]
