"""Persistence gate between extracted candidates and the record store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from models import News, NewsType

from .normalize import clean_content, generate_slug, is_valid_image_url
from .store import NewsStoreError, RecordStore

if TYPE_CHECKING:
    from .extractors import RawArticleCandidate

LOGGER = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 5
SUMMARY_FALLBACK_LENGTH = 200


@dataclass(slots=True)
class NewsDraft:
    """Validated field set ready to be stored as a scraped record."""

    title: str
    slug: str
    summary: str
    content: str
    image_url: str | None
    source_url: str
    category_id: Any
    published_at: datetime
    is_published: bool = True
    type: NewsType = NewsType.SCRAPED

    def as_fields(self) -> dict[str, Any]:
        return asdict(self)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def prepare_news(candidate: "RawArticleCandidate", category_id: Any) -> NewsDraft | None:
    """Normalize a candidate; ``None`` when it fails validation."""

    raw_title = candidate.title or ""
    if not raw_title.strip():
        LOGGER.info("Skipping candidate with empty title (%s)", candidate.link)
        return None

    slug = generate_slug(raw_title)
    if not slug:
        LOGGER.info("Skipping %r: title yields an empty slug", raw_title[:50])
        return None

    title = raw_title.strip()
    summary = (candidate.summary or raw_title[:SUMMARY_FALLBACK_LENGTH]).strip()
    draft = NewsDraft(
        title=title,
        slug=slug,
        summary=summary,
        content=clean_content(candidate.content or ""),
        image_url=candidate.image_url if is_valid_image_url(candidate.image_url) else None,
        source_url=candidate.link or "",
        category_id=category_id,
        published_at=candidate.published_at or _utcnow(),
    )
    if len(draft.title) < MIN_TITLE_LENGTH:
        LOGGER.info("Skipping %r: title too short", draft.title)
        return None
    return draft


class NewsSink:
    """Destination for candidates produced by an extractor."""

    async def save(self, candidate: "RawArticleCandidate", category_id: Any):  # pragma: no cover - interface only
        raise NotImplementedError


class StoreSink(NewsSink):
    """Writes new scraped records; duplicates and invalid candidates yield ``None``."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()

    async def save(self, candidate: "RawArticleCandidate", category_id: Any) -> News | None:
        if not (candidate.title or "").strip():
            LOGGER.info("Skipping candidate with empty title (%s)", candidate.link)
            return None

        async with self._lock:
            try:
                return await self._save_locked(candidate, category_id)
            except NewsStoreError as exc:
                LOGGER.warning("Could not store %r: %s", candidate.title[:60], exc)
                return None

    async def _save_locked(self, candidate: "RawArticleCandidate", category_id: Any) -> News | None:
        slug = generate_slug(candidate.title)
        if slug:
            existing = await asyncio.to_thread(self._store.find_by_slug, slug)
            if existing is not None:
                LOGGER.debug("Already stored: %s", candidate.title[:50])
                return None

        draft = prepare_news(candidate, category_id)
        if draft is None:
            return None

        news = await asyncio.to_thread(self._store.create, draft.as_fields())
        LOGGER.info("Saved scraped news: %s", draft.title[:60])
        return news


class PreviewSink(NewsSink):
    """Validates candidates without storing them; collected drafts are kept in order."""

    def __init__(self) -> None:
        self.drafts: list[NewsDraft] = []

    async def save(self, candidate: "RawArticleCandidate", category_id: Any) -> NewsDraft | None:
        draft = prepare_news(candidate, category_id)
        if draft is None:
            return None
        if any(existing.slug == draft.slug for existing in self.drafts):
            return None
        self.drafts.append(draft)
        return draft


__all__ = [
    "MIN_TITLE_LENGTH",
    "NewsDraft",
    "NewsSink",
    "PreviewSink",
    "StoreSink",
    "prepare_news",
]
