"""Run orchestration across the configured news sources."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .config import ScraperConfig
from .extractors import Extractor, ExtractorContext
from .extractors.generic import GenericExtractor
from .http_client import AsyncHttpFetcher, SleepFunc
from .persistence import NewsDraft, PreviewSink, StoreSink
from .selectors import SelectorConfig, SelectorConfigError, SourceDefinition
from .sites import build_site_roster
from .store import NewsStoreError, RecordStore, find_or_create_category

LOGGER = logging.getLogger(__name__)

PREVIEW_LIMIT = 5

FetcherFactory = Callable[[ScraperConfig], AsyncHttpFetcher]


@dataclass(slots=True)
class SourceRunResult:
    name: str
    news_count: int
    duration: float = 0.0
    error: str | None = None
    cycle: int | None = None
    cumulative_total: int | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"scraper": self.name, "newsCount": self.news_count}
        if self.error is None:
            payload["duration"] = f"{self.duration:.2f}s"
        else:
            payload["error"] = self.error
        if self.cycle is not None:
            payload["cycle"] = self.cycle
            payload["cumulativeTotal"] = self.cumulative_total
        return payload


@dataclass(slots=True)
class RunSummary:
    total_news: int = 0
    results: list[SourceRunResult] = field(default_factory=list)
    error: str | None = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "totalNews": self.total_news,
            "results": [result.as_payload() for result in self.results],
        }
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass(slots=True)
class MassiveRunSummary(RunSummary):
    target: int = 0
    cycles: int = 0
    by_source: dict[str, int] = field(default_factory=dict)

    def as_payload(self) -> dict[str, Any]:
        payload = RunSummary.as_payload(self)
        payload.update({"target": self.target, "cycles": self.cycles, "bySource": dict(self.by_source)})
        return payload


@dataclass(slots=True)
class PreviewSummary:
    count: int = 0
    results: list[NewsDraft] = field(default_factory=list)

    def as_payload(self) -> dict[str, Any]:
        return {
            "success": True,
            "count": self.count,
            "results": [
                {
                    "title": draft.title,
                    "slug": draft.slug,
                    "summary": draft.summary,
                    "content": draft.content,
                    "imageUrl": draft.image_url,
                    "sourceUrl": draft.source_url,
                    "publishedAt": draft.published_at.isoformat(),
                }
                for draft in self.results
            ],
        }


class RunInitializationError(RuntimeError):
    """Raised when a run cannot resolve its category or build its roster."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ScraperManager:
    """Runs the roster of extractors one after another.

    Every source is isolated: an extractor that raises is recorded as a
    zero-count result and the run continues. Only a failure to resolve the
    shared category (or to build the roster) aborts a run, and even then a
    summary carrying the error is returned instead of raising.
    """

    def __init__(
        self,
        store: RecordStore,
        config: ScraperConfig | None = None,
        *,
        fetcher_factory: FetcherFactory | None = None,
        roster_builder=build_site_roster,
        sleep: SleepFunc | None = None,
        clock: Callable[[], float] = time.perf_counter,
        rng: random.Random | None = None,
    ) -> None:
        self.store = store
        self.config = config or ScraperConfig()
        self._sleep = sleep or asyncio.sleep
        self._fetcher_factory = fetcher_factory or (lambda cfg: AsyncHttpFetcher(cfg, sleep=self._sleep))
        self._roster_builder = roster_builder
        self._clock = clock
        self._rng = rng or random.Random()

    def _context(self, fetcher: AsyncHttpFetcher, sink) -> ExtractorContext:
        return ExtractorContext.build(
            fetcher,
            sink,
            pacing=self.config.pacing,
            sleep=self._sleep,
            rng=self._rng,
        )

    async def _initialize(self, fetcher: AsyncHttpFetcher) -> list[Extractor]:
        category_config = self.config.category
        try:
            category = await asyncio.to_thread(
                find_or_create_category,
                self.store,
                category_config.name,
                category_config.slug,
                category_config.description,
            )
            sources = await self._load_sources()
            context = self._context(fetcher, StoreSink(self.store))
            roster = self._roster_builder(
                context,
                category.id,
                enabled=self.config.enabled_sites,
                sources=sources,
            )
        except Exception as exc:
            raise RunInitializationError(str(exc)) from exc
        LOGGER.info("Category %s (%s); %d sources in roster", category.name, category.id, len(roster))
        return roster

    async def _load_sources(self) -> list[SourceDefinition]:
        if not self.config.include_configured_sources:
            return []
        try:
            rows = await asyncio.to_thread(self.store.list_active_sources)
        except NewsStoreError as exc:
            LOGGER.warning("Could not load configured sources: %s", exc)
            return []

        sources = []
        for row in rows:
            try:
                sources.append(SourceDefinition.from_record(row))
            except SelectorConfigError as exc:
                LOGGER.warning("Skipping source %s: %s", row.name, exc)
        return sources

    async def _run_extractor(self, extractor: Extractor) -> SourceRunResult:
        name = extractor.display_name
        LOGGER.info("Running %s", name)
        started = self._clock()
        try:
            records = await extractor.scrape()
        except Exception as exc:
            LOGGER.exception("Source %s failed", name)
            return SourceRunResult(name=name, news_count=0, duration=self._clock() - started, error=str(exc))

        result = SourceRunResult(name=name, news_count=len(records), duration=self._clock() - started)
        LOGGER.info("%s: %d new records in %.2fs", name, result.news_count, result.duration)
        if isinstance(extractor, GenericExtractor) and extractor.source.id is not None:
            await self._mark_scraped(extractor.source)
        return result

    async def _mark_scraped(self, source: SourceDefinition) -> None:
        try:
            await asyncio.to_thread(self.store.mark_source_scraped, source.id, _utcnow())
        except NewsStoreError as exc:
            LOGGER.warning("Could not update last scrape time for %s: %s", source.name, exc)

    async def run_all(self) -> RunSummary:
        LOGGER.info("Starting scraping run")
        async with self._fetcher_factory(self.config) as fetcher:
            try:
                roster = await self._initialize(fetcher)
            except RunInitializationError as exc:
                LOGGER.error("Scraping run aborted: %s", exc)
                return RunSummary(error=f"Initialization failed: {exc}")

            results: list[SourceRunResult] = []
            for index, extractor in enumerate(roster):
                if index:
                    await self._sleep(self.config.pacing.source_delay)
                results.append(await self._run_extractor(extractor))

        summary = RunSummary(total_news=sum(result.news_count for result in results), results=results)
        LOGGER.info("Scraping run finished: %d new records from %d sources", summary.total_news, len(results))
        return summary

    async def run_specific(self, name_fragment: str) -> RunSummary:
        needle = name_fragment.strip().lower()
        async with self._fetcher_factory(self.config) as fetcher:
            try:
                roster = await self._initialize(fetcher)
            except RunInitializationError as exc:
                LOGGER.error("Scraping run aborted: %s", exc)
                return RunSummary(error=f"Initialization failed: {exc}")

            extractor = next(
                (candidate for candidate in roster if needle and needle in candidate.display_name.lower()),
                None,
            )
            if extractor is None:
                LOGGER.warning("No source matches %r", name_fragment)
                return RunSummary()
            result = await self._run_extractor(extractor)

        return RunSummary(total_news=result.news_count, results=[result])

    async def run_massive(self, target_count: int | None = None) -> MassiveRunSummary:
        """Repeat full cycles until ``target_count`` new records or the cycle cap.

        Intended for seeding and stress runs: with the default pacing a full
        cycle takes minutes and the process can run for well over an hour.
        """

        massive = self.config.massive
        target = massive.default_target if target_count is None else target_count
        LOGGER.info("Starting massive run (target %d, max %d cycles)", target, massive.max_cycles)

        summary = MassiveRunSummary(target=target)
        async with self._fetcher_factory(self.config) as fetcher:
            try:
                roster = await self._initialize(fetcher)
            except RunInitializationError as exc:
                LOGGER.error("Massive run aborted: %s", exc)
                summary.error = f"Initialization failed: {exc}"
                return summary

            while summary.total_news < target and summary.cycles < massive.max_cycles:
                summary.cycles += 1
                cycle_total = 0
                for index, extractor in enumerate(roster):
                    if index:
                        await self._sleep(massive.source_delay)
                    result = await self._run_extractor(extractor)
                    summary.total_news += result.news_count
                    cycle_total += result.news_count
                    result.cycle = summary.cycles
                    result.cumulative_total = summary.total_news
                    summary.results.append(result)
                    summary.by_source[result.name] = summary.by_source.get(result.name, 0) + result.news_count

                LOGGER.info(
                    "Cycle %d: %d new records (%d/%d)", summary.cycles, cycle_total, summary.total_news, target
                )
                if summary.total_news < target and summary.cycles < massive.max_cycles:
                    LOGGER.info("Waiting %.0fs before the next cycle", massive.cycle_wait)
                    await self._sleep(massive.cycle_wait)

        LOGGER.info("Massive run finished: %d records in %d cycles", summary.total_news, summary.cycles)
        return summary

    async def preview_source(
        self,
        url: str,
        selectors: Mapping[str, Any] | str | None = None,
        *,
        name: str = "Preview",
    ) -> PreviewSummary:
        """Run the generic extractor against ``url`` without storing anything.

        Raises :class:`SelectorConfigError` for an invalid selector set.
        """

        source = SourceDefinition(name=name, url=url, selectors=SelectorConfig.from_mapping(selectors))
        try:
            category = await asyncio.to_thread(self.store.find_category_by_name, self.config.category.name)
        except NewsStoreError as exc:
            LOGGER.warning("Category lookup failed during preview: %s", exc)
            category = None

        sink = PreviewSink()
        async with self._fetcher_factory(self.config) as fetcher:
            extractor = GenericExtractor(self._context(fetcher, sink), getattr(category, "id", None), source)
            drafts = await extractor.scrape()
        return PreviewSummary(count=len(drafts), results=drafts[:PREVIEW_LIMIT])


__all__ = [
    "MassiveRunSummary",
    "PREVIEW_LIMIT",
    "PreviewSummary",
    "RunInitializationError",
    "RunSummary",
    "ScraperManager",
    "SourceRunResult",
]
