"""Scheduled scraping job with a reentrancy guard."""

from __future__ import annotations

import logging

from .manager import RunSummary, ScraperManager

LOGGER = logging.getLogger(__name__)


class ScrapingJob:
    """Wraps :meth:`ScraperManager.run_all` so overlapping triggers are skipped.

    The guard is a plain flag: triggers all arrive on the same event loop, so
    the check and the set happen without an intervening ``await``.
    """

    def __init__(self, manager: ScraperManager) -> None:
        self.manager = manager
        self.is_running = False

    async def run(self) -> RunSummary | None:
        if self.is_running:
            LOGGER.warning("Scraping run already in progress; skipping trigger")
            return None

        self.is_running = True
        LOGGER.info("Scheduled scraping run starting")
        try:
            summary = await self.manager.run_all()
        except Exception:
            LOGGER.exception("Scheduled scraping run failed")
            return None
        finally:
            self.is_running = False

        if summary.error:
            LOGGER.error("Scheduled scraping run aborted: %s", summary.error)
        else:
            LOGGER.info("Scheduled scraping run finished: %d new records", summary.total_news)
        return summary


__all__ = ["ScrapingJob"]
