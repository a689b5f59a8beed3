"""Celery tasks for scheduled scraping runs."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any

from .celery_app import SCHEDULED_TASK_NAME, celery_app
from .config import load_config
from .jobs import ScrapingJob
from .manager import ScraperManager
from .store import SqlAlchemyNewsStore, create_session_factory, init_schema

LOGGER = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _scraping_job() -> ScrapingJob:
    config = load_config()
    if not config.db_url:
        raise RuntimeError("SCRAPER_DATABASE_URL (or DATABASE_URL) must be set for scheduled runs")
    session_factory = create_session_factory(config.db_url)
    init_schema(session_factory)
    return ScrapingJob(ScraperManager(SqlAlchemyNewsStore(session_factory), config))


@celery_app.task(name=SCHEDULED_TASK_NAME)
def run_scheduled_scrape() -> dict[str, Any]:
    job = _scraping_job()
    summary = asyncio.run(job.run())
    if summary is None:
        return {"status": "skipped"}
    payload = summary.as_payload()
    payload["status"] = "error" if summary.error else "ok"
    return payload


__all__ = ["run_scheduled_scrape"]
