"""Celery application and beat schedule for periodic scraping runs."""

from __future__ import annotations

import logging
import os
from typing import Any, Dict

from celery import Celery, signals
from celery.schedules import crontab

from .config import ScheduleConfig, ScraperConfig, load_config

LOGGER = logging.getLogger(__name__)

SCHEDULED_TASK_NAME = "scraper.run_scheduled_scrape"


def build_beat_schedule(schedule: ScheduleConfig) -> Dict[str, Dict[str, Any]]:
    return {
        "scrape-news-sources": {
            "task": SCHEDULED_TASK_NAME,
            "schedule": crontab(minute=0, hour=schedule.cron_hours()),
        }
    }


def create_celery_app(config: ScraperConfig | None = None) -> Celery:
    """Instantiate the Celery app with environment driven configuration."""

    config = config or load_config()
    broker_url = os.getenv("SCRAPER_CELERY_BROKER_URL") or "memory://"
    backend_url = os.getenv("SCRAPER_CELERY_RESULT_BACKEND") or "cache+memory://"

    app = Celery("scraper", broker=broker_url, backend=backend_url, include=["scraper.tasks"])
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone=config.schedule.timezone,
        enable_utc=False,
        beat_schedule=build_beat_schedule(config.schedule),
        # The reentrancy guard is per process, so one worker process serialises runs.
        worker_concurrency=1,
        worker_prefetch_multiplier=1,
        broker_connection_retry_on_startup=True,
    )
    _install_signal_handlers(app, config.schedule)
    return app


def _install_signal_handlers(app: Celery, schedule: ScheduleConfig) -> None:
    if not schedule.run_on_start:
        return

    @signals.worker_ready.connect(weak=False)
    def _scrape_on_start(sender=None, **_kwargs) -> None:
        LOGGER.info("Queueing initial scraping run in %.0fs", schedule.start_delay)
        app.send_task(SCHEDULED_TASK_NAME, countdown=schedule.start_delay)


celery_app = create_celery_app()


__all__ = ["SCHEDULED_TASK_NAME", "build_beat_schedule", "celery_app", "create_celery_app"]
