"""Configuration shared by the extractors, the manager and the scheduled job."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

DEFAULT_CATEGORY_NAME = "Nacionales"
DEFAULT_CATEGORY_SLUG = "nacionales"
DEFAULT_CATEGORY_DESCRIPTION = "Noticias de medios peruanos"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(slots=True)
class TimeoutConfig:
    request_timeout: float = 15.0


@dataclass(slots=True)
class RateLimitConfig:
    cooldown: float = 30.0


@dataclass(slots=True)
class PacingConfig:
    source_delay: float = 2.0
    section_delay: float = 3.0
    article_delay_min: float = 1.5
    article_delay_max: float = 3.0

    @property
    def article_delay(self) -> tuple[float, float]:
        return self.article_delay_min, self.article_delay_max


@dataclass(slots=True)
class MassiveRunConfig:
    max_cycles: int = 10
    cycle_wait: float = 120.0
    source_delay: float = 3.0
    default_target: int = 1000


@dataclass(slots=True)
class ScheduleConfig:
    interval_hours: int = 6
    run_on_start: bool = False
    start_delay: float = 5.0
    timezone: str = "America/Lima"

    def cron_hours(self) -> str:
        return f"*/{self.interval_hours}"


@dataclass(slots=True)
class CategoryConfig:
    name: str = DEFAULT_CATEGORY_NAME
    slug: str = DEFAULT_CATEGORY_SLUG
    description: str = DEFAULT_CATEGORY_DESCRIPTION


@dataclass(slots=True)
class ScraperConfig:
    db_url: Optional[str] = None
    enabled_sites: tuple[str, ...] = ()
    include_configured_sources: bool = True
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    pacing: PacingConfig = field(default_factory=PacingConfig)
    massive: MassiveRunConfig = field(default_factory=MassiveRunConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    category: CategoryConfig = field(default_factory=CategoryConfig)

    def validate(self) -> None:
        if self.pacing.article_delay_min > self.pacing.article_delay_max:
            raise ValueError("article_delay_min must not exceed article_delay_max")
        if self.massive.max_cycles < 1:
            raise ValueError("massive.max_cycles must be at least 1")
        if self.schedule.interval_hours < 1 or self.schedule.interval_hours > 23:
            raise ValueError("schedule.interval_hours must be between 1 and 23")
        if self.timeout.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")


def _env_str(env: Mapping[str, str], name: str) -> str | None:
    value = env.get(name)
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc
    if value < 0:
        raise ValueError(f"{name} must not be negative (got {raw!r})")
    return value


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = _env_str(env, name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = _env_str(env, name)
    if raw is None:
        return default
    return raw.lower() in _TRUE_VALUES


def parse_site_list(raw_value: str | None) -> tuple[str, ...]:
    if not raw_value:
        return ()

    selected: list[str] = []
    for part in raw_value.split(","):
        slug = part.strip().lower()
        if not slug or slug in selected:
            continue
        selected.append(slug)
    return tuple(selected)


def load_config(env: Mapping[str, str] | None = None) -> ScraperConfig:
    """Build a :class:`ScraperConfig` from environment variables."""

    env = os.environ if env is None else env
    config = ScraperConfig(
        db_url=_env_str(env, "SCRAPER_DATABASE_URL") or _env_str(env, "DATABASE_URL"),
        enabled_sites=parse_site_list(env.get("SCRAPER_SITES")),
        include_configured_sources=_env_bool(env, "SCRAPER_INCLUDE_SOURCES", True),
    )

    config.timeout.request_timeout = _env_float(
        env, "SCRAPER_REQUEST_TIMEOUT", config.timeout.request_timeout
    )
    config.rate_limit.cooldown = _env_float(env, "SCRAPER_RATE_LIMIT_COOLDOWN", config.rate_limit.cooldown)

    pacing = config.pacing
    pacing.source_delay = _env_float(env, "SCRAPER_SOURCE_DELAY", pacing.source_delay)
    pacing.section_delay = _env_float(env, "SCRAPER_SECTION_DELAY", pacing.section_delay)
    pacing.article_delay_min = _env_float(env, "SCRAPER_ARTICLE_DELAY_MIN", pacing.article_delay_min)
    pacing.article_delay_max = _env_float(env, "SCRAPER_ARTICLE_DELAY_MAX", pacing.article_delay_max)

    config.massive.max_cycles = _env_int(env, "SCRAPER_MASSIVE_MAX_CYCLES", config.massive.max_cycles)
    config.massive.cycle_wait = _env_float(env, "SCRAPER_MASSIVE_CYCLE_WAIT", config.massive.cycle_wait)

    schedule = config.schedule
    schedule.interval_hours = _env_int(env, "SCRAPE_INTERVAL", schedule.interval_hours)
    schedule.run_on_start = _env_bool(env, "SCRAPE_ON_START", schedule.run_on_start)
    schedule.timezone = _env_str(env, "SCRAPE_TIMEZONE") or schedule.timezone

    config.category.name = _env_str(env, "SCRAPER_CATEGORY_NAME") or config.category.name
    config.category.slug = _env_str(env, "SCRAPER_CATEGORY_SLUG") or config.category.slug

    config.validate()
    return config


__all__ = [
    "CategoryConfig",
    "MassiveRunConfig",
    "PacingConfig",
    "RateLimitConfig",
    "ScheduleConfig",
    "ScraperConfig",
    "TimeoutConfig",
    "load_config",
    "parse_site_list",
]
