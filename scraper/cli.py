"""Command line entry point for one-off scraping runs."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from typing import Sequence

from .config import ScraperConfig, load_config, parse_site_list
from .manager import ScraperManager
from .selectors import SelectorConfigError
from .sites import list_sites
from .store import SqlAlchemyNewsStore, create_session_factory, init_schema

LOGGER = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def build_arg_parser() -> argparse.ArgumentParser:
    site_help = ", ".join(definition.slug for definition in list_sites())

    parser = argparse.ArgumentParser(description="Scrape Peruvian news sources into the portal database")
    parser.add_argument("--db-url", type=str, default=None, help="SQLAlchemy database URL (defaults to env)")
    parser.add_argument(
        "--sites",
        type=str,
        default=None,
        help=f"Comma separated site slugs to run instead of the defaults ({site_help})",
    )
    parser.add_argument(
        "--no-sources",
        action="store_true",
        help="Skip operator-configured sources stored in the database",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("all", help="Run every source once")

    site_parser = subparsers.add_parser("site", help="Run the first source whose name contains NAME")
    site_parser.add_argument("name", help="Case-insensitive fragment of the source name")

    massive_parser = subparsers.add_parser("massive", help="Repeat runs until a target record count")
    massive_parser.add_argument("--target", type=int, default=None, help="Number of new records to aim for")

    preview_parser = subparsers.add_parser("preview", help="Test a selector configuration without storing")
    preview_parser.add_argument("url", help="Listing page to scrape")
    preview_parser.add_argument("--article-selector", dest="articleSelector")
    preview_parser.add_argument("--title-selector", dest="titleSelector")
    preview_parser.add_argument("--link-selector", dest="linkSelector")
    preview_parser.add_argument("--image-selector", dest="imageSelector")
    preview_parser.add_argument("--summary-selector", dest="summarySelector")
    return parser


def build_config(args: argparse.Namespace, base: ScraperConfig | None = None) -> ScraperConfig:
    config = base or load_config()
    updates = {}
    if args.db_url:
        updates["db_url"] = args.db_url
    if args.sites:
        updates["enabled_sites"] = parse_site_list(args.sites)
    if args.no_sources:
        updates["include_configured_sources"] = False
    return replace(config, **updates) if updates else config


async def _dispatch(manager: ScraperManager, args: argparse.Namespace):
    if args.command == "all":
        return await manager.run_all()
    if args.command == "site":
        return await manager.run_specific(args.name)
    if args.command == "massive":
        return await manager.run_massive(args.target)
    selectors = {
        key: getattr(args, key)
        for key in ("articleSelector", "titleSelector", "linkSelector", "imageSelector", "summarySelector")
        if getattr(args, key)
    }
    return await manager.preview_source(args.url, selectors)


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    if not config.db_url:
        parser.error("--db-url is required (or set SCRAPER_DATABASE_URL)")

    session_factory = create_session_factory(config.db_url)
    init_schema(session_factory)  # ensure required tables exist before queries
    manager = ScraperManager(SqlAlchemyNewsStore(session_factory), config)

    try:
        result = asyncio.run(_dispatch(manager, args))
    except SelectorConfigError as exc:
        parser.error(str(exc))

    json.dump(result.as_payload(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 1 if getattr(result, "error", None) else 0


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    raise SystemExit(main())
