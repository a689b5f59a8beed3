"""Reddit news subreddits read through the public JSON listings."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Mapping

from ..normalize import is_valid_image_url
from . import Extractor, RawArticleCandidate, apply_content_floor

LOGGER = logging.getLogger(__name__)

SUBREDDITS: tuple[str, ...] = ("worldnews", "news", "noticias", "peru", "LatinAmerica")
POST_LIMIT = 15
MIN_SELFTEXT_LENGTH = 50


def is_news_post(post: Mapping[str, Any]) -> bool:
    title = post.get("title") or ""
    return (
        len(title) > 10
        and "[Removed]" not in title
        and not post.get("over_18")
        and bool(post.get("url"))
        and post.get("domain") != f"self.{post.get('subreddit')}"
    )


def listing_posts(payload: Any) -> list[Mapping[str, Any]] | None:
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except ValueError:
            return None
    if not isinstance(payload, Mapping):
        return None
    children = (payload.get("data") or {}).get("children")
    if not isinstance(children, list):
        return None
    return [child.get("data") or {} for child in children if isinstance(child, Mapping)]


class RedditExtractor(Extractor):
    name = "Reddit News"
    base_url = "https://www.reddit.com"

    subreddits: tuple[str, ...] = SUBREDDITS
    post_delay = (0.5, 1.5)
    subreddit_delay = (2.0, 4.0)

    def listing_url(self, subreddit: str) -> str:
        return f"{self.base_url}/r/{subreddit}/hot.json?limit={POST_LIMIT}"

    async def run(self, saved: list) -> None:
        for subreddit in self.subreddits:
            try:
                await self._scrape_subreddit(subreddit, saved)
            except Exception:
                LOGGER.exception("Error reading r/%s", subreddit)
            await self.context.pause(self.subreddit_delay)

    async def _scrape_subreddit(self, subreddit: str, saved: list) -> None:
        posts = listing_posts(await self.fetch(self.listing_url(subreddit)))
        if posts is None:
            LOGGER.warning("No usable listing for r/%s", subreddit)
            return

        LOGGER.info("r/%s: %d posts", subreddit, len(posts))
        for post in posts:
            try:
                if is_news_post(post):
                    record = await self.save(self.build_candidate(post, subreddit))
                    if record is not None:
                        saved.append(record)
            except Exception:
                LOGGER.exception("Error processing Reddit post %r", post.get("title"))
            await self.context.pause(self.post_delay)

    def build_candidate(self, post: Mapping[str, Any], subreddit: str) -> RawArticleCandidate:
        domain = post.get("domain") or ""
        ups = post.get("ups", 0)
        comments = post.get("num_comments", 0)
        discussion_url = f"{self.base_url}{post.get('permalink', '')}"

        content = post.get("selftext") or ""
        if len(content) < MIN_SELFTEXT_LENGTH:
            content = (
                f"Story from {domain} shared on Reddit r/{subreddit}.\n\n"
                f"{ups} upvotes, {comments} comments\n\n"
                f"Discussion: {discussion_url}"
            )

        image_url = None
        for value in (post.get("url"), post.get("thumbnail")):
            if is_valid_image_url(value):
                image_url = value
                break

        published_at = None
        created = post.get("created_utc")
        if isinstance(created, (int, float)):
            published_at = datetime.fromtimestamp(created, tz=timezone.utc).replace(tzinfo=None)

        candidate = RawArticleCandidate(
            title=post["title"],
            link=post["url"],
            image_url=image_url,
            summary=f"Reddit r/{subreddit} | {ups} upvotes | {comments} comments | {domain}",
            content=content,
            published_at=published_at,
        )
        return apply_content_floor(candidate)


__all__ = ["RedditExtractor", "SUBREDDITS", "is_news_post", "listing_posts"]
