"""Text cleaning, slug generation and image discovery helpers."""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import TYPE_CHECKING
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup, Tag

if TYPE_CHECKING:
    from .http_client import AsyncHttpFetcher

LOGGER = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 100

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_HEADING_RE = re.compile(r"#{1,6}\s?")
_QUOTE_RE = re.compile(r"^[ \t]*>[ \t]?", re.MULTILINE)
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_SLUG_STRIP_RE = re.compile(r"[^a-z0-9\s]")
_CSS_URL_RE = re.compile(r"""url\(\s*['"]?(.*?)['"]?\s*\)""", re.IGNORECASE)

_IMAGE_SENTINELS = frozenset({"self", "default", "image", "nsfw"})
_IMAGE_PATTERNS = (
    re.compile(r"\.(?:jpg|jpeg|png|gif|webp|bmp|avif)(?:\?[^#]*)?$", re.IGNORECASE),
    re.compile(r"imgur\.com/[a-zA-Z0-9]+$", re.IGNORECASE),
    re.compile(r"(?<![\w.])redd\.it/[a-zA-Z0-9]+$", re.IGNORECASE),
    re.compile(r"i\.redd\.it/[a-zA-Z0-9]+\.[a-z]+$", re.IGNORECASE),
)
_UNRESOLVABLE_PREFIXES = ("data:", "javascript:", "mailto:", "tel:", "#")

_IMAGE_ATTRIBUTES = ("src", "data-src", "data-original", "data-lazy-src", "data-lazy")
_SRCSET_ATTRIBUTES = ("srcset", "data-srcset")


def clean_text(text: str | None) -> str:
    """Strip tag-like substrings and collapse whitespace."""
    if not text:
        return ""
    without_tags = _TAG_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", without_tags).strip()


def clean_content(content: str | None) -> str:
    """Strip markdown/quote syntax from body text while keeping paragraph breaks."""
    if not content:
        return ""
    cleaned = _MARKDOWN_LINK_RE.sub(r"\1", content)
    cleaned = _BOLD_RE.sub(r"\1", cleaned)
    cleaned = _ITALIC_RE.sub(r"\1", cleaned)
    cleaned = _HEADING_RE.sub("", cleaned)
    cleaned = _QUOTE_RE.sub("", cleaned)
    cleaned = _EXCESS_NEWLINES_RE.sub("\n\n", cleaned)
    return cleaned.strip()


def generate_slug(title: str | None, max_length: int = SLUG_MAX_LENGTH) -> str:
    """Derive the deduplication slug for a headline.

    ``"Café del Perú: ¡Vamos!"`` becomes ``"cafe-del-peru-vamos"``. Only
    ``str.lower`` and NFD decomposition are involved, so the result does not
    depend on the process locale.
    """
    if not title:
        return ""
    decomposed = unicodedata.normalize("NFD", title.lower())
    without_marks = "".join(char for char in decomposed if not unicodedata.combining(char))
    ascii_only = _SLUG_STRIP_RE.sub("", without_marks)
    hyphenated = _WHITESPACE_RE.sub("-", ascii_only.strip())
    return hyphenated[:max_length].strip("-")


def is_valid_image_url(url: str | None) -> bool:
    if not url:
        return False
    candidate = url.strip()
    if not candidate or candidate.lower() in _IMAGE_SENTINELS:
        return False
    return any(pattern.search(candidate) for pattern in _IMAGE_PATTERNS)


def resolve_url(raw_url: str | None, base_url: str) -> str | None:
    """Return an absolute http(s) URL for ``raw_url`` or ``None``."""
    if not raw_url:
        return None
    cleaned = raw_url.strip()
    if not cleaned or cleaned.lower().startswith(_UNRESOLVABLE_PREFIXES):
        return None
    if cleaned.startswith("//"):
        cleaned = f"https:{cleaned}"
    resolved = urljoin(base_url, cleaned)
    parts = urlsplit(resolved)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        return None
    return resolved


def extract_domain(url: str | None) -> str | None:
    if not url:
        return None
    try:
        hostname = urlsplit(url).hostname
    except ValueError:
        return None
    return hostname or None


def first_srcset_entry(value: str | None) -> str | None:
    if not value:
        return None
    first = value.split(",")[0].strip()
    if not first:
        return None
    return first.split()[0]


class ImageExtractor:
    """Tiered image discovery for listing cards and article pages.

    The only network access happens in :meth:`extract_image` when the card
    carries no usable image and an article URL is known; that lookup is best
    effort and never raises.
    """

    def __init__(self, fetcher: "AsyncHttpFetcher") -> None:
        self._fetcher = fetcher

    def from_element(self, element: Tag | None, base_url: str) -> str | None:
        if element is None:
            return None
        for raw in self._element_candidates(element):
            resolved = resolve_url(raw, base_url)
            if resolved and is_valid_image_url(resolved):
                return resolved
        return None

    def _element_candidates(self, element: Tag):
        images = [element] if element.name == "img" else []
        images.extend(element.find_all("img"))
        for attr in _IMAGE_ATTRIBUTES:
            for img in images:
                value = img.get(attr)
                if value:
                    yield value
                    break
        for attr in _SRCSET_ATTRIBUTES:
            for img in images:
                value = first_srcset_entry(img.get(attr))
                if value:
                    yield value
                    break
        for source in element.select("picture source"):
            value = first_srcset_entry(source.get("srcset"))
            if value:
                yield value
                break
        for styled in self._styled_elements(element):
            match = _CSS_URL_RE.search(styled.get("style", ""))
            if match and match.group(1):
                yield match.group(1)
                break

    @staticmethod
    def _styled_elements(element: Tag) -> list[Tag]:
        styled = [element] if "background-image" in (element.get("style") or "") else []
        styled.extend(element.select('[style*="background-image"]'))
        return styled

    def from_document(self, soup: BeautifulSoup, base_url: str) -> str | None:
        candidates = (
            soup.find("meta", attrs={"property": "og:image"}),
            soup.find("meta", attrs={"name": "twitter:image"}),
            soup.find("meta", attrs={"property": "twitter:image"}),
        )
        raw_values = [tag.get("content") for tag in candidates if tag is not None]
        link_tag = soup.find("link", attrs={"rel": "image_src"})
        if link_tag is not None:
            raw_values.append(link_tag.get("href"))

        for raw in raw_values:
            resolved = resolve_url(raw, base_url)
            if resolved and is_valid_image_url(resolved):
                return resolved
        return None

    async def extract_image(
        self,
        element: Tag | None,
        base_url: str,
        article_url: str | None = None,
    ) -> str | None:
        image_url = self.from_element(element, base_url)
        if image_url or not article_url:
            return image_url

        LOGGER.debug("Looking up meta image on %s", article_url)
        try:
            payload = await self._fetcher.fetch(article_url)
            if not isinstance(payload, str):
                return None
            return self.from_document(BeautifulSoup(payload, "html.parser"), article_url)
        except Exception as exc:  # pragma: no cover - best effort lookup
            LOGGER.debug("Meta image lookup failed for %s: %s", article_url, exc)
            return None


__all__ = [
    "ImageExtractor",
    "SLUG_MAX_LENGTH",
    "clean_content",
    "clean_text",
    "extract_domain",
    "first_srcset_entry",
    "generate_slug",
    "is_valid_image_url",
    "resolve_url",
]
