"""Selector configuration for operator-defined sources."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

import soupsieve

DEFAULT_ARTICLE_SELECTORS: tuple[str, ...] = (
    "article",
    ".post",
    ".card",
    ".news-item",
    ".story",
    ".entry",
    'div[class*="article"]',
    'div[class*="news"]',
)
DEFAULT_TITLE_SELECTORS: tuple[str, ...] = ("h1", "h2", "h3", ".title", ".headline", 'a[class*="title"]')
DEFAULT_LINK_SELECTORS: tuple[str, ...] = ("a", "a.link", ".title a")

# Stored configurations use camelCase keys.
_FIELD_KEYS = {
    "article_selector": "articleSelector",
    "title_selector": "titleSelector",
    "link_selector": "linkSelector",
    "image_selector": "imageSelector",
    "summary_selector": "summarySelector",
}


class SelectorConfigError(ValueError):
    """Raised when a stored selector configuration cannot be used."""


def validate_selector(value: str, field_name: str) -> str:
    try:
        soupsieve.compile(value)
    except soupsieve.SelectorSyntaxError as exc:
        raise SelectorConfigError(f"Invalid CSS for {field_name}: {value!r} ({exc})") from exc
    return value


@dataclass(frozen=True, slots=True)
class SelectorConfig:
    """CSS selectors used by the generic extractor; every field is optional."""

    article_selector: str | None = None
    title_selector: str | None = None
    link_selector: str | None = None
    image_selector: str | None = None
    summary_selector: str | None = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | str | None) -> "SelectorConfig":
        if raw is None:
            return cls()
        if isinstance(raw, str):
            if not raw.strip():
                return cls()
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as exc:
                raise SelectorConfigError(f"Selector configuration is not valid JSON: {exc}") from exc
        if not isinstance(raw, Mapping):
            raise SelectorConfigError(
                f"Selector configuration must be an object, got {type(raw).__name__}"
            )

        values: dict[str, str | None] = {}
        for attr, camel_key in _FIELD_KEYS.items():
            value = raw.get(camel_key, raw.get(attr))
            if value is None:
                values[attr] = None
                continue
            if not isinstance(value, str):
                raise SelectorConfigError(f"{camel_key} must be a string, got {type(value).__name__}")
            cleaned = value.strip()
            values[attr] = validate_selector(cleaned, camel_key) if cleaned else None
        return cls(**values)

    def to_mapping(self) -> dict[str, str]:
        mapping: dict[str, str] = {}
        for attr, camel_key in _FIELD_KEYS.items():
            value = getattr(self, attr)
            if value:
                mapping[camel_key] = value
        return mapping

    def article_chain(self) -> tuple[str, ...]:
        return _chain(self.article_selector, DEFAULT_ARTICLE_SELECTORS)

    def title_chain(self) -> tuple[str, ...]:
        return _chain(self.title_selector, DEFAULT_TITLE_SELECTORS)

    def link_chain(self) -> tuple[str, ...]:
        return _chain(self.link_selector, DEFAULT_LINK_SELECTORS)


def _chain(preferred: str | None, defaults: tuple[str, ...]) -> tuple[str, ...]:
    if not preferred:
        return defaults
    return (preferred, *(selector for selector in defaults if selector != preferred))


@dataclass(slots=True)
class SourceDefinition:
    """Validated view of a configured source row."""

    name: str
    url: str
    selectors: SelectorConfig = field(default_factory=SelectorConfig)
    id: Any = None

    @classmethod
    def from_record(cls, record) -> "SourceDefinition":
        return cls(
            id=record.id,
            name=record.name,
            url=record.url,
            selectors=SelectorConfig.from_mapping(record.selectors),
        )


__all__ = [
    "DEFAULT_ARTICLE_SELECTORS",
    "DEFAULT_LINK_SELECTORS",
    "DEFAULT_TITLE_SELECTORS",
    "SelectorConfig",
    "SelectorConfigError",
    "SourceDefinition",
    "validate_selector",
]
