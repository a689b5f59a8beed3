"""Perú 21 (peru21.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class Peru21Extractor(ListingExtractor):
    name = "Perú 21"
    base_url = "https://peru21.pe"
    headers = {"Referer": "https://peru21.pe"}

    sections = ("/archivo/todas",)
    card_selectors = ("article, .story-item, .news-item",)
    title_selector = "h2, h3, .title"
    link_selector = "a"
    summary_selector = "p, .summary"
    content_selectors = ("article p", ".story-content p", ".article-body p")
    max_cards_per_section = 10
    article_delay = 1.5
