"""RPP Noticias (rpp.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class RppExtractor(ListingExtractor):
    name = "RPP Noticias"
    base_url = "https://rpp.pe"
    headers = {"Referer": "https://rpp.pe"}

    sections = ("/ultimas-noticias",)
    card_selectors = ("article.story-item, div.story-item",)
    title_selector = "h2, h3, .story-item__title"
    link_selector = "a"
    summary_selector = "p, .story-item__summary"
    content_selectors = (
        "article p",
        ".article-content p",
        ".story-content p",
        'div[itemprop="articleBody"] p',
    )
    max_cards_per_section = 10
    min_paragraph_length = 50
    article_delay = 1.5
