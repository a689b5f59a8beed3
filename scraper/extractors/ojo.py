"""Ojo.pe."""

from __future__ import annotations

from .listing import ListingExtractor


class OjoExtractor(ListingExtractor):
    name = "Ojo.pe"
    base_url = "https://ojo.pe"
    headers = {"Referer": "https://ojo.pe"}

    sections = ("/ultimas-noticias",)
    card_selectors = (".story, .news-item, .noticia, article, .post, .news-list-item",)
    title_selector = "h2, h3, h4, .title, .titulo, .entry-title"
    link_selector = "a"
    summary_selector = "p, .summary, .excerpt, .resumen"
    content_selectors = (
        "article p",
        ".story-content p",
        ".article-body p",
        ".content p",
        ".noticia-content p",
        ".entry-content p",
    )
    max_cards_per_section = 10
    min_paragraph_length = 30
    article_delay = 2.0
