"""Diario Correo (diariocorreo.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class CorreoExtractor(ListingExtractor):
    name = "Diario Correo"
    base_url = "https://diariocorreo.pe"
    headers = {"Referer": "https://diariocorreo.pe"}

    sections = ("/ultimas-noticias",)
    card_selectors = ("article, .story, .news-item, .noticia",)
    title_selector = "h2, h3, .title"
    link_selector = "a"
    summary_selector = "p, .summary"
    content_selectors = (
        "article p",
        ".story-content p",
        ".article-body p",
        ".content p",
        ".noticia-content p",
    )
    max_cards_per_section = 10
    min_paragraph_length = 30
    article_delay = 2.0
