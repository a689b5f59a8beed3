"""Diario Expreso (expreso.com.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class ExpresoExtractor(ListingExtractor):
    name = "Diario Expreso"
    base_url = "https://www.expreso.com.pe"
    headers = {"Referer": "https://www.expreso.com.pe"}

    sections = ("/ultimas-noticias",)
    card_selectors = ("article, .noticia, .news-item, .post",)
    title_selector = "h2, h3, .title, .titulo"
    link_selector = "a"
    summary_selector = "p, .summary, .resumen"
    content_selectors = ("article p", ".contenido p", ".noticia-content p", ".entry-content p")
    max_cards_per_section = 15
    min_paragraph_length = 30
    article_delay = (1.5, 2.5)
