"""Gestión (gestion.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class GestionExtractor(ListingExtractor):
    name = "Gestión"
    base_url = "https://gestion.pe"
    headers = {"Accept-Language": "es-PE,es;q=0.9", "Referer": "https://gestion.pe"}

    sections = (
        "/ultimas-noticias",
        "/economia",
        "/tu-dinero",
        "/tecnologia",
        "/empresas",
        "/tendencias",
    )
    card_selectors = ('article, div[class*="story"], div[class*="card"]',)
    title_selector = 'h2, h3, [class*="title"]'
    link_selector = "a"
    summary_selector = "p"
    content_selectors = ("article p", ".article-body p", 'div[itemprop="articleBody"] p')
    max_cards_per_section = 5
    min_title_length = 15
    section_delay = 2.0
    article_delay = 1.5
