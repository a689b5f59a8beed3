"""América Noticias (americatv.com.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class AmericaExtractor(ListingExtractor):
    name = "América Noticias"
    base_url = "https://www.americatv.com.pe"
    headers = {"Referer": "https://www.americatv.com.pe"}

    sections = ("/noticias",)
    card_selectors = ("article, .noticia, .news-item, .story",)
    title_selector = "h2, h3, .title"
    link_selector = "a"
    summary_selector = "p, .summary"
    content_selectors = ("article p", ".contenido p", ".noticia-content p")
    max_cards_per_section = 15
    min_paragraph_length = 30
    article_delay = (1.5, 2.5)
