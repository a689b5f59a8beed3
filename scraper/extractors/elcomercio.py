"""El Comercio (elcomercio.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class ElComercioExtractor(ListingExtractor):
    name = "El Comercio"
    base_url = "https://elcomercio.pe"
    headers = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "es-PE,es;q=0.9",
        "Referer": "https://elcomercio.pe",
    }

    sections = (
        "/ultimas-noticias",
        "/politica",
        "/economia",
        "/tecnologia",
        "/deportes",
        "/lima",
        "/peru",
    )
    card_selectors = (
        "article",
        "div.story-item",
        'div[class*="story"]',
        'div[class*="card"]',
        "div.news-item",
        'section[class*="article"]',
    )
    title_selector = 'h2, h3, h4, .story__title, [class*="title"], [class*="headline"]'
    link_selector = 'a[href*="elcomercio.pe"], a[href*="/noticia/"], a[href*="/news/"]'
    summary_selector = 'p, .story__summary, [class*="summary"], [class*="description"]'
    content_selectors = (
        "article p",
        ".story-contents p",
        'div[itemprop="articleBody"] p',
        ".article-body p",
        ".content-body p",
        'section[class*="content"] p',
    )
    boilerplate_phrases = ("suscríbete", "premium", "suscriptor")
    max_cards_per_section = 5
    min_title_length = 15
    section_delay = 3.0
    article_delay = 2.0
