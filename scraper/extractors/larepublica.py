"""La República (larepublica.pe)."""

from __future__ import annotations

from .listing import ListingExtractor


class LaRepublicaExtractor(ListingExtractor):
    name = "La República"
    base_url = "https://larepublica.pe"
    headers = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "es-PE,es;q=0.9",
        "Referer": "https://larepublica.pe",
    }

    sections = (
        "/ultimas-noticias",
        "/politica",
        "/economia",
        "/tecnologia",
        "/deportes",
        "/sociedad",
        "/peru",
    )
    card_selectors = (
        "article",
        "div.Article",
        'div[class*="article"]',
        "div.news-item",
        'div[class*="card"]',
        'section[class*="story"]',
    )
    title_selector = 'h2, h3, .Article__title, [class*="title"], [class*="headline"]'
    link_selector = 'a[href*="larepublica.pe"], a[href*="/noticia/"]'
    summary_selector = 'p, .Article__summary, [class*="summary"], [class*="description"]'
    content_selectors = (
        "article p",
        ".Article__body p",
        'div[itemprop="articleBody"] p',
        ".content-body p",
        ".article-content p",
        'section[class*="body"] p',
    )
    boilerplate_phrases = ("suscríbete", "suscriptor", "Lee también")
    max_cards_per_section = 5
    min_title_length = 15
    section_delay = 3.0
    article_delay = 2.0
