"""Site registry and roster construction for scraping runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Sequence

from .extractors import Extractor, ExtractorContext
from .extractors.america import AmericaExtractor
from .extractors.correo import CorreoExtractor
from .extractors.elcomercio import ElComercioExtractor
from .extractors.expreso import ExpresoExtractor
from .extractors.generic import GenericExtractor
from .extractors.gestion import GestionExtractor
from .extractors.larepublica import LaRepublicaExtractor
from .extractors.ojo import OjoExtractor
from .extractors.peru21 import Peru21Extractor
from .extractors.reddit import RedditExtractor
from .extractors.rpp import RppExtractor
from .selectors import SourceDefinition

LOGGER = logging.getLogger(__name__)

ExtractorFactory = Callable[[ExtractorContext, Any], Extractor]


@dataclass(slots=True)
class SiteDefinition:
    """A built-in news source."""

    slug: str
    extractor_factory: ExtractorFactory
    enabled_by_default: bool = True

    @property
    def display_name(self) -> str:
        return getattr(self.extractor_factory, "name", self.slug)

    def build_extractor(self, context: ExtractorContext, category_id: Any) -> Extractor:
        return self.extractor_factory(context, category_id)


# Registration order is the order sources run in.
_SITE_REGISTRY: Dict[str, SiteDefinition] = {
    definition.slug: definition
    for definition in (
        SiteDefinition(slug="rpp", extractor_factory=RppExtractor),
        SiteDefinition(slug="elcomercio", extractor_factory=ElComercioExtractor),
        SiteDefinition(slug="larepublica", extractor_factory=LaRepublicaExtractor),
        SiteDefinition(slug="gestion", extractor_factory=GestionExtractor),
        SiteDefinition(slug="peru21", extractor_factory=Peru21Extractor),
        SiteDefinition(slug="correo", extractor_factory=CorreoExtractor),
        SiteDefinition(slug="ojo", extractor_factory=OjoExtractor),
        SiteDefinition(slug="expreso", extractor_factory=ExpresoExtractor),
        SiteDefinition(slug="america", extractor_factory=AmericaExtractor),
        SiteDefinition(slug="reddit", extractor_factory=RedditExtractor, enabled_by_default=False),
    )
}


def get_site_definition(slug: str) -> SiteDefinition:
    """Return the site definition for ``slug`` or raise ``KeyError``."""

    normalized = slug.strip().lower()
    try:
        return _SITE_REGISTRY[normalized]
    except KeyError as exc:
        raise KeyError(f"Unsupported site '{slug}'. Known sites: {', '.join(_SITE_REGISTRY)}") from exc


def list_sites() -> list[SiteDefinition]:
    return list(_SITE_REGISTRY.values())


def select_sites(enabled: Sequence[str] = ()) -> list[SiteDefinition]:
    """Sites to run, in registry order; an empty selection means the defaults."""

    if not enabled:
        return [definition for definition in _SITE_REGISTRY.values() if definition.enabled_by_default]
    wanted = {get_site_definition(slug).slug for slug in enabled}
    return [definition for definition in _SITE_REGISTRY.values() if definition.slug in wanted]


def build_site_roster(
    context: ExtractorContext,
    category_id: Any,
    *,
    enabled: Sequence[str] = (),
    sources: Iterable[SourceDefinition] = (),
) -> list[Extractor]:
    roster = [definition.build_extractor(context, category_id) for definition in select_sites(enabled)]
    roster.extend(GenericExtractor(context, category_id, source) for source in sources)
    return roster


__all__ = [
    "SiteDefinition",
    "build_site_roster",
    "get_site_definition",
    "list_sites",
    "select_sites",
]
