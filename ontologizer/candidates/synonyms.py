"""Static synonym table for entity surface forms.

Maps each canonical key to the surface forms accepted for it. Several
keys may share variants (``seo`` and ``search engine optimization`` are
aliases of each other); normalization returns the first key, in table
order, whose variants contain the input.
"""

from types import MappingProxyType

ENTITY_SYNONYMS: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "seo": ("search engine optimization", "seo"),
        "search engine optimization": ("seo", "search engine optimization"),
        "ppc": ("pay per click", "ppc"),
        "pay per click": ("ppc", "pay per click"),
        "sem": ("search engine marketing", "sem"),
        "search engine marketing": ("sem", "search engine marketing"),
        "higher education": ("higher education", "university", "college"),
        "digital marketing": ("digital marketing", "online marketing"),
        "content marketing": ("content marketing",),
        "smm": ("social media marketing", "smm"),
        "social media marketing": ("smm", "social media marketing"),
    }
)


def normalize_entity(entity: str) -> str:
    """Return the canonical key for an entity string."""
    entity_lc = entity.strip().lower()
    for key, aliases in ENTITY_SYNONYMS.items():
        if entity_lc in aliases:
            return key
    return entity_lc


def entity_variants(entity: str) -> tuple[str, ...]:
    """Return every accepted surface form for an entity string."""
    entity_lc = entity.strip().lower()
    for aliases in ENTITY_SYNONYMS.values():
        if entity_lc in aliases:
            return aliases
    return (entity_lc,)


def dedupe_key(entity: str) -> str:
    """
    Key under which candidates count as duplicates.

    Only two-way alias pairs (an abbreviation and its expansion, each a
    key of its own) collapse to one key. Broader groups such as
    ``higher education`` widen lookups but never merge candidates, so
    "University" and "College" survive side by side.
    """
    key = normalize_entity(entity)
    if all(alias in ENTITY_SYNONYMS for alias in ENTITY_SYNONYMS.get(key, ())):
        return key
    return entity.strip().lower()
