"""Confidence scoring for enriched entities."""

import math
from dataclasses import dataclass, field

from ontologizer.enrichment.models import EnrichedEntity

# Share of the score earned purely from list position
POSITIONAL_RELEVANCE_MAX = 70


@dataclass(frozen=True)
class ConfidenceWeights:
    """Bonuses added on top of positional relevance."""

    wikipedia: int = 15
    wikidata: int = 10
    google_kg: int = 15
    productontology: int = 5
    two_sources: int = 10
    three_or_more_sources: int = 20
    type_bonuses: dict[str, int] = field(
        default_factory=lambda: {
            "person": 10,
            "organization": 10,
            "place": 8,
            "location": 8,
            "product": 6,
            "service": 6,
        }
    )
    other_type: int = 3


DEFAULT_WEIGHTS = ConfidenceWeights()


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative scores."""
    return math.floor(value + 0.5)


def positional_relevance(index: int, total: int) -> float:
    """Relevance from candidate order: the first candidate earns the full 70."""
    if total <= 0:
        return 0.0
    return (total - index) / total * POSITIONAL_RELEVANCE_MAX


def calculate_confidence(
    entity: EnrichedEntity,
    relevance: float,
    weights: ConfidenceWeights = DEFAULT_WEIGHTS,
) -> int:
    """
    Combine positional relevance with source and type bonuses.

    A KG search fallback link earns nothing; only a machine-id match does.
    The result is rounded and clamped to 0..100.
    """
    score = relevance
    if entity.wikipedia_url:
        score += weights.wikipedia
    if entity.wikidata_url:
        score += weights.wikidata
    if entity.has_kg_machine_id:
        score += weights.google_kg
    if entity.productontology_url:
        score += weights.productontology

    sources = entity.source_count
    if sources >= 3:
        score += weights.three_or_more_sources
    elif sources >= 2:
        score += weights.two_sources

    if entity.type is not None:
        score += weights.type_bonuses.get(entity.type.lower(), weights.other_type)

    return max(0, min(100, round_half_up(score)))
