"""Topical salience scoring, irrelevance detection and improvement tips."""

import re
from dataclasses import dataclass

from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.enrichment.scoring import round_half_up
from ontologizer.extraction.text import TextParts


@dataclass(frozen=True)
class SalienceWeights:
    average: float = 0.5
    high_confidence: float = 0.35
    knowledge_graph: float = 0.15
    high_confidence_threshold: int = 85


DEFAULT_SALIENCE_WEIGHTS = SalienceWeights()

# Entities at or above this confidence are never flagged irrelevant
CORE_ENTITY_CONFIDENCE = 80
LOW_CONFIDENCE = 40


def topical_salience(
    entities: list[EnrichedEntity],
    weights: SalienceWeights = DEFAULT_SALIENCE_WEIGHTS,
) -> int:
    """
    Page-level score from enriched entity confidence.

    Blends the mean confidence, the share of high-confidence entities and
    the share carrying a Knowledge Graph machine id. An empty list scores 0.
    """
    if not entities:
        return 0

    total = len(entities)
    average = sum(e.confidence_score for e in entities) / total
    high = sum(1 for e in entities if e.confidence_score >= weights.high_confidence_threshold)
    with_kg = sum(1 for e in entities if e.has_kg_machine_id)

    score = (
        average * weights.average
        + high / total * 100 * weights.high_confidence
        + with_kg / total * 100 * weights.knowledge_graph
    )
    return round_half_up(score)


def _patterns(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.I) for p in patterns)


# (topic keywords, relevance patterns); a later matching row wins
TOPIC_RELEVANCE_PATTERNS: tuple[tuple[tuple[str, ...], tuple[re.Pattern[str], ...]], ...] = (
    (
        ("limo", "transportation"),
        _patterns(
            r"airport", r"transportation", r"limo", r"chauffeur", r"car.?service",
            r"ground.?transportation", r"sedan", r"suv", r"vehicle", r"chicago",
            r"arrivals", r"meet.*greet", r"private", r"executive", r"luxury",
            r"echo", r"ohare", r"o.?hare", r"limousine", r"high.?end",
        ),
    ),
    (
        ("seo", "search"),
        _patterns(
            r"seo", r"search", r"ranking", r"optimization", r"markup", r"schema",
            r"visibility", r"traffic", r"google", r"analytics", r"html", r"javascript",
            r"ai.?search", r"faq", r"visibility.?test",
        ),
    ),
    (
        ("higher ed", "education"),
        _patterns(
            r"university", r"college", r"education", r"academic", r"student",
            r"program", r"mba", r"enrollment", r"campus", r"degree",
        ),
    ),
)

SEARCH_TOPIC_KEYWORDS = ("seo", "search")
EXAMPLE_ENTITY_RE = re.compile(r"university|college|school.*business", re.I)
MARKETING_QUALIFIER_RE = re.compile(r"marketing|seo|search|digital", re.I)


def relevance_patterns(main_topic: str) -> tuple[re.Pattern[str], ...]:
    topic_lc = main_topic.lower()
    selected: tuple[re.Pattern[str], ...] = ()
    for keywords, patterns in TOPIC_RELEVANCE_PATTERNS:
        if any(k in topic_lc for k in keywords):
            selected = patterns
    return selected


def is_example_entity(name: str, main_topic: str) -> bool:
    """Institutions cited as examples in a search-marketing article."""
    topic_lc = main_topic.lower()
    if not any(k in topic_lc for k in SEARCH_TOPIC_KEYWORDS):
        return False
    name_lc = name.lower()
    return bool(EXAMPLE_ENTITY_RE.search(name_lc)) and not MARKETING_QUALIFIER_RE.search(name_lc)


def identify_irrelevant(entities: list[EnrichedEntity], main_topic: str) -> list[str]:
    """Names of low-confidence off-topic entities and example-only mentions."""
    patterns = relevance_patterns(main_topic)
    irrelevant = []
    for entity in entities:
        if entity.confidence_score >= CORE_ENTITY_CONFIDENCE:
            continue
        name_lc = entity.name.lower()
        on_topic = any(p.search(name_lc) for p in patterns)
        if (entity.confidence_score < LOW_CONFIDENCE and not on_topic) or is_example_entity(
            entity.name, main_topic
        ):
            irrelevant.append(entity.name)
    return irrelevant


def annotate_irrelevance(entities: list[EnrichedEntity], main_topic: str) -> list[EnrichedEntity]:
    """Copies of the entities with the ``irrelevant`` flag set."""
    irrelevant = set(identify_irrelevant(entities, main_topic))
    return [e.with_irrelevance(e.name in irrelevant) for e in entities]


def weakly_mentioned(entities: list[EnrichedEntity], parts: TextParts) -> list[str]:
    """Entities absent from title and headings and mentioned at most once in the body."""
    title_lc = parts.title.lower()
    headings_lc = [h.lower() for h in parts.headings]
    body_lc = parts.body.lower()

    weak = []
    for entity in entities:
        name_lc = entity.name.lower()
        if name_lc in title_lc or any(name_lc in h for h in headings_lc):
            continue
        if body_lc.count(name_lc) > 1:
            continue
        weak.append(entity.name)
    return weak


CONTEXTUAL_TYPES = frozenset(
    [
        "cuisine", "city", "organization", "restaurant", "place",
        "location", "region", "creative work", "book", "tv show",
    ]
)


def salience_tips(
    main_topic: str,
    irrelevant: list[str],
    entities: list[EnrichedEntity],
) -> list[str]:
    tips = [
        f"Increase the frequency and contextual relevance of your main topic ('{main_topic}') "
        "throughout the content."
    ]

    topic_type = next(
        (e.type for e in entities if e.type and e.name.lower() == main_topic.lower()),
        None,
    )
    contextual = []
    if topic_type == "person":
        contextual = [e.name for e in entities if (e.type or "").lower() in CONTEXTUAL_TYPES]

    if contextual:
        tips.append(
            "Strengthen the narrative connection to related entities like: "
            f"{', '.join(contextual)}. These entities provide essential context and support "
            "topical authority."
        )
    elif irrelevant:
        tips.append(
            "Align or integrate related entities with your main topic where possible. Only "
            "consider removing content if it is truly irrelevant or off-topic: "
            f"{', '.join(irrelevant)}."
        )

    tips.append(
        f"Add more detailed sections, examples, or FAQs about '{main_topic}' to boost topical "
        "authority."
    )
    return tips
