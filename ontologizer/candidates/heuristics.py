"""Heuristic entity candidate extraction and post-processing.

Everything here is pure and deterministic: regex phrase extraction for
pages without an LLM, salience ranking, topic-specific phrase injection,
sub-phrase expansion, n-gram mining and main-topic selection.
"""

import re
from collections.abc import Iterable
from enum import StrEnum
from urllib.parse import urlparse

from ontologizer.extraction.text import TextParts

# Capitalized runs, and capitalized phrases with a product-line suffix
CAPITALIZED_PHRASE_RE = re.compile(r"\b[A-Z][a-zA-Z\s&]+(?:\s+[A-Z][a-zA-Z\s&]+)*\b")
PRODUCT_NAME_RE = re.compile(
    r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+"
    r"(?:Pro|Max|Plus|Ultra|Elite|Premium|Standard|Basic|Lite|Mini|Air|Studio|Enterprise|Professional)\b",
    re.I,
)

COMMON_WORDS = frozenset(
    [
        "The", "And", "Or", "But", "In", "On", "At", "To", "For", "Of", "With", "By",
        "From", "This", "That", "These", "Those", "All", "Some", "Any", "Each", "Every",
        "No", "Not", "Only", "Just", "Very", "More", "Most", "Less", "Least", "Much",
        "Many", "Few", "Several", "Various", "Different", "Same", "Similar", "Other",
        "Another", "Next", "Last", "First", "Second", "Third", "Fourth", "Fifth",
        "Sixth", "Seventh", "Eighth", "Ninth", "Tenth",
    ]
)

GENERIC_TOKEN_PATTERNS = (
    re.compile(r"^\d+$"),
    re.compile(r"^[A-Z]$"),
    re.compile(r"^[A-Z]\s*[A-Z]$"),
)

MAX_BASIC_CANDIDATES = 40

# Salience weights for heuristic ranking
TITLE_WEIGHT = 30
META_WEIGHT = 15
HEADING_WEIGHT = 10
BODY_OCCURRENCE_WEIGHT = 2

# (topic keywords, phrases to inject); a later matching table wins
TOPIC_ENTITY_PATTERNS: tuple[tuple[tuple[str, ...], tuple[str, ...]], ...] = (
    (
        ("limo", "transportation"),
        (
            "Airport Transportation", "Car Service", "Chauffeur Service", "Limousine Service",
            "Private Transportation", "Executive Transportation", "Luxury Transportation",
            "Airport Transfer", "Ground Transportation", "Corporate Transportation",
            "Wedding Transportation", "Chauffeur", "Limousine", "Executive Car",
            "Town Car", "SUV Service", "Party Bus", "Charter Service",
        ),
    ),
    (
        ("seo", "search"),
        (
            "Search Engine Optimization", "SEO", "Search Rankings", "Keyword Research",
            "On-Page SEO", "Technical SEO", "Link Building", "Content Optimization",
            "Schema Markup", "Meta Tags", "Title Tags", "Search Visibility",
            "Organic Traffic", "SERP", "Google Algorithm", "Ranking Factors",
            "Search Console", "Analytics", "Page Speed", "Mobile Optimization",
        ),
    ),
    (
        ("higher ed", "education"),
        (
            "Higher Education", "University Marketing", "Student Recruitment",
            "Academic Programs", "Distance Learning", "Online Education",
            "Student Enrollment", "Graduate Programs", "Undergraduate Programs",
            "Educational Technology", "Learning Management System", "Campus Life",
        ),
    ),
)

TITLE_PROGRAM_PHRASE_RE = re.compile(
    r"([A-Z][a-zA-Z]*(?: [A-Z][a-zA-Z]*)* (Course|Program|Certificate|Workshop|Seminar))",
    re.I,
)
TITLE_CASE_RUN_RE = re.compile(r"([A-Z][a-z]+( [A-Z][a-z]+)+)")
NGRAM_RE = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,2})\b")


class MainTopicStrategy(StrEnum):
    """How to pick a main topic when the LLM did not supply one."""

    STRICT = "strict"
    TITLE = "title"
    FREQUENT = "frequent"
    PATTERN = "pattern"


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def extract_basic_candidates(text: str) -> list[str]:
    """Regex candidate extraction used when no LLM is available."""
    candidates = []
    for match in CAPITALIZED_PHRASE_RE.findall(text):
        match = match.strip()
        if 2 < len(match) < 50:
            candidates.append(match)

    candidates.extend(m.strip() for m in PRODUCT_NAME_RE.findall(text))

    filtered = [
        c
        for c in _unique(candidates)
        if c not in COMMON_WORDS and not any(p.search(c) for p in GENERIC_TOKEN_PATTERNS)
    ]
    return filtered[:MAX_BASIC_CANDIDATES]


def salience_score(candidate: str, parts: TextParts) -> int:
    """Score a candidate by where and how often it appears on the page."""
    candidate_lc = candidate.lower()
    score = 0
    if candidate_lc in parts.title.lower():
        score += TITLE_WEIGHT
    if candidate_lc in parts.meta.lower():
        score += META_WEIGHT
    for heading in parts.headings:
        if candidate_lc in heading.lower():
            score += HEADING_WEIGHT
    if candidate_lc:
        score += parts.body.lower().count(candidate_lc) * BODY_OCCURRENCE_WEIGHT
    return score


def rank_candidates(candidates: list[str], parts: TextParts) -> list[str]:
    """Stable sort of candidates by descending salience."""
    return sorted(candidates, key=lambda c: salience_score(c, parts), reverse=True)


def topic_phrases(main_topic: str) -> tuple[str, ...]:
    """Curated phrases for the last pattern table whose keywords hit the topic."""
    topic_lc = main_topic.lower()
    phrases: tuple[str, ...] = ()
    for keywords, table in TOPIC_ENTITY_PATTERNS:
        if any(k in topic_lc for k in keywords):
            phrases = table
    return phrases


def inject_topic_entities(candidates: list[str], parts: TextParts, main_topic: str) -> list[str]:
    """
    Append curated topic phrases that literally appear in the page.

    A phrase is skipped when an existing candidate equals it or either
    string contains the other.
    """
    enhanced = list(candidates)
    all_text = parts.all_text().lower()

    for phrase in topic_phrases(main_topic):
        phrase_lc = phrase.lower()
        if phrase_lc not in all_text:
            continue
        exists = any(
            existing.lower() == phrase_lc
            or phrase_lc in existing.lower()
            or existing.lower() in phrase_lc
            for existing in enhanced
        )
        if not exists:
            enhanced.append(phrase)
    return enhanced


def expand_sub_phrases(candidates: list[str], parts: TextParts) -> list[str]:
    """Add contiguous sub-phrases of multi-word candidates found in title, meta or headings."""
    expanded = list(candidates)
    known = {c.lower() for c in candidates}
    fields = parts.search_fields()

    for candidate in candidates:
        words = candidate.split(" ")
        if len(words) < 2:
            continue
        for i in range(len(words)):
            for j in range(i + 1, len(words) + 1):
                sub = " ".join(words[i:j]).strip()
                sub_lc = sub.lower()
                if len(sub) <= 2 or sub_lc in known:
                    continue
                if any(sub_lc in f for f in fields):
                    expanded.append(sub)
                    known.add(sub_lc)
    return expanded


def mine_ngrams(candidates: list[str], parts: TextParts, url: str = "") -> list[str]:
    """Add 2-3 word capitalized n-grams from title, meta, headings and URL path."""
    sources = [parts.title, parts.meta, *parts.headings]
    if url:
        path = urlparse(url).path
        if path:
            sources.append(re.sub(r"[-_/]", " ", path))

    mined = list(candidates)
    known = {c.lower() for c in candidates}
    for source in sources:
        for ngram in NGRAM_RE.findall(source):
            if ngram.lower() not in known:
                mined.append(ngram)
                known.add(ngram.lower())
    return mined


def choose_main_topic(
    candidates: list[str],
    parts: TextParts,
    strategy: MainTopicStrategy | str = MainTopicStrategy.STRICT,
) -> str:
    """
    Pick a main topic without an LLM.

    The longest title phrase ending in Course, Program, Certificate,
    Workshop or Seminar always wins. Otherwise the strategy decides,
    falling back to the first candidate.
    """
    main_topic = candidates[0] if candidates else ""

    title_phrases = [m.group(1).strip() for m in TITLE_PROGRAM_PHRASE_RE.finditer(parts.title)]
    if title_phrases:
        return max(title_phrases, key=len)

    if strategy == MainTopicStrategy.TITLE:
        title_lc = parts.title.lower()
        in_title = [c for c in candidates if c.lower() in title_lc]
        if in_title:
            main_topic = max(in_title, key=len)
    elif strategy == MainTopicStrategy.FREQUENT:
        body_lc = parts.body.lower()
        if candidates:
            main_topic = max(candidates, key=lambda c: body_lc.count(c.lower()) if c else 0)
    elif strategy == MainTopicStrategy.PATTERN:
        match = TITLE_CASE_RUN_RE.search(parts.title)
        if match:
            main_topic = match.group(1)

    return main_topic
