"""Pure scoring and selection of external search hits."""

import re
from collections.abc import Iterable

from ontologizer.enrichment.models import MatchCandidate
from ontologizer.enrichment.rules import GEO_QUALIFIER_RE, TITLE_STOPWORDS

# Absolute floors
WIKIPEDIA_MIN_SCORE = 65
WIKIPEDIA_PARENTHETICAL_MIN_SCORE = 85
WIKIPEDIA_VERIFY_ABOVE = 70
WIKIDATA_MIN_SCORE = 75
WIKIDATA_TITLE_AGREEMENT_MIN = 50
GOOGLE_KG_MIN_SCORE = 60

# Adjustments applied after base title scoring
EXTRACT_CONFIRMED_BONUS = 10
EXTRACT_REJECTED_PENALTY = 30
DISAMBIGUATION_PENALTY = 50
REDIRECT_OR_STUB_PENALTY = 30

CAPITALIZED_TITLE_RE = re.compile(r"^[A-Z][a-z]")


def _words(text: str) -> list[str]:
    return [w for w in text.split(" ") if w]


def title_match_score(entity_lc: str, title: str) -> float:
    """
    Score an encyclopedia title against a lowercased entity string.

    Exact matches score 100, airport names compared without the
    "airport"/"international" qualifiers score 95 or 85, containment
    scores 85/60/75, and otherwise strict word overlap scores up to 50.
    Capitalized titles get a small bonus; titles much longer than the
    entity or carrying a geographic qualifier the entity lacks are
    penalized. Never negative.
    """
    title_lc = title.lower()
    score: float = 0

    if entity_lc == title_lc:
        score = 100
    elif "airport" in entity_lc and "airport" in title_lc:
        entity_name = entity_lc.replace("airport", "").replace("international", "").strip()
        title_name = title_lc.replace("airport", "").replace("international", "").strip()
        if entity_name == title_name:
            score = 95
        elif entity_name in title_name or title_name in entity_name:
            score = 85
    elif entity_lc in title_lc:
        extra_words = len(title_lc.split(" ")) - len(entity_lc.split(" "))
        score = 85 if extra_words <= 2 else 60
    elif title_lc in entity_lc:
        score = 75
    else:
        entity_words = set(_words(entity_lc)) - TITLE_STOPWORDS
        title_words = set(_words(title_lc)) - TITLE_STOPWORDS
        if entity_words and title_words:
            common = entity_words & title_words
            entity_ratio = len(common) / len(entity_words)
            title_ratio = len(common) / len(title_words)
            min_ratio = min(entity_ratio, title_ratio)
            avg_ratio = (entity_ratio + title_ratio) / 2
            if min_ratio >= 0.7 and avg_ratio >= 0.8:
                score = avg_ratio * 50

    if CAPITALIZED_TITLE_RE.match(title):
        score += 5

    if len(title) > len(entity_lc) * 2.5:
        score -= 30

    if GEO_QUALIFIER_RE.search(title_lc) and not GEO_QUALIFIER_RE.search(entity_lc):
        score -= 40

    return max(0, score)


def title_penalties(title: str) -> int:
    """Penalty for disambiguation, redirect and stub titles."""
    title_lc = title.lower()
    penalty = 0
    if "disambiguation" in title_lc:
        penalty += DISAMBIGUATION_PENALTY
    if "redirect" in title_lc or "stub" in title_lc:
        penalty += REDIRECT_OR_STUB_PENALTY
    return penalty


def title_min_score(title: str) -> int:
    """Per-title acceptance floor; parenthetical titles need more."""
    return WIKIPEDIA_PARENTHETICAL_MIN_SCORE if "(" in title else WIKIPEDIA_MIN_SCORE


def extract_supports_entity(extract: str, entity_lc: str) -> bool:
    """
    Check an article lead against the entity.

    Passes when the entity appears verbatim, or when at least half of its
    words longer than two characters do.
    """
    extract_lc = extract.lower()
    if entity_lc in extract_lc:
        return True

    entity_words = _words(entity_lc)
    if not entity_words:
        return False
    found = sum(1 for w in entity_words if len(w) > 2 and w in extract_lc)
    return found / len(entity_words) >= 0.5


def label_match_score(entity_lc: str, label_lc: str, description: str = "") -> float:
    """
    Score a Wikidata or Knowledge Graph label against an entity.

    Exact 100, label containing entity 80, entity containing label 70,
    otherwise shared words over the longer word list times 60. A
    description mentioning the entity's words adds up to 20.
    """
    score: float
    if entity_lc == label_lc:
        score = 100
    elif entity_lc in label_lc:
        score = 80
    elif label_lc in entity_lc:
        score = 70
    else:
        entity_words = _words(entity_lc)
        label_words = _words(label_lc)
        longest = max(len(entity_words), len(label_words))
        if longest == 0:
            score = 0
        else:
            common = [w for w in entity_words if w in label_words]
            score = len(common) / longest * 60

    if description:
        desc_lc = description.lower()
        entity_words = _words(entity_lc)
        if entity_words:
            found = sum(1 for w in entity_words if len(w) > 2 and w in desc_lc)
            score += found / len(entity_words) * 20

    return max(0, score)


def select_best(candidates: Iterable[MatchCandidate], floor: float) -> MatchCandidate | None:
    """
    Return the highest-scoring candidate clearing the floor.

    Ties keep the earlier candidate. Lowering the floor can only add
    eligible candidates scoring below the old floor, so a previously
    accepted match is never displaced.
    """
    best: MatchCandidate | None = None
    for candidate in candidates:
        if candidate.score < max(floor, candidate.min_score):
            continue
        if best is None or candidate.score > best.score:
            best = candidate
    return best
