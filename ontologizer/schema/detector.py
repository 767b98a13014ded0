"""Page schema type classification by keyword density."""

import re

from ontologizer.extraction.text import TextParts

WEBPAGE = "WebPage"

# Checked in order; ties go to the earlier type
SCHEMA_TYPE_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    (
        "Service",
        (
            re.compile(r"\b(service|services|assisted living|limo|limousine|transportation|chauffeur|car service)\b", re.I),
            re.compile(r"\b(provider|offering|support|care|assistance)\b", re.I),
        ),
    ),
    (
        "LocalBusiness",
        (
            re.compile(r"\b(phone|telephone|\(\d{3}\)|address|location|contact|hours|business)\b", re.I),
            re.compile(r"\b(restaurant|hotel|store|shop|clinic|office|center|facility)\b", re.I),
        ),
    ),
    (
        "EducationalOccupationalProgram",
        (
            re.compile(
                r"\b(program|course|degree|diploma|certificate|education|training|academy|university|college)\b",
                re.I,
            ),
            re.compile(r"\b(student|enrollment|curriculum|credits|accreditation)\b", re.I),
        ),
    ),
    (
        "Article",
        (
            re.compile(r"\b(how to|guide|tutorial|tips|advice|blog|article)\b", re.I),
            re.compile(r"\b(author|posted|published|written by)\b", re.I),
        ),
    ),
)

MIN_TYPE_SCORE = 2


def schema_type_scores(parts: TextParts) -> dict[str, int]:
    text = " ".join([parts.title, parts.meta, " ".join(parts.headings)]).lower()
    return {
        schema_type: sum(len(p.findall(text)) for p in patterns)
        for schema_type, patterns in SCHEMA_TYPE_PATTERNS
    }


def detect_schema_type(parts: TextParts | None) -> str:
    """Pick the root schema type for a page, falling back to WebPage."""
    if parts is None:
        return WEBPAGE
    scores = schema_type_scores(parts)
    best = max(scores.values())
    if best < MIN_TYPE_SCORE:
        return WEBPAGE
    return next(t for t, score in scores.items() if score == best)
