"""Structured text extraction from raw page markup.

Pulls the title, meta description, headings and main-content body out of
an HTML document. Headings are read before boilerplate removal so that
section titles inside stripped regions still count; the body is taken
from the largest content container left after removal.
"""

import re
from dataclasses import dataclass, field

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

# Tags removed outright with their content
REMOVE_TAGS = ("script", "style", "noscript", "header", "footer", "nav", "aside", "form")

# Whole class tokens that mark chrome
BOILERPLATE_CLASS_TOKENS = frozenset(["sidebar", "comment", "nav", "footer", "header"])
BOILERPLATE_ID_TOKENS = frozenset(["sidebar", "comment"])

# Substrings matched anywhere in the class attribute
BOILERPLATE_CLASS_SUBSTRINGS = (
    "widget",
    "advertisement",
    "banner",
    "promo",
    "social",
    "share",
    "related",
    "popular",
    "trending",
    "sponsored",
)
BOILERPLATE_ID_SUBSTRINGS = ("sidebar", "widget")
CONSENT_SUBSTRINGS = ("cookie", "consent")

# Main-content candidates, scanned in order; the longest text wins
MAIN_CONTENT_SELECTORS = (
    "article",
    "main",
    "[role=main]",
    "[class*=post-content]",
    "[class*=entry-content]",
    "[id*=main]",
    "[class*=main]",
    "[id*=content]",
    "[class*=content]",
)

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


@dataclass
class TextParts:
    """Structured text pulled from one page."""

    title: str = ""
    meta: str = ""
    headings: list[str] = field(default_factory=list)
    body: str = ""

    def combined(self) -> str:
        """Title, meta, headings and body joined for LLM prompts."""
        return (
            f"{self.title}. {self.meta}. "
            + ". ".join(self.headings)
            + f". {self.body}"
        )

    def all_text(self) -> str:
        """Every field joined by spaces, for literal-appearance checks."""
        return " ".join([self.title, self.meta, " ".join(self.headings), self.body])

    def search_fields(self) -> list[str]:
        """Lowercased title, meta and each heading."""
        return [self.title.lower(), self.meta.lower(), *(h.lower() for h in self.headings)]

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "meta": self.meta,
            "headings": list(self.headings),
            "body": self.body,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TextParts":
        return cls(
            title=data.get("title", "") or "",
            meta=data.get("meta", "") or "",
            headings=list(data.get("headings") or []),
            body=data.get("body", "") or "",
        )


def _attr_tokens(tag: Tag, attr: str) -> list[str]:
    value = tag.get(attr)
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def _is_ad_marker(token: str) -> bool:
    token = token.lower()
    return token == "ad" or token.startswith(("ad-", "ad_", "ads"))


def is_boilerplate(tag: Tag) -> bool:
    """Check if an element is page chrome rather than content."""
    if tag.name in ("html", "body"):
        return False
    if tag.name in REMOVE_TAGS:
        return True

    classes = [c.lower() for c in _attr_tokens(tag, "class")]
    ids = [i.lower() for i in _attr_tokens(tag, "id")]
    class_text = " ".join(classes)
    id_text = " ".join(ids)

    if BOILERPLATE_CLASS_TOKENS.intersection(classes):
        return True
    if BOILERPLATE_ID_TOKENS.intersection(ids):
        return True
    if any(s in class_text or s in id_text for s in CONSENT_SUBSTRINGS):
        return True
    if tag.name == "div" and str(tag.get("aria-label", "")).lower() == "cookieconsent":
        return True
    if any(s in class_text for s in BOILERPLATE_CLASS_SUBSTRINGS):
        return True
    if any(s in id_text for s in BOILERPLATE_ID_SUBSTRINGS):
        return True
    return any(_is_ad_marker(t) for t in classes + ids)


def _remove_boilerplate(soup: BeautifulSoup) -> int:
    doomed = [tag for tag in soup.find_all(True) if is_boilerplate(tag)]
    removed = 0
    for tag in doomed:
        if tag.decomposed:
            continue
        tag.decompose()
        removed += 1
    return removed


def _main_content_text(soup: BeautifulSoup) -> str:
    best = ""
    for selector in MAIN_CONTENT_SELECTORS:
        for node in soup.select(selector):
            text = collapse_whitespace(node.get_text(" "))
            if len(text) > len(best):
                best = text
    if best:
        return best

    body = soup.body or soup
    return collapse_whitespace(body.get_text(" "))


def extract_text_parts(html: str) -> TextParts:
    """
    Extract title, meta description, headings and body text from HTML.

    Args:
        html: Raw page markup

    Returns:
        TextParts with whitespace-collapsed fields
    """
    if not html:
        return TextParts()

    soup = BeautifulSoup(html, "html.parser")

    title = ""
    if soup.title is not None:
        title = collapse_whitespace(soup.title.get_text())

    meta = ""
    for tag in soup.find_all("meta"):
        if str(tag.get("name", "")).lower() == "description":
            meta = collapse_whitespace(str(tag.get("content", "")))
            break

    headings: list[str] = []
    for level in ("h1", "h2", "h3"):
        for heading in soup.find_all(level):
            text = collapse_whitespace(heading.get_text(" "))
            if text:
                headings.append(text)

    removed = _remove_boilerplate(soup)
    body = _main_content_text(soup)

    logger.debug(
        "text_extracted",
        title_length=len(title),
        headings=len(headings),
        body_length=len(body),
        removed_elements=removed,
    )

    return TextParts(title=title, meta=meta, headings=headings, body=body)
