"""Layout-aware semantic chunking of page markup for fan-out prompts."""

import json
from dataclasses import dataclass
from typing import Any

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

SECTION_CHAR_LIMIT = 500
LIST_CHAR_LIMIT = 300
STRUCTURED_DATA_CHAR_LIMIT = 200
MAX_LISTS = 5
MIN_LIST_ITEMS = 3

HEADING_LEVELS = {f"h{level}": level for level in range(1, 7)}


@dataclass
class SemanticChunk:
    """One block of page content, tagged with its layout role."""

    type: str
    content: str
    heading: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"type": self.type}
        if self.heading is not None:
            data["heading"] = self.heading
        data["content"] = self.content
        return data


def _section_content(heading: Tag) -> str:
    """Text of the siblings after a heading, up to the next same-or-higher heading."""
    level = HEADING_LEVELS[heading.name]
    content = ""
    for sibling in heading.find_next_siblings():
        sibling_level = HEADING_LEVELS.get(sibling.name)
        if sibling_level is not None and sibling_level <= level:
            break
        text = sibling.get_text().strip()
        if text:
            content += " " + text
    return content


def _type_label(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def extract_semantic_chunks(html: str) -> list[SemanticChunk]:
    """
    Split a page into primary-topic, section, list and structured-data chunks.

    Args:
        html: Raw page markup

    Returns:
        Chunks in the order above; empty for empty markup
    """
    if not html:
        return []

    soup = BeautifulSoup(html, "html.parser")
    chunks: list[SemanticChunk] = []

    title_tag = soup.find("title")
    h1_tag = soup.find("h1")
    title = title_tag.get_text().strip() if title_tag else ""
    h1 = h1_tag.get_text().strip() if h1_tag else ""
    if title or h1:
        chunks.append(SemanticChunk(type="primary_topic", content=f"{title} {h1}".strip()))

    for heading in soup.find_all(["h2", "h3"]):
        content = _section_content(heading)
        if content:
            chunks.append(
                SemanticChunk(
                    type="section",
                    heading=heading.get_text().strip(),
                    content=content[:SECTION_CHAR_LIMIT].strip(),
                )
            )

    list_count = 0
    for list_tag in soup.find_all(["ul", "ol"]):
        if list_count >= MAX_LISTS:
            break
        items = list_tag.find_all("li")
        if len(items) >= MIN_LIST_ITEMS:
            joined = " | ".join(item.get_text().strip() for item in items)
            chunks.append(SemanticChunk(type="list", content=joined[:LIST_CHAR_LIMIT]))
            list_count += 1

    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.get_text())
        except json.JSONDecodeError:
            logger.debug("ld_json_unparseable")
            continue
        if isinstance(data, dict) and "@type" in data:
            rendered = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
            chunks.append(
                SemanticChunk(
                    type="structured_data",
                    content=f"Type: {_type_label(data['@type'])}, "
                    + rendered[:STRUCTURED_DATA_CHAR_LIMIT],
                )
            )

    logger.debug("semantic_chunks_extracted", count=len(chunks))
    return chunks
