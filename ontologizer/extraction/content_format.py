"""Detection and normalization of pasted content.

Pasted input arrives as markdown, HTML or plain text. Markdown and plain
text are rebuilt into minimal HTML (so the rest of the pipeline can treat
every input as a page) together with the structured text recovered from
their own conventions, which is more reliable than re-extracting it.
"""

import html
import re
from dataclasses import dataclass
from enum import StrEnum

import structlog

from ontologizer.extraction.text import TextParts

logger = structlog.get_logger(__name__)


class ContentType(StrEnum):
    """Detected format of pasted content."""

    MARKDOWN = "markdown"
    HTML = "html"
    PLAIN_TEXT = "plain_text"


MARKDOWN_PATTERNS = [
    re.compile(r"^#{1,6}\s+.+$", re.M),  # headers
    re.compile(r"\*\*[^*]+\*\*"),  # bold
    re.compile(r"\*[^*]+\*"),  # italic
    re.compile(r"\[.+\]\(.+\)"),  # links
    re.compile(r"```[\s\S]*?```"),  # fenced code
    re.compile(r"`[^`]+`"),  # inline code
    re.compile(r"^\*\s+.+$", re.M),  # unordered lists
    re.compile(r"^\d+\.\s+.+$", re.M),  # ordered lists
    re.compile(r"^>\s+.+$", re.M),  # blockquotes
]

# Hits needed before content is treated as markdown
MARKDOWN_MIN_SCORE = 2

_ANY_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_TAG_RE = re.compile(r"<(div|p|h[1-6]|span|a|img|table|ul|ol|li)\b[^>]*>", re.I)
_HEADER_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*]+)\*")
_LINK_RE = re.compile(r"\[(.+?)\]\((.+?)\)")
_UL_RE = re.compile(r"^\*\s+(.+)$")
_OL_RE = re.compile(r"^\d+\.\s+(.+)$")
_QUOTE_RE = re.compile(r"^>\s+(.+)$")
_TERMINAL_PUNCT_RE = re.compile(r"[.!?]$")


@dataclass
class FormattedContent:
    """Pasted content normalized to HTML."""

    type: ContentType
    html: str
    structured_text: TextParts | None = None


def is_markdown(content: str) -> bool:
    score = sum(1 for pattern in MARKDOWN_PATTERNS if pattern.search(content))
    return score >= MARKDOWN_MIN_SCORE


def is_html(content: str) -> bool:
    if not _ANY_TAG_RE.search(content):
        return False
    return (
        "<!DOCTYPE" in content
        or "<html" in content
        or "<body" in content
        or bool(_BLOCK_TAG_RE.search(content))
    )


def _wrap_document(title: str, body_html: str) -> str:
    head = f"<title>{html.escape(title)}</title>" if title else ""
    return f"<html><head>{head}</head><body>{body_html}</body></html>"


def parse_markdown(content: str) -> FormattedContent:
    """Convert markdown into minimal HTML plus structured text."""
    title = ""
    headings: list[str] = []
    body_parts: list[str] = []
    out: list[str] = []
    in_code_block = False

    for raw_line in content.split("\n"):
        line = raw_line.strip()

        if line.startswith("```"):
            in_code_block = not in_code_block
            continue
        if in_code_block or not line:
            continue

        if header := _HEADER_RE.match(line):
            level = len(header.group(1))
            text = header.group(2).strip()
            if level == 1 and not title:
                title = text
            else:
                headings.append(text)
            out.append(f"<h{level}>{html.escape(text)}</h{level}>")
        elif _BOLD_RE.search(line) or _ITALIC_RE.search(line) or _LINK_RE.search(line):
            escaped = html.escape(line)
            escaped = _BOLD_RE.sub(r"<strong>\1</strong>", escaped)
            escaped = _ITALIC_RE.sub(r"<em>\1</em>", escaped)
            escaped = _LINK_RE.sub(r'<a href="\2">\1</a>', escaped)
            out.append(f"<p>{escaped}</p>")
            plain = _BOLD_RE.sub(r"\1", line)
            plain = _ITALIC_RE.sub(r"\1", plain)
            body_parts.append(_LINK_RE.sub(r"\1", plain))
        elif item := (_UL_RE.match(line) or _OL_RE.match(line)):
            out.append(f"<li>{html.escape(item.group(1))}</li>")
            body_parts.append(item.group(1))
        elif quote := _QUOTE_RE.match(line):
            out.append(f"<blockquote>{html.escape(quote.group(1))}</blockquote>")
            body_parts.append(quote.group(1))
        else:
            out.append(f"<p>{html.escape(line)}</p>")
            body_parts.append(line)

    return FormattedContent(
        type=ContentType.MARKDOWN,
        html=_wrap_document(title, "\n".join(out)),
        structured_text=TextParts(title=title, headings=headings, body=" ".join(body_parts)),
    )


def parse_plain_text(content: str) -> FormattedContent:
    """
    Convert plain text into minimal HTML plus structured text.

    The first short line without terminal punctuation becomes the title;
    later short capitalized lines without terminal punctuation become
    section headings; everything else is body.
    """
    title = ""
    headings: list[str] = []
    body_parts: list[str] = []
    out: list[str] = []

    for i, raw_line in enumerate(content.split("\n")):
        line = raw_line.strip()
        if not line:
            continue

        unpunctuated = not _TERMINAL_PUNCT_RE.search(line)
        if not title and len(line) < 100 and unpunctuated:
            title = line
            out.append(f"<h1>{html.escape(line)}</h1>")
        elif len(line) < 80 and unpunctuated and line[0].isupper() and i > 0:
            headings.append(line)
            out.append(f"<h2>{html.escape(line)}</h2>")
        else:
            body_parts.append(line)
            out.append(f"<p>{html.escape(line)}</p>")

    return FormattedContent(
        type=ContentType.PLAIN_TEXT,
        html=_wrap_document(title, "\n".join(out)),
        structured_text=TextParts(title=title, headings=headings, body=" ".join(body_parts)),
    )


def format_pasted_content(content: str) -> FormattedContent:
    """Detect the format of pasted content and normalize it to HTML."""
    content = content.strip()

    if is_markdown(content):
        formatted = parse_markdown(content)
    elif is_html(content):
        formatted = FormattedContent(type=ContentType.HTML, html=content)
    else:
        formatted = parse_plain_text(content)

    logger.info("pasted_content_detected", content_type=formatted.type.value, length=len(content))
    return formatted
