"""DOM scans for structured data already expressed in page markup.

Finds authorship, the publishing organization, FAQ and HowTo content,
contact details and profile links, and returns them as schema.org
fragments ready to be placed into a synthesized JSON-LD document.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)

MAX_FAQ_ITEMS = 15
MAX_HOWTO_STEPS = 25
MAX_PAGE_HOWTO_STEPS = 20
MAX_HOWTO_SUPPLIES = 10
MAX_AWARDS = 6

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

QUESTION_WORDS_RE = re.compile(
    r"\b(what|how|why|when|where|who|which|can|could|should|would|will|is|are|do|does|did)\b",
    re.I,
)
QUESTION_PREFIX_RE = re.compile(r"^(Q:|Question:|FAQ:|#\d+\.?)\s*", re.I)
ANSWER_PREFIX_RE = re.compile(r"^(A:|Answer:|Response:)\s*", re.I)
TRIVIAL_ANSWER_RE = re.compile(r"^(yes|no|maybe|ok|sure)\.?$", re.I)
AUTHOR_PREFIX_RE = re.compile(r"^(By|Author|Written by|Contributor):?\s*", re.I)
STEP_PREFIX_RE = re.compile(r"^(Step\s*\d+:?\s*|#\d+\.?\s*)", re.I)
HOWTO_TITLE_RE = re.compile(r"\b(how\s+to|guide|tutorial|instructions|steps)\b", re.I)
HOWTO_PAGE_TITLE_RE = re.compile(r"how\s+to\s+(.+)", re.I)

NUMBERED_STEP_PATTERNS = (
    re.compile(r"(?:^|\n)\s*(\d+)[.)]\s*([^\n]+)"),
    re.compile(r"(?:^|\n)\s*Step\s+(\d+):?\s*([^\n]+)", re.I),
)
TIME_PATTERNS = (
    re.compile(r"(\d+)\s*(minutes?|mins?|hours?|hrs?|days?)", re.I),
    re.compile(r"takes?\s+(\d+)\s*(minutes?|mins?|hours?|hrs?)", re.I),
    re.compile(r"in\s+(\d+)\s*(minutes?|mins?|hours?|hrs?)", re.I),
)

PHONE_PATTERNS = (
    re.compile(r"\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b"),
    re.compile(r"\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),
    re.compile(r"\+1[-.\s]?\d{3}[-.\s]?\d{3}[-.\s]?\d{4}"),
)
ZIP_RE = re.compile(r"\b\d{5}(-\d{4})?\b")
STATE_CODE_RE = re.compile(r"\b[A-Z]{2}\b")

SOCIAL_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "linkedin.com",
    "instagram.com",
    "youtube.com",
    "yelp.com",
    "google.com/maps",
)

DURATION_PATTERNS = (
    (re.compile(r"(\d+)\s*months?", re.I), "M"),
    (re.compile(r"(\d+)\s*years?", re.I), "Y"),
    (re.compile(r"(\d+)\s*weeks?", re.I), "W"),
)
CREDITS_RE = re.compile(r"(\d+)\s*credits?", re.I)
CREDENTIAL_RE = re.compile(r"\b(diploma|degree|certificate|certification)\b", re.I)
PROGRAM_MODE_RE = re.compile(r"\b(online|on-campus|hybrid|blended)\b", re.I)

AWARD_PATTERNS = (
    re.compile(
        r"(?:awarded?|received?|earned?|recognized|winner of|recipient of)\s+"
        r"([^.]+(?:award|recognition|honor|prize|medal|certification|accreditation)[^.]*)",
        re.I,
    ),
    re.compile(r"([^.]*(?:award|recognition|honor|prize|medal)\s+(?:winner|recipient|holder)[^.]*)", re.I),
    re.compile(r"(\d{4}\s+[^.]*(?:award|recognition|honor|prize|medal|accreditation)[^.]*)", re.I),
)

# Selector = predicate over tags, evaluated in document order
Selector = Callable[[Tag], bool]


def _attr_value(tag: Tag, attr: str) -> str:
    value = tag.get(attr)
    if value is None:
        return ""
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def attr_contains(attr: str, needle: str) -> Selector:
    return lambda tag: needle in _attr_value(tag, attr)


def attr_equals(attr: str, value: str) -> Selector:
    return lambda tag: _attr_value(tag, attr) == value


def has_attr(attr: str) -> Selector:
    return lambda tag: tag.has_attr(attr)


def own_text_contains(needle: str) -> Selector:
    """Match tags whose direct text nodes contain the needle."""
    return lambda tag: any(needle in s for s in tag.find_all(string=True, recursive=False))


def own_text_startswith(prefix: str) -> Selector:
    return lambda tag: any(s.startswith(prefix) for s in tag.find_all(string=True, recursive=False))


def tag_named(*names: str) -> Selector:
    return lambda tag: tag.name in names


def meta_named(name: str) -> Selector:
    return lambda tag: tag.name == "meta" and _attr_value(tag, "name") == name


def meta_property(prop: str) -> Selector:
    return lambda tag: tag.name == "meta" and _attr_value(tag, "property") == prop


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def clean_text(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def truncate_at_sentence(text: str, limit: int, keep_after: int) -> str:
    """Cut to limit chars, at the last period past keep_after when there is one."""
    if len(text) <= limit:
        return text
    text = text[:limit]
    last_period = text.rfind(".")
    if last_period > keep_after:
        return text[: last_period + 1]
    return text + "..."


def is_valid_faq_question(text: str) -> bool:
    if not text or len(text) < 10 or len(text) > 300:
        return False
    return bool(
        QUESTION_WORDS_RE.search(text)
        or text.endswith("?")
        or re.match(r"^Q:", text, re.I)
        or re.match(r"^Question:", text, re.I)
    )


def clean_faq_question(text: str) -> str:
    text = QUESTION_PREFIX_RE.sub("", text).strip()
    if not re.search(r"[?!.]$", text) and QUESTION_WORDS_RE.search(text):
        text += "?"
    return text


def clean_faq_answer(text: str) -> str:
    text = clean_text(ANSWER_PREFIX_RE.sub("", text.strip()))
    return truncate_at_sentence(text, 1500, 1000)


def clean_step_name(text: str) -> str:
    return STEP_PREFIX_RE.sub("", text).strip()


def clean_step_text(text: str) -> str:
    text = clean_text(STEP_PREFIX_RE.sub("", text.strip()))
    return truncate_at_sentence(text, 1000, 800)


def iso_duration(amount: int, unit: str) -> str:
    unit = unit.lower()
    if "hour" in unit or "hr" in unit:
        return f"PT{amount}H"
    if "day" in unit:
        return f"P{amount}D"
    return f"PT{amount}M"


def parse_address(text: str) -> dict[str, str]:
    """Pull a PostalAddress out of a free-text address block."""
    address: dict[str, str] = {"@type": "PostalAddress"}

    if zip_match := ZIP_RE.search(text):
        address["postalCode"] = zip_match.group(0)
    if state_match := STATE_CODE_RE.search(text):
        address["addressRegion"] = state_match.group(0)
    lowered = text.lower()
    if "usa" in lowered or "united states" in lowered:
        address["addressCountry"] = "US"

    street = re.sub(r"\b\d{5}(-\d{4})?\b.*$", "", text, flags=re.S)
    street = re.sub(r"\b[A-Z]{2}\b.*$", "", street, flags=re.S).strip()
    if street:
        parts = street.split(",")
        if len(parts) >= 2:
            address["streetAddress"] = parts[0].strip()
            address["addressLocality"] = parts[1].strip()
        else:
            address["streetAddress"] = street

    return address if len(address) > 1 else {}


@dataclass
class PageStructuredData:
    """Schema fragments recovered from page markup."""

    author: dict[str, Any] | None = None
    organization: dict[str, Any] | None = None
    faq: dict[str, Any] | None = None
    howto: dict[str, Any] | None = None
    contact: dict[str, Any] = field(default_factory=dict)


AUTHOR_SELECTORS: tuple[Selector, ...] = (
    meta_named("author"),
    meta_property("article:author"),
    meta_property("og:author"),
    attr_contains("class", "author"),
    attr_contains("id", "author"),
    attr_contains("class", "byline"),
    attr_contains("class", "writer"),
    attr_contains("class", "contributor"),
    attr_equals("rel", "author"),
    own_text_contains("By "),
    own_text_contains("Author:"),
    own_text_contains("Written by"),
)

ORGANIZATION_SELECTORS: tuple[Selector, ...] = (
    meta_property("og:site_name"),
    meta_named("application-name"),
    attr_contains("class", "logo"),
    attr_contains("id", "logo"),
    attr_contains("class", "brand"),
    attr_contains("id", "brand"),
    attr_contains("class", "company"),
    attr_contains("id", "company"),
    attr_contains("class", "organization"),
    attr_contains("id", "organization"),
    attr_contains("class", "site-title"),
    attr_contains("class", "site-name"),
)

FAQ_CONTAINER_SELECTORS: tuple[Selector, ...] = (
    *(
        attr_contains(attr, needle)
        for needle in ("faq", "faqs", "questions", "answers", "accordion", "collapse")
        for attr in ("class", "id")
    ),
    own_text_contains("Frequently Asked Questions"),
    own_text_contains("FAQ"),
    own_text_contains("Common Questions"),
    own_text_contains("Q&A"),
    own_text_contains("Questions and Answers"),
)

FAQ_QUESTION_SELECTORS: tuple[Selector, ...] = (
    tag_named("h2"),
    tag_named("h3"),
    tag_named("h4"),
    tag_named("h5"),
    tag_named("h6"),
    attr_contains("class", "question"),
    attr_contains("class", "q"),
    attr_contains("id", "question"),
    attr_contains("id", "q"),
    attr_contains("class", "faq-question"),
    attr_contains("class", "accordion-title"),
    attr_contains("class", "collapse-title"),
    attr_contains("class", "toggle-title"),
    attr_equals("role", "button"),
    has_attr("aria-expanded"),
    tag_named("dt"),
    tag_named("strong"),
    tag_named("b"),
    own_text_startswith("Q:"),
    own_text_startswith("Question:"),
    lambda tag: any("?" in s and len(s) < 200 for s in tag.find_all(string=True, recursive=False)),
)

ANSWER_SIBLING_SELECTORS: tuple[Selector, ...] = (
    attr_contains("class", "collapse"),
    attr_contains("class", "accordion-content"),
    attr_contains("class", "answer"),
    attr_contains("class", "faq-answer"),
    has_attr("aria-expanded"),
)

HOWTO_CONTAINER_SELECTORS: tuple[Selector, ...] = (
    *(
        attr_contains(attr, needle)
        for needle in (
            "how-to", "howto", "tutorial", "guide", "instructions", "steps", "procedure", "process",
        )
        for attr in ("class", "id")
    ),
    own_text_contains("How to"),
    own_text_contains("Step by step"),
    own_text_contains("Instructions"),
    own_text_contains("Tutorial"),
    own_text_contains("Guide"),
)

HOWTO_TITLE_SELECTORS: tuple[Selector, ...] = (
    tag_named("h1"),
    tag_named("h2"),
    tag_named("h3"),
    attr_contains("class", "title"),
    attr_contains("class", "heading"),
    attr_contains("class", "howto-title"),
    attr_contains("class", "guide-title"),
)

HOWTO_DESCRIPTION_SELECTORS: tuple[Selector, ...] = (
    attr_contains("class", "description"),
    attr_contains("class", "intro"),
    attr_contains("class", "overview"),
    tag_named("p"),
)

HOWTO_STEP_SELECTORS: tuple[Selector, ...] = (
    attr_contains("class", "step"),
    attr_contains("id", "step"),
    attr_contains("class", "instruction"),
    attr_contains("class", "direction"),
    attr_contains("class", "task"),
    lambda tag: tag.name == "li" and tag.parent is not None and tag.parent.name == "ol",
    lambda tag: tag.name == "li"
    and tag.parent is not None
    and tag.parent.name == "ul"
    and "step" in _attr_value(tag, "class"),
    lambda tag: _attr_value(tag, "class").startswith("step-"),
    has_attr("data-step"),
)

SUPPLY_CONTAINER_CLASSES = ("supplies", "tools", "materials", "equipment")
SUPPLY_LABELS = ("You will need:", "Supplies:", "Tools:")

ADDRESS_SELECTORS: tuple[Selector, ...] = (
    attr_contains("class", "address"),
    attr_contains("id", "address"),
    attr_contains("class", "location"),
    attr_contains("class", "contact"),
)


def select(root: Tag, selector: Selector) -> list[Tag]:
    return root.find_all(selector)


def select_first(root: Tag, selector: Selector) -> Tag | None:
    return root.find(selector)


class StructuredDataScanner:
    """Scans one parsed page for schema-worthy structures."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html or "", "html.parser")

    @property
    def text(self) -> str:
        return self.soup.get_text(" ")

    def scan(self) -> PageStructuredData:
        result = PageStructuredData(
            author=self.author(),
            organization=self.organization(),
            faq=self.faq(),
            howto=self.howto(),
            contact=self.contact_information(),
        )
        logger.debug(
            "structured_data_scanned",
            has_author=result.author is not None,
            has_organization=result.organization is not None,
            faq_items=len(result.faq["mainEntity"]) if result.faq else 0,
            howto_steps=len(result.howto["step"]) if result.howto else 0,
        )
        return result

    # Authorship

    def author(self) -> dict[str, Any] | None:
        for selector in AUTHOR_SELECTORS:
            for node in select(self.soup, selector):
                name = self._author_name(node)
                if name:
                    return {"@type": "Person", "name": name}
        return None

    def _author_name(self, node: Tag) -> str | None:
        if node.name == "meta":
            content = _attr_value(node, "content").strip()
            if content:
                return content

        text = node.get_text().strip()
        if not text:
            return None
        text = AUTHOR_PREFIX_RE.sub("", text).strip()
        name = " ".join(text.split(" ")[:3])
        if 2 < len(name) < 100:
            return name
        return None

    def organization(self) -> dict[str, Any] | None:
        for selector in ORGANIZATION_SELECTORS:
            for node in select(self.soup, selector):
                name = self._organization_name(node)
                if name:
                    return {"@type": "Organization", "name": name}
        return None

    def _organization_name(self, node: Tag) -> str | None:
        if node.name == "meta":
            content = _attr_value(node, "content").strip()
            if content:
                return content
        text = node.get_text().strip()
        if 2 < len(text) < 200:
            return text
        return None

    # FAQ

    def faq(self) -> dict[str, Any] | None:
        items: list[dict[str, Any]] = []
        for selector in FAQ_CONTAINER_SELECTORS:
            for container in select(self.soup, selector):
                items.extend(self._faq_items(container))
        items.extend(self._faq_from_headings())

        items = self._dedupe_faqs(items)
        if not items:
            return None
        return {"@type": "FAQPage", "mainEntity": items[:MAX_FAQ_ITEMS]}

    def _faq_items(self, container: Tag) -> list[dict[str, Any]]:
        questions = []
        for selector in FAQ_QUESTION_SELECTORS:
            for node in select(container, selector):
                text = node.get_text().strip()
                if is_valid_faq_question(text):
                    questions.append((node, text))

        items = []
        for node, text in questions:
            answer, author = self._find_answer(node)
            if not answer:
                continue
            item: dict[str, Any] = {
                "@type": "Question",
                "name": clean_faq_question(text),
                "acceptedAnswer": {"@type": "Answer", "text": clean_faq_answer(answer)},
            }
            if author:
                item["acceptedAnswer"]["author"] = {"@type": "Person", "name": author}
            items.append(item)
        return items

    def _faq_from_headings(self) -> list[dict[str, Any]]:
        items = []
        for heading in self.soup.find_all(HEADING_TAGS):
            text = heading.get_text().strip()
            if not is_valid_faq_question(text):
                continue
            answer, _ = self._find_answer(heading)
            if answer and len(answer) > 50:
                items.append(
                    {
                        "@type": "Question",
                        "name": clean_faq_question(text),
                        "acceptedAnswer": {"@type": "Answer", "text": clean_faq_answer(answer)},
                    }
                )
        return items

    def _find_answer(self, question: Tag) -> tuple[str, str]:
        """Answer text and optional author for a question node."""
        for selector in ANSWER_SIBLING_SELECTORS:
            sibling = question.find_next_sibling(selector)
            if sibling is None:
                continue
            text = sibling.get_text().strip()
            if len(text) > 20:
                author_node = sibling.find(attr_contains("class", "author"))
                return text, author_node.get_text().strip() if author_node else ""

        if question.parent is not None:
            for uncle in question.parent.find_next_siblings(attr_contains("class", "answer")):
                text = uncle.get_text().strip()
                if len(text) > 20:
                    return text, ""
                break

        for sibling in question.find_next_siblings():
            text = sibling.get_text().strip()
            if len(text) > 20:
                return text, ""

        return "", ""

    @staticmethod
    def _dedupe_faqs(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[str] = set()
        unique = []
        for item in items:
            key = item["name"].strip().lower()
            if key in seen:
                continue
            answer = item["acceptedAnswer"]["text"]
            if len(answer) < 20 or TRIVIAL_ANSWER_RE.match(answer.strip()):
                continue
            seen.add(key)
            unique.append(item)
        return unique

    # HowTo

    def howto(self) -> dict[str, Any] | None:
        for selector in HOWTO_CONTAINER_SELECTORS:
            for container in select(self.soup, selector):
                howto = self._howto_from_container(container)
                if howto:
                    return howto
        return self._howto_from_page_structure()

    def _howto_from_container(self, container: Tag) -> dict[str, Any] | None:
        steps = self._howto_steps(container)
        if not steps:
            return None

        howto: dict[str, Any] = {
            "@type": "HowTo",
            "name": self._howto_title(container),
            "step": steps,
        }

        for selector in HOWTO_DESCRIPTION_SELECTORS:
            node = select_first(container, selector)
            if node is None:
                continue
            description = node.get_text().strip()
            if len(description) > 30:
                howto["description"] = description
                break

        content = container.get_text()
        for pattern in TIME_PATTERNS:
            if match := pattern.search(content):
                howto["totalTime"] = iso_duration(int(match.group(1)), match.group(2))
                break

        supplies = self._howto_supplies(container)
        if supplies:
            howto["supply"] = supplies

        return howto

    def _howto_title(self, container: Tag) -> str:
        for selector in HOWTO_TITLE_SELECTORS:
            node = select_first(container, selector)
            if node is not None:
                title = node.get_text().strip()
                if title:
                    return title
                break

        page_title = self.soup.find("title")
        if page_title is not None:
            if match := HOWTO_PAGE_TITLE_RE.search(page_title.get_text().strip()):
                return f"How to {match.group(1)}"
        return "How-to Guide"

    def _howto_steps(self, container: Tag) -> list[dict[str, Any]]:
        steps: list[dict[str, Any]] = []
        for selector in HOWTO_STEP_SELECTORS:
            for node in select(container, selector):
                step = self._howto_step(node, len(steps) + 1)
                if step is not None:
                    steps.append(step)
            if steps:
                break

        if not steps:
            steps = self._steps_from_text(container.get_text())
        return steps[:MAX_HOWTO_STEPS]

    def _howto_step(self, node: Tag, position: int) -> dict[str, Any] | None:
        text = node.get_text().strip()
        name = ""
        heading = node.find(lambda t: t.name in HEADING_TAGS or "step-title" in _attr_value(t, "class"))
        if heading is not None:
            name = heading.get_text().strip()
            if name:
                text = text.replace(name, "").strip()

        if len(text) <= 15:
            return None

        step: dict[str, Any] = {"@type": "HowToStep", "position": position, "text": clean_step_text(text)}
        if name:
            step["name"] = clean_step_name(name)

        image = node.find("img")
        if image is not None and image.get("src"):
            step["image"] = {"@type": "ImageObject", "url": image["src"]}
            if image.get("alt"):
                step["image"]["caption"] = image["alt"]
        return step

    @staticmethod
    def _steps_from_text(text: str) -> list[dict[str, Any]]:
        for pattern in NUMBERED_STEP_PATTERNS:
            steps = []
            for match in pattern.finditer(text):
                step_text = match.group(2).strip()
                if len(step_text) > 15:
                    steps.append(
                        {
                            "@type": "HowToStep",
                            "position": int(match.group(1)),
                            "text": clean_step_text(step_text),
                        }
                    )
            if steps:
                return steps
        return []

    def _howto_supplies(self, container: Tag) -> list[dict[str, str]]:
        candidates: list[list[Tag]] = [
            [li for box in select(container, attr_contains("class", cls)) for li in box.find_all("li")]
            for cls in SUPPLY_CONTAINER_CLASSES
        ]
        for label in SUPPLY_LABELS:
            items = []
            for node in select(container, own_text_contains(label)):
                for ul in node.find_next_siblings("ul"):
                    items.extend(ul.find_all("li"))
            candidates.append(items)

        for nodes in candidates:
            supplies = [
                {"@type": "HowToSupply", "name": text}
                for text in (n.get_text().strip() for n in nodes)
                if text and len(text) < 100
            ]
            if supplies:
                return supplies[:MAX_HOWTO_SUPPLIES]
        return []

    def _howto_from_page_structure(self) -> dict[str, Any] | None:
        main_heading = self.soup.find("h1")
        if main_heading is None:
            return None
        title = main_heading.get_text().strip()
        if not HOWTO_TITLE_RE.search(title):
            return None

        step_headings = self.soup.find_all(
            lambda t: t.name in ("h2", "h3")
            and (
                own_text_contains("Step")(t)
                or own_text_startswith("1.")(t)
                or own_text_startswith("2.")(t)
            )
        )
        if len(step_headings) < 2:
            return None

        steps = []
        for index, heading in enumerate(step_headings):
            content = self._content_until_next_heading(heading)
            if content:
                steps.append(
                    {
                        "@type": "HowToStep",
                        "position": index + 1,
                        "name": clean_step_name(heading.get_text().strip()),
                        "text": clean_step_text(content),
                    }
                )

        if len(steps) < 2:
            return None
        return {"@type": "HowTo", "name": title, "step": steps[:MAX_PAGE_HOWTO_STEPS]}

    @staticmethod
    def _content_until_next_heading(heading: Tag) -> str:
        parts = []
        for sibling in heading.find_next_siblings():
            if sibling.name in HEADING_TAGS:
                break
            text = sibling.get_text().strip()
            if text:
                parts.append(text)
        return " ".join(parts).strip()

    # Contact and identity

    def contact_information(self) -> dict[str, Any]:
        contact: dict[str, Any] = {}
        text = self.text
        for pattern in PHONE_PATTERNS:
            if match := pattern.search(text):
                contact["telephone"] = match.group(0).strip()
                break

        for selector in ADDRESS_SELECTORS:
            node = select_first(self.soup, selector)
            if node is None:
                continue
            address_text = node.get_text().strip()
            if 10 < len(address_text) < 200:
                address = parse_address(address_text)
                if address:
                    contact["address"] = address
                    break
        return contact

    def social_profiles(self) -> list[str]:
        """Profile and listing links in document order, without duplicates."""
        links: list[str] = []
        for domain in SOCIAL_DOMAINS:
            for anchor in self.soup.find_all("a", href=True):
                href = anchor["href"].strip()
                if domain in href and is_valid_url(href) and href not in links:
                    links.append(href)
        return links

    def canonical_url(self) -> str | None:
        link = self.soup.find("link", rel="canonical")
        if link is not None and link.get("href"):
            return link["href"]
        return None

    def logo_url(self) -> str | None:
        og_image = self.soup.find(meta_property("og:image"))
        candidates = [_attr_value(og_image, "content") if og_image is not None else ""]
        for attr in ("class", "id"):
            for box in select(self.soup, attr_contains(attr, "logo")):
                img = box.find("img", src=True)
                if img is not None:
                    candidates.append(img["src"])
                    break
        img = self.soup.find(lambda t: t.name == "img" and "logo" in _attr_value(t, "alt") and t.has_attr("src"))
        if img is not None:
            candidates.append(img["src"])

        for candidate in candidates:
            candidate = candidate.strip()
            if candidate and is_valid_url(candidate):
                return candidate
        return None

    def about_text(self) -> str | None:
        """A mission or about blurb of reasonable length."""
        selectors = (
            attr_contains("class", "about"),
            attr_contains("class", "mission"),
            attr_contains("class", "description"),
            own_text_contains("established"),
            own_text_contains("founded"),
            own_text_contains("since"),
        )
        for selector in selectors:
            node = select_first(self.soup, selector)
            if node is None:
                continue
            text = node.get_text().strip()
            if 50 < len(text) < 500:
                return text
        return None

    def program_details(self) -> dict[str, Any]:
        """Duration, credits, credential and delivery mode of a program page."""
        text = self.text
        details: dict[str, Any] = {}

        for pattern, unit in DURATION_PATTERNS:
            if match := pattern.search(text):
                details["timeToComplete"] = f"P{match.group(1)}{unit}"
                break

        if match := CREDITS_RE.search(text):
            details["numberOfCredits"] = int(match.group(1))

        if match := CREDENTIAL_RE.search(text):
            details["educationalCredentialAwarded"] = {
                "@type": "EducationalOccupationalCredential",
                "credentialCategory": match.group(1).lower().capitalize(),
            }

        if match := PROGRAM_MODE_RE.search(text):
            details["educationalProgramMode"] = match.group(1).lower()

        return details

    def awards(self) -> list[str]:
        text = self.text
        awards: list[str] = []
        for pattern in AWARD_PATTERNS:
            for match in pattern.finditer(text):
                award = match.group(1).strip()
                if 10 < len(award) < 200 and award not in awards:
                    awards.append(award)
        return awards[:MAX_AWARDS]


def scan_structured_data(html: str) -> PageStructuredData:
    """Convenience wrapper around StructuredDataScanner.scan."""
    return StructuredDataScanner(html).scan()
