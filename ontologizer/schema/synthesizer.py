"""
schema.org JSON-LD synthesis.

Classifies the page, then fills the matching template from enriched
entities and from structures found in the page markup.
"""

import re
from typing import Any
from urllib.parse import quote_plus

import structlog

from ontologizer.enrichment.models import EnrichedEntity
from ontologizer.extraction.text import TextParts, extract_text_parts
from ontologizer.schema.detector import detect_schema_type
from ontologizer.schema.structured import PageStructuredData, StructuredDataScanner

logger = structlog.get_logger(__name__)

SCHEMA_CONTEXT = "https://schema.org"
PRODUCTONTOLOGY_ID_URL = "http://www.productontology.org/id/"
PRODUCTONTOLOGY_DOC_URL = "http://www.productontology.org/doc/"
GOOGLE_SEARCH_URL = "https://www.google.com/search?q="

SPEAKABLE_XPATHS = [
    "/html/head/title",
    '/html/head/meta[@name="description"]',
    "/html/body//h1",
    "/html/body//h2",
    "/html/body//h3",
    "/html/body//p",
]
# Program pages leave paragraphs out of the speakable selectors
PROGRAM_SPEAKABLE_XPATHS = SPEAKABLE_XPATHS[:-1]
SPEAKABLE_ROOT_TYPES = ("WebPage", "Article")

# First keyword found in title + meta wins
SERVICE_TYPES = (
    ("assisted living", "Assisted living"),
    ("limo", "Limousine service"),
    ("limousine", "Limousine service"),
    ("transportation", "Transportation service"),
    ("chauffeur", "Chauffeur service"),
    ("car service", "Car service"),
    ("medical", "Medical service"),
    ("education", "Educational service"),
    ("consulting", "Consulting service"),
)
DEFAULT_SERVICE_TYPE = "Professional service"

SERVICE_WIKIPEDIA = {
    "Assisted living": "https://en.wikipedia.org/wiki/Assisted_living",
    "Limousine service": "https://en.wikipedia.org/wiki/Limousine",
    "Transportation service": "https://en.wikipedia.org/wiki/Transport",
    "Chauffeur service": "https://en.wikipedia.org/wiki/Chauffeur",
}
SERVICE_WIKIDATA = {
    "Assisted living": "https://www.wikidata.org/wiki/Q315412",
    "Limousine service": "https://www.wikidata.org/wiki/Q188475",
}

SERVICE_ENTITY_KEYWORDS = ("service", "services", "offering", "solution", "care", "support")
SERVICE_DESCRIPTIONS = (
    (
        "limo service",
        "A luxury transportation option featuring stretch limousines or high-end vehicles, "
        "often booked for special occasions like weddings, proms, or corporate events.",
    ),
    ("car service", "A professional, pre-arranged ground transportation service using private vehicles."),
    (
        "chauffeur service",
        "A premium, full-service transportation experience where a professionally trained "
        "driver caters to your itinerary.",
    ),
    (
        "assisted living",
        "Residential care for seniors who need help with activities of daily living but want "
        "to maintain their independence.",
    ),
)

MAX_OFFERS = 5
MAX_KNOWS_ABOUT = 12
MAX_PROVIDER_KNOWS_ABOUT = 8
PROGRAM_ABOUT_COUNT = 4

INSTITUTION_RE = re.compile(r"\b(university|college|academy|institute|school)\b")
ACRONYM_RE = re.compile(r"\b([A-Z]{2,5})\b")
ALIAS_RE = re.compile(r"(?:also known as|aka|formerly)\s+([^.]+)", re.I)
EDUCATION_TOPIC_RE = re.compile(
    r"\b(education|medical|health|training|program|course|degree|diploma|certification)\b"
)
VOCATIONAL_RE = re.compile(r"\b(vocational|technical|career)\b")

UNITED_STATES = {
    "@type": "Place",
    "name": "United States of America",
    "sameAs": [
        "https://en.wikipedia.org/wiki/United_States",
        "https://www.wikidata.org/wiki/Q30",
        "https://www.google.com/search?kgmid=/m/09c7w0",
    ],
}

US_STATES = {
    "AL": "Alabama", "AK": "Alaska", "AZ": "Arizona", "AR": "Arkansas",
    "CA": "California", "CO": "Colorado", "CT": "Connecticut", "DE": "Delaware",
    "FL": "Florida", "GA": "Georgia", "HI": "Hawaii", "ID": "Idaho",
    "IL": "Illinois", "IN": "Indiana", "IA": "Iowa", "KS": "Kansas",
    "KY": "Kentucky", "LA": "Louisiana", "ME": "Maine", "MD": "Maryland",
    "MA": "Massachusetts", "MI": "Michigan", "MN": "Minnesota", "MS": "Mississippi",
    "MO": "Missouri", "MT": "Montana", "NE": "Nebraska", "NV": "Nevada",
    "NH": "New Hampshire", "NJ": "New Jersey", "NM": "New Mexico", "NY": "New York",
    "NC": "North Carolina", "ND": "North Dakota", "OH": "Ohio", "OK": "Oklahoma",
    "OR": "Oregon", "PA": "Pennsylvania", "RI": "Rhode Island", "SC": "South Carolina",
    "SD": "South Dakota", "TN": "Tennessee", "TX": "Texas", "UT": "Utah",
    "VT": "Vermont", "VA": "Virginia", "WA": "Washington", "WV": "West Virginia",
    "WI": "Wisconsin", "WY": "Wyoming",
}


def validate_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Ensure @context and @type; add speakable selectors to page-like roots."""
    schema.setdefault("@context", SCHEMA_CONTEXT)
    schema.setdefault("@type", "Thing")
    if schema["@type"] in SPEAKABLE_ROOT_TYPES:
        schema["speakable"] = {"@type": "SpeakableSpecification", "xpath": list(SPEAKABLE_XPATHS)}
    return schema


def about_things(entities: list[EnrichedEntity]) -> list[dict[str, Any]]:
    """One Thing per entity, linked to every source it was resolved against."""
    things = []
    for entity in entities:
        thing: dict[str, Any] = {"@type": "Thing", "name": entity.name}
        if entity.productontology_url:
            thing["additionalType"] = entity.productontology_url
        same_as = [
            url for url in (entity.wikipedia_url, entity.wikidata_url, entity.google_kg_url) if url
        ]
        if same_as:
            thing["sameAs"] = same_as
        things.append(thing)
    return things


def knowledge_thing(entity: EnrichedEntity) -> dict[str, Any]:
    thing: dict[str, Any] = {"@type": "Thing", "name": entity.name.lower()}
    same_as = [url for url in (entity.wikipedia_url, entity.google_kg_url) if url]
    if same_as:
        thing["sameAs"] = same_as
    return thing


def knows_about(entities: list[EnrichedEntity]) -> list[dict[str, Any]]:
    relevant = [e for e in entities if e.confidence_score > 60 and e.wikipedia_url]
    return [knowledge_thing(e) for e in relevant[:MAX_KNOWS_ABOUT]]


def service_name(parts: TextParts, entities: list[EnrichedEntity]) -> str:
    if parts.title:
        if match := re.match(r"^(.+?)\s*[-|]\s*(.+)$", parts.title):
            return match.group(1).strip()
        return parts.title
    return entities[0].name if entities else "Professional Service"


def service_type(parts: TextParts) -> str:
    text = f"{parts.title} {parts.meta}".lower()
    for keyword, label in SERVICE_TYPES:
        if keyword in text:
            return label
    return DEFAULT_SERVICE_TYPE


def business_name(parts: TextParts, entities: list[EnrichedEntity]) -> str:
    if parts.title:
        return re.sub(r"\s*[-|]\s*.+$", "", parts.title).strip()
    return entities[0].name if entities else "Local Business"


def program_name(parts: TextParts, entities: list[EnrichedEntity]) -> str:
    if parts.title:
        return parts.title
    return entities[0].name if entities else "Educational Program"


def service_description(name: str) -> str:
    name_lc = name.lower()
    for key, description in SERVICE_DESCRIPTIONS:
        if key in name_lc:
            return description
    return f"Professional {name} provided with expertise and care."


def offered_services(entities: list[EnrichedEntity]) -> list[dict[str, Any]]:
    offers = []
    for entity in entities:
        name_lc = entity.name.lower()
        if entity.confidence_score > 50 and any(k in name_lc for k in SERVICE_ENTITY_KEYWORDS):
            offers.append(
                {
                    "@type": "Offer",
                    "itemOffered": {
                        "@type": "Service",
                        "name": entity.name,
                        "description": service_description(entity.name),
                    },
                }
            )
    return offers[:MAX_OFFERS]


class SchemaSynthesizer:
    """Builds one JSON-LD document per analyzed page."""

    def synthesize(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        html: str,
    ) -> dict[str, Any]:
        """
        Generate JSON-LD for a page.

        Args:
            entities: Enriched entities, highest confidence first
            page_url: Canonical URL of the page (may be empty for pasted content)
            html: Raw page markup

        Returns:
            A schema.org object rooted at the detected page type
        """
        parts = extract_text_parts(html) if html else None
        schema_type = detect_schema_type(parts)

        if parts is None:
            schema = self._webpage(entities, page_url, None, None)
        else:
            scanner = StructuredDataScanner(html)
            page = scanner.scan()
            builders = {
                "Service": self._service,
                "LocalBusiness": self._local_business,
                "EducationalOccupationalProgram": self._educational_program,
                "Article": self._article,
            }
            builder = builders.get(schema_type)
            if builder is None:
                schema = self._webpage(entities, page_url, parts, page)
            else:
                schema = builder(entities, page_url, parts, page, scanner)

        logger.debug(
            "schema_synthesized",
            schema_type=schema_type,
            about_count=len(schema.get("about", [])) if isinstance(schema.get("about"), list) else 1,
        )
        return schema

    def _service(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        parts: TextParts,
        page: PageStructuredData,
        scanner: StructuredDataScanner,
    ) -> dict[str, Any]:
        label = service_type(parts)
        schema: dict[str, Any] = {
            "@context": SCHEMA_CONTEXT,
            "@type": "Service",
            "serviceType": label,
            "name": service_name(parts, entities),
            "url": page_url,
        }
        if parts.meta:
            schema["description"] = parts.meta

        same_as = [
            url for url in (SERVICE_WIKIPEDIA.get(label), SERVICE_WIKIDATA.get(label)) if url
        ]
        if same_as:
            schema["sameAs"] = same_as
            schema["additionalType"] = PRODUCTONTOLOGY_ID_URL + label.replace(" ", "_")

        provider: dict[str, Any] = {"@type": "LocalBusiness", "name": business_name(parts, entities)}
        canonical = scanner.canonical_url()
        if canonical:
            provider["url"] = canonical
        provider.update(page.contact)
        if parts.meta:
            provider["description"] = parts.meta
        schema["provider"] = provider

        if page.faq:
            schema["mainEntity"] = page.faq
        elif page.howto:
            schema["mainEntity"] = page.howto

        return validate_schema(schema)

    def _local_business(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        parts: TextParts,
        page: PageStructuredData,
        scanner: StructuredDataScanner,
    ) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "@context": SCHEMA_CONTEXT,
            "@type": "LocalBusiness",
            "name": business_name(parts, entities),
            "url": page_url,
        }
        if parts.meta:
            schema["description"] = parts.meta
        schema.update(page.contact)

        offers = offered_services(entities)
        if offers:
            schema["hasOfferCatalog"] = {
                "@type": "OfferCatalog",
                "name": "Comprehensive Services",
                "itemListElement": offers,
            }

        expertise = knows_about(entities)
        if expertise:
            schema["knowsAbout"] = expertise

        profiles = scanner.social_profiles()
        if profiles:
            schema["sameAs"] = profiles

        return validate_schema(schema)

    def _educational_program(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        parts: TextParts,
        page: PageStructuredData,
        scanner: StructuredDataScanner,
    ) -> dict[str, Any]:
        name = program_name(parts, entities)
        schema: dict[str, Any] = {
            "@context": SCHEMA_CONTEXT,
            "@type": "WebPage",
            "name": parts.title or name,
            "url": page_url,
        }
        if parts.meta:
            schema["description"] = parts.meta

        provider = self._educational_provider(entities, parts, page, scanner)

        program: dict[str, Any] = {
            "@type": "EducationalOccupationalProgram",
            "name": name,
            "url": page_url,
        }
        if parts.meta:
            program["description"] = parts.meta
        program.update(scanner.program_details())
        program["provider"] = provider
        schema["mainEntity"] = program

        if page.faq:
            schema["hasPart"] = page.faq
        schema["provider"] = provider

        things = about_things(entities)
        if things:
            schema["about"] = things[:PROGRAM_ABOUT_COUNT]
            if len(things) > PROGRAM_ABOUT_COUNT:
                schema["mentions"] = things[PROGRAM_ABOUT_COUNT : PROGRAM_ABOUT_COUNT * 2]

        if page.organization:
            schema["publisher"] = page.organization

        schema["speakable"] = {
            "@type": "SpeakableSpecification",
            "xpath": list(PROGRAM_SPEAKABLE_XPATHS),
        }
        return schema

    def _educational_provider(
        self,
        entities: list[EnrichedEntity],
        parts: TextParts,
        page: PageStructuredData,
        scanner: StructuredDataScanner,
    ) -> dict[str, Any]:
        name = next(
            (e.name for e in entities if INSTITUTION_RE.search(e.name.lower())),
            None,
        )
        if name is None:
            name = business_name(parts, entities)
        provider: dict[str, Any] = {"@type": "CollegeOrUniversity", "name": name}

        alternate_names = []
        if match := ACRONYM_RE.search(name):
            alternate_names.append(match.group(1))
        if match := ALIAS_RE.search(scanner.text):
            alternate_names.append(match.group(1).strip())
        if alternate_names:
            provider["alternateName"] = alternate_names

        if parts.meta:
            provider["description"] = parts.meta
            about = scanner.about_text()
            if about:
                provider["disambiguatingDescription"] = about

        canonical = scanner.canonical_url()
        if canonical:
            provider["url"] = canonical
        logo = scanner.logo_url()
        if logo:
            provider["logo"] = logo

        provider.update(page.contact)

        name_lc = name.lower()
        same_as = scanner.social_profiles()
        if name:
            same_as.append(GOOGLE_SEARCH_URL + quote_plus(name))
            if "medical" in name_lc or "health" in name_lc:
                same_as.append(GOOGLE_SEARCH_URL + quote_plus(f"{name} accreditation"))
        same_as = list(dict.fromkeys(same_as))
        if same_as:
            provider["sameAs"] = same_as

        expertise = [
            knowledge_thing(e)
            for e in entities
            if e.confidence_score > 70 and e.wikipedia_url and EDUCATION_TOPIC_RE.search(e.name.lower())
        ]
        if expertise:
            provider["knowsAbout"] = expertise[:MAX_PROVIDER_KNOWS_ABOUT]

        additional_types = []
        if "medical" in name_lc or "health" in name_lc:
            additional_types.append(PRODUCTONTOLOGY_DOC_URL + "Health_education")
        if VOCATIONAL_RE.search(name_lc):
            additional_types.append(PRODUCTONTOLOGY_DOC_URL + "Vocational_school")
        if additional_types:
            provider["additionalType"] = additional_types

        identifier = next(
            (e.google_kg_url for e in entities if e.name.lower() == name_lc and e.google_kg_url),
            None,
        )
        if identifier:
            provider["identifier"] = identifier

        region = page.contact.get("address", {}).get("addressRegion")
        if region:
            area_served = [dict(UNITED_STATES, sameAs=list(UNITED_STATES["sameAs"]))]
            state_name = US_STATES.get(region)
            if state_name:
                area_served.append(
                    {
                        "@type": "Place",
                        "name": state_name,
                        "sameAs": [GOOGLE_SEARCH_URL + quote_plus(state_name)],
                    }
                )
            provider["areaServed"] = area_served

        awards = scanner.awards()
        if awards:
            provider["award"] = awards

        return provider

    def _article(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        parts: TextParts,
        page: PageStructuredData,
        scanner: StructuredDataScanner,
    ) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "@context": SCHEMA_CONTEXT,
            "@type": "WebPage",
            "url": page_url,
            "name": parts.title,
        }
        if parts.meta:
            schema["description"] = parts.meta

        article: dict[str, Any] = {"@type": "Article", "headline": parts.title}
        if parts.meta:
            article["description"] = parts.meta
        if page.author:
            article["author"] = page.author
        schema["mainEntity"] = article

        has_part = [part for part in (page.faq, page.howto) if part]
        if has_part:
            schema["hasPart"] = has_part

        things = about_things(entities)
        if things:
            schema["about"] = things[0]
            if len(things) > 1:
                schema["mentions"] = things[1:]

        if page.organization:
            schema["publisher"] = page.organization

        return validate_schema(schema)

    def _webpage(
        self,
        entities: list[EnrichedEntity],
        page_url: str,
        parts: TextParts | None,
        page: PageStructuredData | None,
    ) -> dict[str, Any]:
        schema: dict[str, Any] = {"@context": SCHEMA_CONTEXT, "@type": "WebPage", "url": page_url}

        if parts is not None and page is not None:
            if parts.title:
                schema["name"] = parts.title
            if parts.meta:
                schema["description"] = parts.meta
            if page.author:
                schema["author"] = page.author
            if page.organization:
                schema["publisher"] = page.organization
            # HowTo takes precedence over FAQ as the main entity
            if page.faq:
                schema["mainEntity"] = page.faq
            if page.howto:
                schema["mainEntity"] = page.howto

        things = about_things(entities)
        if things:
            schema["about"] = things
            schema["mentions"] = things

        return validate_schema(schema)


def synthesize_schema(entities: list[EnrichedEntity], page_url: str, html: str) -> dict[str, Any]:
    """Convenience wrapper around SchemaSynthesizer.synthesize."""
    return SchemaSynthesizer().synthesize(entities, page_url, html)
