"""Entity type detection from Wikidata P31 claims with name heuristics."""

import re

import structlog

from ontologizer.enrichment.clients import WikidataClient
from ontologizer.enrichment.sources import LOOKUP_ERRORS

logger = structlog.get_logger(__name__)

# Wikidata "instance of" targets we label
WIKIDATA_TYPE_MAP = {
    "Q5": "person",
    "Q43229": "organization",
    "Q4830453": "business",
    "Q3918": "university",
    "Q95074": "company",
    "Q16521": "taxon",
    "Q571": "book",
    "Q11424": "film",
    "Q13442814": "scholarly article",
    "Q12737077": "course",
}

PERSON_NAME_RE = re.compile(r"^[A-Z][a-z]+ [A-Z][a-z]+$")


def guess_type_from_name(name: str) -> str | None:
    """Best-effort type from the entity's surface form."""
    if PERSON_NAME_RE.match(name):
        return "person"
    name_lc = name.lower()
    if "university" in name_lc or "school" in name_lc:
        return "organization"
    if "course" in name_lc:
        return "course"
    return None


class EntityTypeDetector:
    def __init__(self, client: WikidataClient):
        self.client = client

    async def detect(self, name: str, wikidata_url: str | None) -> str | None:
        if wikidata_url:
            qid = self.client.qid_from_url(wikidata_url)
            try:
                instance = await self.client.instance_of(qid)
            except LOOKUP_ERRORS as e:
                logger.warning("entity_type_lookup_failed", entity=name, qid=qid, error=str(e))
                instance = None
            if instance in WIKIDATA_TYPE_MAP:
                return WIKIDATA_TYPE_MAP[instance]
        return guess_type_from_name(name)
