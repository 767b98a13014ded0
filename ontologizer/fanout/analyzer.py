"""Query fan-out analysis over the configured fan-out model."""

import re
from dataclasses import dataclass, field
from typing import Any

import structlog

from ontologizer.fanout.chunker import extract_semantic_chunks
from ontologizer.llm.capability import LLMCapability
from ontologizer.llm.prompts import build_fanout_prompt

logger = structlog.get_logger(__name__)

QUERY_COVERAGE_RE = re.compile(r"^(.+?)\s*-\s*Coverage:\s*(.+)$")
BULLET_RE = re.compile(r"^[•-]\s*")
UNKNOWN_COVERAGE = "Unknown"


@dataclass
class FanoutReport:
    """Sections of a fan-out reply."""

    primary_entity: str = ""
    queries: list[dict[str, str]] = field(default_factory=list)
    followups: list[str] = field(default_factory=list)
    coverage_score: str = ""
    recommendations: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary_entity": self.primary_entity,
            "queries": self.queries,
            "followups": self.followups,
            "coverage_score": self.coverage_score,
            "recommendations": self.recommendations,
        }


def parse_fanout_response(text: str) -> FanoutReport:
    """
    Parse the sectioned fan-out reply.

    Lines are read in order; a section header switches the current
    section and bullets are attributed to it. Query bullets without a
    ``- Coverage:`` suffix get "Unknown" coverage. Recommendations may
    continue over several lines.
    """
    report = FanoutReport()
    section = ""

    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue

        if line.startswith("PRIMARY ENTITY:"):
            report.primary_entity = line.removeprefix("PRIMARY ENTITY:").strip()
            section = "primary"
        elif "FAN-OUT QUERIES:" in line:
            section = "queries"
        elif "FOLLOW-UP POTENTIAL:" in line:
            section = "followups"
        elif line.startswith("COVERAGE SCORE:"):
            report.coverage_score = line.removeprefix("COVERAGE SCORE:").strip()
            section = "coverage"
        elif line.startswith("RECOMMENDATIONS:"):
            report.recommendations = line.removeprefix("RECOMMENDATIONS:").strip()
            section = "recommendations"
        elif line.startswith(("•", "-")):
            item = BULLET_RE.sub("", line).strip()
            if section == "queries":
                match = QUERY_COVERAGE_RE.match(item)
                if match:
                    report.queries.append(
                        {"query": match.group(1).strip(), "coverage": match.group(2).strip()}
                    )
                else:
                    report.queries.append({"query": item, "coverage": UNKNOWN_COVERAGE})
            elif section == "followups":
                report.followups.append(item)
        elif section == "recommendations":
            if report.recommendations:
                report.recommendations += " " + line
            else:
                report.recommendations = line

    return report


class FanoutAnalyzer:
    def __init__(self, llm: LLMCapability):
        self.llm = llm

    async def analyze(self, html: str, url: str = "") -> dict[str, Any]:
        """
        Predict the sub-queries an AI search engine would derive from a page.

        Returns the parsed report with the raw analysis and chunks, or an
        ``{error, chunks_extracted}`` dict when the model call fails. There
        is no heuristic fallback.
        """
        if not self.llm.fanout_available:
            return {"error": "Gemini API key not configured"}

        chunks = [chunk.to_dict() for chunk in extract_semantic_chunks(html)]
        response = await self.llm.analyze_fanout(build_fanout_prompt(chunks, url))

        if not response.success or not response.content:
            message = response.error.message if response.error else "Failed to generate fan-out analysis"
            logger.warning("fanout_analysis_failed", error=message, chunks=len(chunks))
            return {"error": message, "chunks_extracted": len(chunks)}

        report = parse_fanout_response(response.content)
        logger.info(
            "fanout_analysis_complete",
            chunks=len(chunks),
            queries=len(report.queries),
            primary_entity=report.primary_entity,
        )
        return {
            **report.to_dict(),
            "analysis": response.content,
            "chunks_extracted": len(chunks),
            "chunks": chunks,
        }
