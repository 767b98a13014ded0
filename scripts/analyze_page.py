"""Run one Ontologizer analysis from the command line and print the JSON result.

Usage:
    python scripts/analyze_page.py https://example.com/page
    python scripts/analyze_page.py --file page.md --fanout
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, ".")

import structlog  # noqa: E402

from api.config import get_settings  # noqa: E402
from api.exceptions import OntologizerError  # noqa: E402
from api.logging import setup_logging  # noqa: E402
from ontologizer.cache.store import MemoryStore  # noqa: E402
from ontologizer.candidates.heuristics import MainTopicStrategy  # noqa: E402
from ontologizer.pipeline.processor import OntologizerProcessor  # noqa: E402

# Logs go to stderr so stdout stays pure JSON
setup_logging(stream=sys.stderr)

logger = structlog.get_logger(__name__)


async def main(
    url: str | None,
    content: str | None,
    strategy: MainTopicStrategy,
    fanout: bool,
    fanout_only: bool,
) -> int:
    settings = get_settings()
    # One-off runs never share results, so skip the configured backend
    processor = OntologizerProcessor.from_settings(settings, store=MemoryStore())

    try:
        if content is not None:
            if fanout_only:
                result = await processor.process_fanout_only(content)
            else:
                result = await processor.process_pasted_content(content, strategy, fanout)
        elif fanout_only:
            result = await processor.process_fanout_only_url(url or "")
        else:
            result = await processor.process_url(url or "", strategy, fanout)
    except OntologizerError as e:
        logger.error("analysis_failed", code=e.code, message=e.message, **e.details)
        return 1

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Analyze a page with the Ontologizer pipeline")
    parser.add_argument("url", nargs="?", help="Page URL to fetch and analyze")
    parser.add_argument("--file", type=Path, help="Analyze a local HTML, markdown or text file")
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in MainTopicStrategy],
        default=MainTopicStrategy.STRICT.value,
        help="Main-topic heuristic when no LLM is configured",
    )
    parser.add_argument("--fanout", action="store_true", help="Also run fan-out analysis")
    parser.add_argument("--fanout-only", action="store_true", help="Run only fan-out analysis")
    args = parser.parse_args()

    if not args.url and not args.file:
        parser.error("provide a URL or --file")

    pasted = args.file.read_text(encoding="utf-8") if args.file else None
    sys.exit(
        asyncio.run(
            main(
                url=args.url,
                content=pasted,
                strategy=MainTopicStrategy(args.strategy),
                fanout=args.fanout,
                fanout_only=args.fanout_only,
            )
        )
    )
