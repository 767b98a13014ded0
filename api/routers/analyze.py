"""Page analysis endpoint."""

from typing import Any

import structlog
from fastapi import APIRouter

from api.deps import ProcessorDep
from api.exceptions import InputError
from api.schemas.requests import AnalyzeRequest
from api.schemas.responses import ErrorResponse
from ontologizer.pipeline.processor import EMPTY_INPUT_MESSAGE

router = APIRouter(tags=["Analyze"])
logger = structlog.get_logger(__name__)


@router.post(
    "/analyze",
    summary="Analyze a page",
    responses={
        422: {"model": ErrorResponse, "description": "Nothing to analyze or malformed URL"},
        502: {"model": ErrorResponse, "description": "Page could not be fetched"},
    },
)
async def analyze(body: AnalyzeRequest, processor: ProcessorDep) -> dict[str, Any]:
    """
    Run an analysis for a URL or pasted content.

    - Pasted content wins over the URL when both are given
    - `clear_cache` drops the URL's cached result before analyzing
    - `fanout_only` skips entity processing entirely
    """
    url = body.url.strip()
    content = body.paste_content.strip()
    if not url and not content:
        raise InputError(EMPTY_INPUT_MESSAGE)

    if url and body.clear_cache:
        await processor.clear_url_cache(url)

    logger.info(
        "analyze_requested",
        source="paste" if content else "url",
        fanout_only=body.fanout_only,
        run_fanout=body.run_fanout_analysis,
        strategy=body.main_topic_strategy.value,
    )

    if content:
        if body.fanout_only:
            return await processor.process_fanout_only(content)
        return await processor.process_pasted_content(
            content,
            strategy=body.main_topic_strategy,
            run_fanout=body.run_fanout_analysis,
        )

    if body.fanout_only:
        return await processor.process_fanout_only_url(url)
    return await processor.process_url(
        url,
        strategy=body.main_topic_strategy,
        run_fanout=body.run_fanout_analysis,
    )
