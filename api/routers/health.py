"""Health check endpoints."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.config import get_settings

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time = time.time()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Health status")
    timestamp: str = Field(..., description="ISO 8601 timestamp")
    version: str = Field(..., description="API version")
    uptime_seconds: int = Field(..., description="Server uptime in seconds")
    llm_enabled: bool = Field(..., description="Whether LLM entity extraction is configured")
    fanout_enabled: bool = Field(..., description="Whether fan-out analysis is configured")


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic liveness check.

    Returns healthy if the API is running. Does not call the cache
    backend or any external source.
    """
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC).isoformat(),
        version="0.1.0",
        uptime_seconds=int(time.time() - _server_start_time),
        llm_enabled=settings.llm_enabled,
        fanout_enabled=settings.fanout_enabled,
    )
