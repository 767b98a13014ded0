"""Standard API response schemas."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Error detail in response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(None, description="Field that caused the error")
    details: dict[str, Any] | None = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response envelope."""

    error: ErrorDetail


class CachedResultSummary(BaseModel):
    """One cached page analysis."""

    url: str
    primary_topic: str
    main_topic_confidence: int
    topical_salience: int
    timestamp: int | str
    cache_key: str


class CacheListResponse(BaseModel):
    """Every live cached page analysis."""

    entries: list[CachedResultSummary]
    total: int


class EntityCacheStats(BaseModel):
    """Size of the entity cache."""

    cached_entities: int = Field(..., description="Number of cached entities")
    cache_size_bytes: int = Field(..., description="Serialized size of all cached entities")


class ClearedResponse(BaseModel):
    """Result of a cache clear."""

    cleared: int = Field(..., description="Number of entries removed")


class DeletedResponse(BaseModel):
    """Result of a single cache delete."""

    deleted: bool
    cache_key: str
