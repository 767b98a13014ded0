"""Pydantic schemas package."""

from api.schemas.requests import AnalyzeRequest
from api.schemas.responses import (
    CachedResultSummary,
    CacheListResponse,
    ClearedResponse,
    DeletedResponse,
    EntityCacheStats,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "AnalyzeRequest",
    "CacheListResponse",
    "CachedResultSummary",
    "ClearedResponse",
    "DeletedResponse",
    "EntityCacheStats",
    "ErrorDetail",
    "ErrorResponse",
]
