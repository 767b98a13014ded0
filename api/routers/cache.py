"""Cache administration endpoints."""

from fastapi import APIRouter

from api.deps import ProcessorDep
from api.exceptions import NotFoundError
from api.schemas.responses import (
    CachedResultSummary,
    CacheListResponse,
    ClearedResponse,
    DeletedResponse,
    EntityCacheStats,
)

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.get("", response_model=CacheListResponse, summary="List cached page results")
async def list_cached_results(processor: ProcessorDep) -> CacheListResponse:
    entries = await processor.list_cached_results()
    return CacheListResponse(
        entries=[CachedResultSummary(**entry) for entry in entries],
        total=len(entries),
    )


@router.delete("", response_model=ClearedResponse, summary="Clear every cache")
async def clear_all_caches(processor: ProcessorDep) -> ClearedResponse:
    """Remove all cached page results and entities."""
    return ClearedResponse(cleared=await processor.clear_all_caches())


@router.get(
    "/entities/stats",
    response_model=EntityCacheStats,
    summary="Entity cache statistics",
)
async def entity_cache_stats(processor: ProcessorDep) -> EntityCacheStats:
    return EntityCacheStats(**await processor.entity_cache_stats())


@router.delete("/entities", response_model=ClearedResponse, summary="Clear the entity cache")
async def clear_entity_cache(processor: ProcessorDep) -> ClearedResponse:
    return ClearedResponse(cleared=await processor.clear_entity_cache())


@router.delete(
    "/{cache_key}",
    response_model=DeletedResponse,
    summary="Delete one cached page result",
)
async def delete_cached_result(cache_key: str, processor: ProcessorDep) -> DeletedResponse:
    """Delete a cached result by the key shown in the listing."""
    if not await processor.delete_cached_result(cache_key):
        raise NotFoundError("Cached result", cache_key)
    return DeletedResponse(deleted=True, cache_key=cache_key)
