"""V1 API router - aggregates all versioned endpoints."""

from fastapi import APIRouter

from api.routers import analyze, cache

router = APIRouter()

router.include_router(analyze.router)
router.include_router(cache.router)


@router.get("/")
async def v1_root() -> dict[str, str]:
    """V1 API root endpoint."""
    return {
        "version": "1",
        "status": "active",
    }
