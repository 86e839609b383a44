"""Statistics API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...config import get_settings
from ...models.schemas import StatsResponse
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service

router = APIRouter()


@router.get("", response_model=StatsResponse)
async def get_stats(service: RankingService = Depends(get_ranking_service)) -> StatsResponse:
    """Get cache and batch statistics."""
    try:
        return service.get_stats()
    except OSError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Company Ranker API",
        "version": get_settings().app_version
    }
