"""Cache management routes."""
from fastapi import APIRouter, Depends, Path

from ...models.schemas import PurgeResponse
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service

router = APIRouter()


@router.delete("/{category_id}", response_model=PurgeResponse)
async def purge_cache(
    category_id: int = Path(..., ge=1),
    service: RankingService = Depends(get_ranking_service),
) -> PurgeResponse:
    """Drop the cached companies of a category."""
    return PurgeResponse(
        category_id=category_id,
        purged=service.purge_cache(category_id),
    )
