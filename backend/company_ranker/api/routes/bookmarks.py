"""Bookmark routes."""
from typing import List

from fastapi import APIRouter, Depends, Path

from ...models.schemas import BookmarkToggleResponse, EnrichedCompany
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service

router = APIRouter()


@router.get("", response_model=List[EnrichedCompany])
async def get_bookmarks(service: RankingService = Depends(get_ranking_service)) -> List[EnrichedCompany]:
    """Bookmarked companies of the current batch, in display order."""
    return service.get_view().bookmarks


@router.post("/{company_id}", response_model=BookmarkToggleResponse)
async def toggle_bookmark(
    company_id: int = Path(..., ge=1),
    service: RankingService = Depends(get_ranking_service),
) -> BookmarkToggleResponse:
    """Add or remove a bookmark."""
    bookmarked = await service.toggle_bookmark(company_id)
    return BookmarkToggleResponse(
        company_id=company_id,
        bookmarked=bookmarked,
        bookmarks=list(service.state.bookmarks),
    )
