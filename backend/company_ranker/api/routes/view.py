"""View configuration routes: filters and sort."""
from fastapi import APIRouter, Depends

from ...models.schemas import CompanyView, FilterCriteria, SortRequest
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service

router = APIRouter()


@router.get("", response_model=CompanyView)
async def get_view(service: RankingService = Depends(get_ranking_service)) -> CompanyView:
    """Get the filtered and sorted view of the current batch."""
    return service.get_view()


@router.put("/filters", response_model=CompanyView)
async def apply_filters(
    criteria: FilterCriteria,
    service: RankingService = Depends(get_ranking_service),
) -> CompanyView:
    """Replace the filter criteria."""
    return await service.apply_filters(criteria)


@router.delete("/filters", response_model=CompanyView)
async def reset_filters(service: RankingService = Depends(get_ranking_service)) -> CompanyView:
    """Restore the default filter criteria."""
    return await service.reset_filters()


@router.put("/sort", response_model=CompanyView)
async def set_sort(
    sort: SortRequest,
    service: RankingService = Depends(get_ranking_service),
) -> CompanyView:
    """Select the sort field.

    Without a direction, the current field flips and a new field sorts descending.
    """
    return await service.set_sort(sort.field, sort.direction)
