"""Company loading routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query, Request

from ...core.errors import EmptyResultError
from ...core.logging import get_logger
from ...models.schemas import CompanyView
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service, to_http_exception

router = APIRouter()


@router.get("/{category_id}", response_model=CompanyView)
async def load_companies(
    request: Request,
    category_id: int = Path(..., ge=1, description="Torn company type"),
    force_refresh: bool = Query(False, description="Ignore the cache and fetch fresh data"),
    x_api_key: Optional[str] = Header(None, description="Torn API key, defaults to the saved key"),
    service: RankingService = Depends(get_ranking_service),
) -> CompanyView:
    """Load a category and return the current view over it.

    Served from the cache when fetched since the last daily reset.
    """
    logger = get_logger()
    logger.info(f"Load request for category {category_id} from {request.client.host if request.client else 'unknown'}")

    try:
        await service.load_category(
            category_id,
            credential=x_api_key,
            force_refresh=force_refresh,
        )
    except EmptyResultError as e:
        return service.get_view(message=str(e))
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)

    return service.get_view()
