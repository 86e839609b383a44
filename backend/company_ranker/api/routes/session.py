"""Session routes: selected category and API key."""
from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import CategoryRequest, CompanyView, CredentialRequest, SessionResponse
from ...services.ranking_service import RankingService
from ..dependencies import get_ranking_service, to_http_exception

router = APIRouter()


@router.get("", response_model=SessionResponse)
async def get_session(service: RankingService = Depends(get_ranking_service)) -> SessionResponse:
    """Get the session state with the API key masked."""
    return service.get_session()


@router.put("/category", response_model=CompanyView)
async def select_category(
    body: CategoryRequest,
    service: RankingService = Depends(get_ranking_service),
) -> CompanyView:
    """Select a category; it is loaded when an API key is saved."""
    try:
        return await service.select_category(body.category_id)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)


@router.put("/credential", response_model=CompanyView)
async def set_credential(
    body: CredentialRequest,
    service: RankingService = Depends(get_ranking_service),
) -> CompanyView:
    """Save the API key and load the selected category with it."""
    try:
        return await service.set_credential(body.credential)
    except HTTPException:
        raise
    except Exception as e:
        raise to_http_exception(e)
