"""Shared dependencies for the API routes."""
from typing import Optional

from fastapi import HTTPException

from ..core.errors import (
    CompanyRankerError,
    ConfigurationError,
    FetchSupersededError,
    ProviderError,
)
from ..core.logging import get_logger
from ..services.ranking_service import RankingService

# Shared ranking service instance
_ranking_service: Optional[RankingService] = None


def get_ranking_service() -> RankingService:
    """Get or create the ranking service instance."""
    global _ranking_service
    if _ranking_service is None:
        _ranking_service = RankingService()
    return _ranking_service


def to_http_exception(error: Exception) -> HTTPException:
    """Map a pipeline error to the HTTP error returned to the UI."""
    if isinstance(error, ConfigurationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ProviderError):
        return HTTPException(status_code=502, detail=error.message)
    if isinstance(error, FetchSupersededError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, CompanyRankerError):
        return HTTPException(status_code=400, detail=str(error))

    get_logger().error(f"Unexpected error: {error}", exc_info=error)
    return HTTPException(status_code=500, detail=str(error))
