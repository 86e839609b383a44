"""Torn API service.

Async adapter fetching the companies of one category from the Torn API and
turning the raw payload into Company records.
"""
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..config import get_settings
from ..core.errors import ProviderError
from ..core.logging import get_logger
from ..core.rate_limiter import RateLimiter
from ..models.schemas import Company
from ..models.torn_api import TornCompaniesResponse, TornRawCompany


def build_company(
    company_id: str,
    raw: TornRawCompany,
    category_id: int
) -> Company:
    """Build a Company from a raw entry, defaulting absent numbers to 0.

    Args:
        company_id: Key of the entry in the payload
        raw: Raw company fields
        category_id: Category requested, used when the entry has no type

    Returns:
        Company record
    """
    return Company(
        id=int(company_id),
        name=raw.name or "",
        company_type=raw.company_type or category_id,
        rating=raw.rating or 0,
        days_old=raw.days_old or 0,
        employees=raw.employees_hired or 0,
        capacity=raw.employees_capacity or 0,
        daily_income=raw.daily_income or 0,
        weekly_income=raw.weekly_income or 0,
        daily_customers=raw.daily_customers or 0,
        weekly_customers=raw.weekly_customers or 0,
    )


def parse_companies_payload(payload: Dict[str, Any], category_id: int) -> List[Company]:
    """Convert a ``selections=companies`` payload into Company records.

    Raises:
        ProviderError: If the payload carries an error or is malformed
    """
    try:
        response = TornCompaniesResponse.model_validate(payload)
    except ValidationError as e:
        raise ProviderError(f"Malformed response from Torn API: {e.error_count()} invalid fields") from e

    if response.error is not None:
        raise ProviderError(response.error.error, code=response.error.code)

    if not response.company:
        return []

    try:
        return [
            build_company(company_id, raw, category_id)
            for company_id, raw in response.company.items()
        ]
    except (ValueError, ValidationError) as e:
        raise ProviderError(f"Malformed company entry from Torn API: {e}") from e


class TornApiService:
    """Async service for Torn API interactions."""

    def __init__(
        self,
        rate_limiter: Optional[RateLimiter] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the service.

        Args:
            rate_limiter: Rate limiter instance (creates default if None)
            http_client: HTTP client (creates default if None)
        """
        settings = get_settings()
        self.base_url = settings.torn_api_base_url.rstrip("/")
        self.timeout = settings.request_timeout

        self.rate_limiter = rate_limiter or RateLimiter(
            max_requests=settings.rate_limit_requests,
            time_window=settings.rate_limit_window
        )
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_companies(self, category_id: int, credential: str) -> List[Company]:
        """Fetch every company of a category.

        Args:
            category_id: Torn company type
            credential: Public Torn API key

        Returns:
            Company records, empty if the category has none

        Raises:
            ProviderError: On transport failure, non-200 status or error payload
        """
        logger = get_logger()
        client = await self._get_client()
        url = f"{self.base_url}/company/{category_id}"

        await self.rate_limiter.wait_if_needed(credential)
        logger.info(f"Fetching companies for category {category_id}")

        try:
            response = await client.get(
                url,
                params={"selections": "companies", "key": credential},
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching category {category_id}: {e}")
            raise ProviderError("Timed out contacting the Torn API") from e
        except httpx.HTTPError as e:
            logger.error(f"Transport error fetching category {category_id}: {type(e).__name__}: {e}")
            raise ProviderError("Failed to communicate with the Torn API") from e

        if response.status_code != 200:
            logger.warning(f"HTTP {response.status_code} fetching category {category_id}")
            raise ProviderError(f"Torn API returned HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError("Torn API returned a non-JSON response") from e

        if not isinstance(payload, dict):
            raise ProviderError("Torn API returned an unexpected response")

        companies = parse_companies_payload(payload, category_id)
        logger.info(f"Torn API returned {len(companies)} companies for category {category_id}")
        return companies
