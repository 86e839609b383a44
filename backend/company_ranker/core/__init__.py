"""Core business logic modules."""
from .rate_limiter import RateLimiter
from .ranking import enrich_companies
from .filtering import apply_filters
from .sorting import sort_companies, toggle_sort
from .bookmarks import project_bookmarks
from .cache_store import CacheStore
from .errors import (
    CompanyRankerError,
    ConfigurationError,
    EmptyResultError,
    FetchSupersededError,
    ProviderError,
)

__all__ = [
    "RateLimiter",
    "enrich_companies",
    "apply_filters",
    "sort_companies",
    "toggle_sort",
    "project_bookmarks",
    "CacheStore",
    "CompanyRankerError",
    "ConfigurationError",
    "EmptyResultError",
    "FetchSupersededError",
    "ProviderError",
]
