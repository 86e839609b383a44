"""Error taxonomy for the company loading pipeline.

Every error is reported to the immediate caller of the pipeline entry point.
Nothing here is retried internally; retry and backoff belong to the caller.
Cache corruption has no exception type: the cache store logs it and
reports a miss.
"""
from typing import Optional


class CompanyRankerError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(CompanyRankerError):
    """Raised when the credential is missing, before any network call."""


class ProviderError(CompanyRankerError):
    """Raised on transport failure or an error payload from the Torn API.

    The provider message is kept verbatim in ``message``.
    """

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class EmptyResultError(CompanyRankerError):
    """Raised when the provider answered successfully with zero companies.

    Informational: callers render an empty state rather than an error.
    """

    def __init__(self, category_id: int):
        super().__init__(f"No companies found for category {category_id}.")
        self.category_id = category_id


class FetchSupersededError(CompanyRankerError):
    """Raised when a newer load started while this one was in flight."""

    def __init__(self, category_id: int, sequence: int):
        super().__init__(
            f"Load #{sequence} for category {category_id} was superseded by a newer request"
        )
        self.category_id = category_id
        self.sequence = sequence
