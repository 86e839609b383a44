"""Pydantic models for companies, view configuration and API responses."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


# === Enums ===

class SortField(str, Enum):
    """Fields a company view can be sorted by."""
    NAME = "name"
    RATING = "rating"
    DAILY_INCOME = "daily_income"
    WEEKLY_INCOME = "weekly_income"
    DAILY_CUSTOMERS = "daily_customers"
    WEEKLY_CUSTOMERS = "weekly_customers"
    DAYS_OLD = "days_old"
    EMPLOYEES = "employees"
    TORN_RANK = "torn_rank"
    PERFORMANCE = "performance"


class SortDirection(str, Enum):
    """Sort direction."""
    ASC = "asc"
    DESC = "desc"


class PerformanceBand(str, Enum):
    """Daily income compared to the weekly average."""
    UP = "up"
    FLAT = "flat"
    DOWN = "down"


# === Company Models ===

class Company(BaseModel):
    """A company as reported by the Torn API.

    Instances are frozen; every derived value lives on a new model.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(alias="ID")
    name: str
    company_type: int
    rating: float = 0.0
    days_old: int = 0
    employees: int = 0
    capacity: int = 0
    daily_income: float = 0.0
    weekly_income: float = 0.0
    daily_customers: int = 0
    weekly_customers: int = 0


class GroupRanks(BaseModel):
    """Ranks among companies sharing the same rounded star rating."""
    model_config = ConfigDict(frozen=True)

    rank_age: int = 0
    rank_revenue: int = 0
    rank_customers: int = 0
    total_in_group: int = 0


class EnrichedCompany(Company):
    """Company with the statistics derived from its fetch batch."""
    torn_rank: int
    performance: float = 0.0
    group_ranks: GroupRanks = Field(default_factory=GroupRanks)
    display_rank: Optional[int] = None

    @computed_field
    @property
    def staffing_percent(self) -> int:
        """Hired employees as a rounded percentage of capacity."""
        if self.capacity <= 0:
            return 0
        return int(self.employees / self.capacity * 100 + 0.5)

    @computed_field
    @property
    def performance_band(self) -> PerformanceBand:
        if self.performance > 5:
            return PerformanceBand.UP
        if self.performance < -5:
            return PerformanceBand.DOWN
        return PerformanceBand.FLAT


class CacheEntry(BaseModel):
    """Cached fetch result for one category."""
    timestamp: int  # epoch milliseconds
    companies: List[Company]


# === View Configuration ===

class FilterCriteria(BaseModel):
    """Inclusive bounds applied to a company batch.

    Minimums default to 0. Maximums default to None, meaning no upper bound.
    """
    name: str = ""
    min_stars: float = Field(default=0, ge=0)
    max_stars: Optional[float] = Field(default=None, ge=0)
    min_daily_income: float = Field(default=0, ge=0)
    max_daily_income: Optional[float] = Field(default=None, ge=0)
    min_weekly_income: float = Field(default=0, ge=0)
    max_weekly_income: Optional[float] = Field(default=None, ge=0)
    min_daily_customers: float = Field(default=0, ge=0)
    max_daily_customers: Optional[float] = Field(default=None, ge=0)
    min_age: float = Field(default=0, ge=0)
    max_age: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_bounds(self) -> "FilterCriteria":
        pairs = (
            ("min_stars", "max_stars"),
            ("min_daily_income", "max_daily_income"),
            ("min_weekly_income", "max_weekly_income"),
            ("min_daily_customers", "max_daily_customers"),
            ("min_age", "max_age"),
        )
        for low_name, high_name in pairs:
            high = getattr(self, high_name)
            if high is not None and high < getattr(self, low_name):
                raise ValueError(f"{high_name} must not be lower than {low_name}")
        return self

    def is_default(self) -> bool:
        """True when no criterion would exclude anything."""
        return self == FilterCriteria()


class SortSpec(BaseModel):
    """Sort field plus direction."""
    field: SortField = SortField.WEEKLY_INCOME
    direction: SortDirection = SortDirection.DESC


class SortRequest(BaseModel):
    """Request body for changing the sort; direction is optional."""
    field: SortField
    direction: Optional[SortDirection] = None


class SessionState(BaseModel):
    """Caller-owned configuration persisted across sessions."""
    category_id: int = 10
    credential: str = ""
    filters: FilterCriteria = Field(default_factory=FilterCriteria)
    sort: SortSpec = Field(default_factory=SortSpec)
    bookmarks: List[int] = Field(default_factory=list)


# === API Request/Response Models ===

class CategoryRequest(BaseModel):
    """Request body for selecting a category."""
    category_id: int = Field(ge=1)


class CredentialRequest(BaseModel):
    """Request body for setting the Torn API key."""
    credential: str


class SessionResponse(BaseModel):
    """Session state with the credential masked."""
    category_id: int
    has_credential: bool
    credential_hint: Optional[str] = None
    filters: FilterCriteria
    sort: SortSpec
    bookmarks: List[int]


class Highlight(BaseModel):
    """Headline statistic over the displayed rows."""
    id: str
    title: str
    value: float
    company_id: int
    company_name: str


class FilterLimits(BaseModel):
    """Upper ends of the filter sliders for the current batch."""
    max_daily_income: float
    max_weekly_income: float
    max_daily_customers: float
    max_age: float


class CompanyView(BaseModel):
    """Filtered, sorted and bookmarked view over the current batch."""
    category_id: Optional[int] = None
    fetched_at: Optional[datetime] = None
    cached: bool = False
    total_companies: int = 0
    companies: List[EnrichedCompany] = Field(default_factory=list)
    bookmarks: List[EnrichedCompany] = Field(default_factory=list)
    filters: FilterCriteria = Field(default_factory=FilterCriteria)
    sort: SortSpec = Field(default_factory=SortSpec)
    highlights: List[Highlight] = Field(default_factory=list)
    limits: Optional[FilterLimits] = None
    message: Optional[str] = None


class BookmarkToggleResponse(BaseModel):
    """Result of toggling a bookmark."""
    company_id: int
    bookmarked: bool
    bookmarks: List[int]


class PurgeResponse(BaseModel):
    """Result of purging a cache slot."""
    category_id: int
    purged: bool


class StatsResponse(BaseModel):
    """Cache and batch statistics."""
    category_id: Optional[int] = None
    total_companies: int = 0
    cache_age_seconds: Optional[float] = None
    last_reset: datetime
    cached_categories: List[int] = Field(default_factory=list)
    bookmark_count: int = 0


# === Error Models ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    status_code: int = 500
