"""Summary statistics shown alongside a company view.

Highlights describe the rows currently displayed; filter limits describe the
whole batch so the filter ranges do not shrink while filtering.
"""
from typing import Callable, List, Sequence

from ..models.schemas import EnrichedCompany, FilterLimits, Highlight

# Used before anything has been fetched
DEFAULT_LIMITS = FilterLimits(
    max_daily_income=1_000_000,
    max_weekly_income=7_000_000,
    max_daily_customers=1_000,
    max_age=5_000,
)

# Floors keep the ranges usable for tiny batches
MIN_DAILY_INCOME_LIMIT = 1_000
MIN_WEEKLY_INCOME_LIMIT = 10_000
MIN_CUSTOMER_LIMIT = 100
MIN_AGE_LIMIT = 100


def _first_by(
    companies: Sequence[EnrichedCompany],
    key: Callable[[EnrichedCompany], float]
) -> EnrichedCompany:
    # min() returns the first of equal keys, matching a stable sort
    return min(companies, key=key)


def summarize_view(companies: Sequence[EnrichedCompany]) -> List[Highlight]:
    """Build the highlight cards for the displayed rows.

    Args:
        companies: Filtered and sorted rows

    Returns:
        Highest weekly/daily revenue, highest weekly/daily customers and the
        youngest company, or an empty list for an empty view
    """
    if not companies:
        return []

    cards = (
        ("hwr", "High W. Rev", lambda c: -c.weekly_income, "weekly_income"),
        ("hdr", "High D. Rev", lambda c: -c.daily_income, "daily_income"),
        ("hwc", "High W. Cust", lambda c: -c.weekly_customers, "weekly_customers"),
        ("hdc", "High D. Cust", lambda c: -c.daily_customers, "daily_customers"),
        ("young", "Youngest", lambda c: c.days_old, "days_old"),
    )

    highlights = []
    for card_id, title, key, attribute in cards:
        company = _first_by(companies, key)
        highlights.append(Highlight(
            id=card_id,
            title=title,
            value=getattr(company, attribute),
            company_id=company.id,
            company_name=company.name,
        ))
    return highlights


def filter_limits(companies: Sequence[EnrichedCompany]) -> FilterLimits:
    """Upper ends of the filter ranges for a batch."""
    if not companies:
        return DEFAULT_LIMITS

    return FilterLimits(
        max_daily_income=max(max(c.daily_income for c in companies), MIN_DAILY_INCOME_LIMIT),
        max_weekly_income=max(max(c.weekly_income for c in companies), MIN_WEEKLY_INCOME_LIMIT),
        max_daily_customers=max(max(c.daily_customers for c in companies), MIN_CUSTOMER_LIMIT),
        max_age=max(max(c.days_old for c in companies), MIN_AGE_LIMIT),
    )
