"""Filter pipeline over an enriched company batch."""
from typing import List, Optional, Sequence

from ..models.schemas import EnrichedCompany, FilterCriteria

# (company attribute, minimum criterion, maximum criterion)
RANGE_FILTERS = (
    ("rating", "min_stars", "max_stars"),
    ("daily_income", "min_daily_income", "max_daily_income"),
    ("weekly_income", "min_weekly_income", "max_weekly_income"),
    ("daily_customers", "min_daily_customers", "max_daily_customers"),
    ("days_old", "min_age", "max_age"),
)


def _within(value: float, minimum: float, maximum: Optional[float]) -> bool:
    # A zero minimum never excludes, even if the provider sends negatives
    if minimum > 0 and value < minimum:
        return False
    if maximum is not None and value > maximum:
        return False
    return True


def matches_criteria(company: EnrichedCompany, criteria: FilterCriteria) -> bool:
    """Check a single company against every criterion."""
    for attribute, min_name, max_name in RANGE_FILTERS:
        if not _within(
            getattr(company, attribute),
            getattr(criteria, min_name),
            getattr(criteria, max_name),
        ):
            return False

    if criteria.name:
        return criteria.name.lower() in company.name.lower()
    return True


def apply_filters(
    companies: Sequence[EnrichedCompany],
    criteria: FilterCriteria
) -> List[EnrichedCompany]:
    """Keep the companies matching all criteria, preserving input order.

    Args:
        companies: Enriched batch
        criteria: Inclusive bounds and name substring

    Returns:
        Subsequence of ``companies``
    """
    if criteria.is_default():
        return list(companies)
    return [company for company in companies if matches_criteria(company, criteria)]
