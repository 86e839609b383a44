"""Derived statistics for a fetched company batch.

Three classes of metrics are attached to every company:

- ``torn_rank``: global position ordered by star rating, then weekly income.
- ``performance``: daily income versus the trailing weekly average, in percent.
- ``group_ranks``: age, revenue and customer ranks among the companies that
  share the same rounded star rating.

Everything here is a pure function of the batch. Companies are tracked by
their position in the batch so that duplicate ids cannot collide.
"""
import math
from typing import Callable, Dict, List, Sequence

from ..models.schemas import Company, EnrichedCompany, GroupRanks

COMPANY_FIELDS = set(Company.model_fields)


def rating_group(rating: float) -> int:
    """Round a star rating to its display group (half rounds up)."""
    return math.floor(rating + 0.5)


def calculate_performance(company: Company) -> float:
    """Percent difference between daily income and the weekly daily average.

    Returns 0.0 when there is no weekly income.
    """
    weekly_average = company.weekly_income / 7
    if weekly_average > 0:
        return (company.daily_income - weekly_average) / weekly_average * 100
    return 0.0


def calculate_global_ranks(companies: Sequence[Company]) -> List[int]:
    """Rank every company by rating desc, then weekly income desc.

    Returns:
        Ranks aligned with the input order (1-based, a permutation of 1..N)
    """
    order = sorted(
        range(len(companies)),
        key=lambda i: (-companies[i].rating, -companies[i].weekly_income),
    )
    ranks = [0] * len(companies)
    for position, index in enumerate(order, start=1):
        ranks[index] = position
    return ranks


def _rank_within(
    indices: List[int],
    key: Callable[[int], float],
    ranks: Dict[int, int]
) -> None:
    for position, index in enumerate(sorted(indices, key=key), start=1):
        ranks[index] = position


def calculate_group_ranks(companies: Sequence[Company]) -> List[GroupRanks]:
    """Rank companies inside their rounded-rating group.

    Age ranks ascend (youngest first); revenue and customer ranks descend.

    Returns:
        GroupRanks aligned with the input order
    """
    groups: Dict[int, List[int]] = {}
    for index, company in enumerate(companies):
        groups.setdefault(rating_group(company.rating), []).append(index)

    age_ranks: Dict[int, int] = {}
    revenue_ranks: Dict[int, int] = {}
    customer_ranks: Dict[int, int] = {}
    group_sizes: Dict[int, int] = {}

    for indices in groups.values():
        _rank_within(indices, lambda i: companies[i].days_old, age_ranks)
        _rank_within(indices, lambda i: -companies[i].weekly_income, revenue_ranks)
        _rank_within(indices, lambda i: -companies[i].weekly_customers, customer_ranks)
        for index in indices:
            group_sizes[index] = len(indices)

    return [
        GroupRanks(
            rank_age=age_ranks.get(index, 0),
            rank_revenue=revenue_ranks.get(index, 0),
            rank_customers=customer_ranks.get(index, 0),
            total_in_group=group_sizes.get(index, 0),
        )
        for index in range(len(companies))
    ]


def enrich_companies(companies: Sequence[Company]) -> List[EnrichedCompany]:
    """Attach global rank, performance and group ranks to a batch.

    Args:
        companies: The full batch from one fetch, before any filtering

    Returns:
        New EnrichedCompany instances in the same order as the input
    """
    if not companies:
        return []

    global_ranks = calculate_global_ranks(companies)
    group_ranks = calculate_group_ranks(companies)

    return [
        EnrichedCompany(
            **company.model_dump(include=COMPANY_FIELDS),
            torn_rank=global_ranks[index],
            performance=calculate_performance(company),
            group_ranks=group_ranks[index],
        )
        for index, company in enumerate(companies)
    ]
