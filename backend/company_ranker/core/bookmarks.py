"""Bookmark projection consistent with the current display ranks."""
import sys
from typing import Iterable, List, Mapping, Sequence

from ..models.schemas import EnrichedCompany

# Bookmarked companies hidden by the filters sort after every ranked one
UNRANKED = sys.maxsize


def project_bookmarks(
    companies: Sequence[EnrichedCompany],
    bookmarked_ids: Iterable[int],
    ranks: Mapping[int, int]
) -> List[EnrichedCompany]:
    """Select bookmarked companies ordered by their current display rank.

    Args:
        companies: Full batch before filtering
        bookmarked_ids: Ids the caller has marked
        ranks: Company id to display rank for the current filtered view

    Returns:
        Bookmarked companies ordered by (display rank, id). Rows that are
        filtered out carry ``display_rank=None`` and come last.
    """
    marked = set(bookmarked_ids)
    selected = [company for company in companies if company.id in marked]
    selected.sort(key=lambda company: (ranks.get(company.id, UNRANKED), company.id))
    return [
        company.model_copy(update={"display_rank": ranks.get(company.id)})
        for company in selected
    ]
