"""Sort engine producing the display order and display ranks."""
import locale
import unicodedata
from functools import cmp_to_key
from typing import Any, Dict, List, Optional, Sequence

from ..models.schemas import EnrichedCompany, SortDirection, SortField, SortSpec


def _fold(value: str) -> str:
    """Case-fold and strip accents so "Émile" collates next to "emile"."""
    decomposed = unicodedata.normalize("NFKD", value.replace("\x00", ""))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()


def _text_key(value: str) -> tuple:
    folded = _fold(value)
    return (locale.strxfrm(folded), folded, value.replace("\x00", ""))


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def compare_values(left: Any, right: Any) -> int:
    """Three-way comparison used by the sort engine.

    Two strings compare accent- and case-insensitively through the active
    collation locale; anything else compares numerically with missing or
    non-numeric values counting as 0.
    """
    if isinstance(left, str) and isinstance(right, str):
        left_key, right_key = _text_key(left), _text_key(right)
    else:
        left_key, right_key = _number(left), _number(right)

    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def sort_companies(
    companies: Sequence[EnrichedCompany],
    spec: SortSpec
) -> List[EnrichedCompany]:
    """Order companies and assign a fresh 1-based display rank.

    Ties keep their input order, so sorting an already sorted list with the
    same spec returns the same order and ranks.

    Args:
        companies: Filtered batch
        spec: Field and direction

    Returns:
        New list of copies carrying ``display_rank``
    """
    field = spec.field.value
    sign = 1 if spec.direction == SortDirection.ASC else -1

    def comparator(a: EnrichedCompany, b: EnrichedCompany) -> int:
        return sign * compare_values(getattr(a, field, None), getattr(b, field, None))

    ordered = sorted(companies, key=cmp_to_key(comparator))
    return [
        company.model_copy(update={"display_rank": rank})
        for rank, company in enumerate(ordered, start=1)
    ]


def toggle_sort(
    current: SortSpec,
    field: SortField,
    direction: Optional[SortDirection] = None
) -> SortSpec:
    """Compute the next sort spec when a field is selected.

    An explicit direction always wins. Re-selecting the current field flips
    the direction; a new field starts descending.
    """
    if direction is not None:
        return SortSpec(field=field, direction=direction)
    if field == current.field:
        flipped = SortDirection.ASC if current.direction == SortDirection.DESC else SortDirection.DESC
        return SortSpec(field=field, direction=flipped)
    return SortSpec(field=field, direction=SortDirection.DESC)


def rank_lookup(rows: Sequence[EnrichedCompany]) -> Dict[int, int]:
    """Map company id to display rank for sorted rows."""
    return {
        row.id: row.display_rank
        for row in rows
        if row.display_rank is not None
    }
