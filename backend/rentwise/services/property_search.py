"""
Property discovery: free-text and rent-range filtering over a property list.

The whole result set is recomputed on every call; there is no pagination.
"""
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from rentwise.models import Property, Rating, Unit

DEFAULT_MIN_RENT = 0.0
DEFAULT_MAX_RENT = 10000.0


class SortKey(str, Enum):
    NAME = "name"
    RENT_ASC = "rent_asc"
    RENT_DESC = "rent_desc"
    RATING = "rating"


def average_rating(ratings: Sequence[Rating]) -> float:
    if not ratings:
        return 0.0
    return sum(r.rating for r in ratings) / len(ratings)


def available_units(prop: Property) -> List[Unit]:
    return [u for u in prop.units if u.is_available]


def rent_range(prop: Property) -> Tuple[float, float]:
    """(min, max) rent over available units; (0, 0) when none are available."""
    rents = [u.rent_amount for u in available_units(prop)]
    if not rents:
        return 0.0, 0.0
    return min(rents), max(rents)


def _matches_text(prop: Property, query: Optional[str]) -> bool:
    if not query:
        return True
    needle = query.lower()
    return needle in prop.name.lower() or needle in prop.address.lower()


def search_properties(
    properties: Sequence[Property],
    query: Optional[str] = None,
    min_rent: Optional[float] = None,
    max_rent: Optional[float] = None,
    sort: SortKey = SortKey.NAME,
) -> List[Property]:
    """
    Filter and sort properties for discovery.

    A property is kept when its name or address contains `query`
    (case-insensitive), it has at least one available unit, and its
    available-unit rent range intersects [min_rent, max_rent].
    """
    low = DEFAULT_MIN_RENT if min_rent is None else min_rent
    high = DEFAULT_MAX_RENT if max_rent is None else max_rent

    results = []
    for prop in properties:
        if not available_units(prop):
            continue
        if not _matches_text(prop, query):
            continue
        prop_min, prop_max = rent_range(prop)
        if prop_min <= high and prop_max >= low:
            results.append(prop)

    if sort == SortKey.RENT_ASC:
        results.sort(key=lambda p: rent_range(p)[0])
    elif sort == SortKey.RENT_DESC:
        results.sort(key=lambda p: rent_range(p)[0], reverse=True)
    elif sort == SortKey.RATING:
        results.sort(key=lambda p: average_rating(p.ratings), reverse=True)
    else:
        results.sort(key=lambda p: p.name.lower())

    return results
