"""
Translation of list query parameters into a MongoDB filter and sort.
"""

import math
from typing import Optional

from utilities.logger import get_logger

from .models import BookQuery, BookQueryParams, SortBy, SortOrder

logger = get_logger(__name__)


def parse_min_rating(value: Optional[str]) -> Optional[float]:
    """
    Parse a minimum rating parameter.

    Returns None when the value is absent or is not a finite number.
    """
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def build_book_query(params: BookQueryParams) -> BookQuery:
    """
    Build the store query for a book listing.

    Args:
        params: Raw listing parameters

    Returns:
        BookQuery with an equality/range filter and an optional sort
    """
    filter_query = {}

    if params.author:
        filter_query["author"] = params.author

    if params.available:
        filter_query["available"] = params.available == "true"

    if params.genre:
        # Equality against an array field matches any element
        filter_query["genres"] = params.genre

    if params.min_rating:
        min_rating = parse_min_rating(params.min_rating)
        if min_rating is None:
            logger.warning("Ignoring unparseable minRating", min_rating=params.min_rating)
        else:
            filter_query["rating"] = {"$gte": min_rating}

    sort_query = []
    if params.sort_by in (SortBy.RATING.value, SortBy.YEAR.value):
        sort_direction = -1 if params.order == SortOrder.DESC.value else 1
        sort_query.append((params.sort_by, sort_direction))

    return BookQuery(filter=filter_query, sort=sort_query)
