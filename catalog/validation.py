"""
Validation of create and update payloads.

Rules are checked in a fixed order and the first violation is raised.
A payload that passes is reduced to the known book fields.
"""

from numbers import Real
from typing import Any, Dict, Mapping

from .errors import (
    ImmutableFieldError, InvalidGenresError, InvalidRatingError,
    InvalidYearError, MissingRequiredFieldError
)
from .models import BOOK_FIELDS

MIN_YEAR = 1800
# Largest integer BSON can store
MAX_YEAR = 2 ** 63 - 1
MIN_RATING = 0
MAX_RATING = 5

IMMUTABLE_FIELDS = ("id", "_id")


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid year or rating
    return isinstance(value, Real) and not isinstance(value, bool)


def _present(payload: Mapping[str, Any], field: str) -> bool:
    return payload.get(field) is not None


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_whole(value: Any) -> bool:
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int) and not isinstance(value, bool)


def check_year(payload: Mapping[str, Any]) -> None:
    if not _present(payload, "year"):
        return
    year = payload["year"]
    if not _is_whole(year) or not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidYearError(f"Year must be an integer greater than or equal to {MIN_YEAR}")


def check_rating(payload: Mapping[str, Any]) -> None:
    if not _present(payload, "rating"):
        return
    rating = payload["rating"]
    if not _is_number(rating) or not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError(f"Rating must be a number between {MIN_RATING} and {MAX_RATING}")


def check_genres(payload: Mapping[str, Any]) -> None:
    if not _present(payload, "genres"):
        return
    genres = payload["genres"]
    if not isinstance(genres, (list, tuple)) or not all(isinstance(g, str) for g in genres):
        raise InvalidGenresError("Genres must be a list of strings")


def normalize(payload: Mapping[str, Any], keep_nulls: bool = False) -> Dict[str, Any]:
    """
    Keep the known book fields that carry a value.

    With keep_nulls, fields sent as null are kept as None so the store
    can remove them.
    """
    record = {}
    for field in BOOK_FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if value is None:
            if keep_nulls:
                record[field] = None
            continue
        if field == "year":
            value = int(value)
        elif field == "genres":
            value = list(value)
        record[field] = value
    return record


def validate_create(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a payload for book creation.

    Args:
        payload: Decoded request body

    Returns:
        Normalized record ready for insertion

    Raises:
        MissingRequiredFieldError: title or author missing or empty
        InvalidYearError: year not an integer >= 1800
        InvalidRatingError: rating not a number in [0, 5]
        InvalidGenresError: genres not a list
    """
    if not _is_text(payload.get("title")) or not _is_text(payload.get("author")):
        raise MissingRequiredFieldError("Title and author are required")

    check_year(payload)
    check_rating(payload)
    check_genres(payload)

    return normalize(payload)


def validate_update(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate a partial payload for book update.

    Only the fields present are checked. The identifier can never be set.
    A null optional field (year, rating, genres, available) means remove it;
    title and author cannot be removed.

    Returns:
        Normalized partial record, possibly empty; removed fields map to None
    """
    for field in IMMUTABLE_FIELDS:
        if field in payload:
            raise ImmutableFieldError("Modifying the book identifier is not allowed")

    for field in ("title", "author"):
        if field in payload and not _is_text(payload[field]):
            raise MissingRequiredFieldError(f"{field.capitalize()} cannot be empty")

    check_year(payload)
    check_rating(payload)
    check_genres(payload)

    return normalize(payload, keep_nulls=True)
