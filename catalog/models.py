"""
Pydantic models for the book catalog.
Defines the Book record and the list query parameters.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


# Fields a client may write; anything else in a payload is dropped
BOOK_FIELDS = ("title", "author", "year", "rating", "genres", "available")


class SortBy(str, Enum):
    """Sortable book fields."""
    RATING = "rating"
    YEAR = "year"


class SortOrder(str, Enum):
    """Sort order options."""
    ASC = "asc"
    DESC = "desc"


class Book(BaseModel):
    """Book record as exposed to clients."""
    id: str = Field(..., description="Store-assigned book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    year: Optional[int] = Field(None, description="Publication year (1800 or later)")
    rating: Optional[float] = Field(None, description="Rating between 0 and 5")
    genres: Optional[List[str]] = Field(None, description="Ordered list of genres")
    # Stored as sent; only the list filter interprets it as a boolean
    available: Optional[Any] = Field(None, description="Whether the book is available")

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "id": "65a1f0c2e4b0a1b2c3d4e5f6",
                "title": "Foundation",
                "author": "Isaac Asimov",
                "year": 1951,
                "rating": 4.5,
                "genres": ["Science Fiction"],
                "available": True
            }
        }
    )


class BookQueryParams(BaseModel):
    """
    Raw query parameters for book listing.

    Values are kept as received; the query builder decides how each one
    constrains the result.
    """
    author: Optional[str] = Field(None, description="Exact author match")
    available: Optional[str] = Field(None, description="'true' or 'false'")
    genre: Optional[str] = Field(None, description="Genre the book must list")
    min_rating: Optional[str] = Field(None, alias="minRating", description="Inclusive minimum rating")
    sort_by: Optional[str] = Field(None, alias="sortBy", description="Sort field (rating, year)")
    order: str = Field(SortOrder.ASC.value, description="Sort order (asc, desc)")

    model_config = ConfigDict(populate_by_name=True)


class BookQuery(BaseModel):
    """Store filter and sort built from query parameters."""
    filter: Dict[str, Any] = Field(default_factory=dict)
    sort: List[Tuple[str, int]] = Field(default_factory=list)
