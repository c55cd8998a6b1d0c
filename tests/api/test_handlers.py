"""
Tests for the book resource handlers against the in-memory store.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from bson import ObjectId
from pymongo.errors import ServerSelectionTimeoutError

from api.handlers import BookHandlers
from catalog.errors import (
    ImmutableFieldError, InvalidGenresError, InvalidIdentifierError, InvalidRatingError,
    InvalidYearError, MissingRequiredFieldError, NotFoundError, StoreFailureError
)
from catalog.models import BookQueryParams

MISSING_ID = "65a1f0c2e4b0a1b2c3d4e5f6"


class TestListBooks:
    """Test cases for list_books."""

    @pytest.mark.asyncio
    async def test_filter_by_author(self, handlers, book_store, sample_books):
        book_store.seed(*sample_books)

        books = await handlers.list_books(BookQueryParams(author="Khalil"))

        assert [book.author for book in books] == ["Khalil"]

    @pytest.mark.asyncio
    async def test_sort_by_year_descending(self, handlers, book_store, sample_books):
        book_store.seed(*sample_books)

        books = await handlers.list_books(BookQueryParams(sortBy="year", order="desc"))

        assert [book.year for book in books] == [1951, 1938, 1923]

    @pytest.mark.asyncio
    async def test_filter_by_genre_and_rating(self, handlers, book_store, sample_books):
        book_store.seed(*sample_books)

        books = await handlers.list_books(BookQueryParams(genre="Philosophie", minRating="4.5"))

        assert [book.title for book in books] == ["Le Prophète"]

    @pytest.mark.asyncio
    async def test_filter_by_availability(self, handlers, book_store, sample_books):
        book_store.seed(*sample_books)

        books = await handlers.list_books(BookQueryParams(available="false"))

        assert [book.author for book in books] == ["Sartre"]

    @pytest.mark.asyncio
    async def test_no_match_is_not_found(self, handlers, book_store, sample_books):
        book_store.seed(*sample_books)

        with pytest.raises(NotFoundError):
            await handlers.list_books(BookQueryParams(author="Camus"))

    @pytest.mark.asyncio
    async def test_empty_store_is_not_found(self, handlers):
        with pytest.raises(NotFoundError):
            await handlers.list_books(BookQueryParams())

    @pytest.mark.asyncio
    async def test_store_failure(self, handlers, book_store):
        book_store.find = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))

        with pytest.raises(StoreFailureError) as exc_info:
            await handlers.list_books(BookQueryParams())

        assert exc_info.value.message == "Error fetching books"

    @pytest.mark.asyncio
    async def test_malformed_stored_book_skipped(self, handlers, book_store, sample_books):
        book_store.seed({"titre": "Candide", "auteur": "Voltaire"}, sample_books[2])

        books = await handlers.list_books(BookQueryParams())

        assert [book.title for book in books] == ["Foundation"]

    @pytest.mark.asyncio
    async def test_only_malformed_stored_books_is_not_found(self, handlers, book_store):
        book_store.seed({"titre": "Candide", "auteur": "Voltaire"})

        with pytest.raises(NotFoundError):
            await handlers.list_books(BookQueryParams())


class TestGetBook:
    """Test cases for get_book."""

    @pytest.mark.asyncio
    async def test_found(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[2])[0]

        book = await handlers.get_book(book_id)

        assert book.id == book_id
        assert book.title == "Foundation"

    @pytest.mark.asyncio
    async def test_missing(self, handlers):
        with pytest.raises(NotFoundError):
            await handlers.get_book(MISSING_ID)

    @pytest.mark.asyncio
    async def test_invalid_identifier_never_reaches_store(self, handlers, book_store):
        book_store.find_one = AsyncMock()

        with pytest.raises(InvalidIdentifierError):
            await handlers.get_book("123")

        book_store.find_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_stored_book_is_store_failure(self, handlers, book_store):
        book_id = book_store.seed({"titre": "Candide", "auteur": "Voltaire"})[0]

        with pytest.raises(StoreFailureError) as exc_info:
            await handlers.get_book(book_id)

        assert exc_info.value.message == "Stored book could not be read"


class TestCreateBook:
    """Test cases for create_book."""

    @pytest.mark.asyncio
    async def test_round_trip(self, handlers):
        created = await handlers.create_book(
            {"title": "Foundation", "author": "Asimov", "year": 1951, "rating": 4.5}
        )
        fetched = await handlers.get_book(created.id)

        assert ObjectId.is_valid(created.id)
        assert (fetched.title, fetched.author, fetched.year, fetched.rating) == ("Foundation", "Asimov", 1951, 4.5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload, error", [
        ({"author": "Asimov"}, MissingRequiredFieldError),
        ({"title": "Foundation"}, MissingRequiredFieldError),
        ({"title": "Foundation", "author": "Asimov", "year": 1700}, InvalidYearError),
        ({"title": "Foundation", "author": "Asimov", "rating": 7}, InvalidRatingError),
        ({"title": "Foundation", "author": "Asimov", "genres": "SF"}, InvalidGenresError),
    ])
    async def test_invalid_payload_performs_no_write(self, handlers, book_store, payload, error):
        with pytest.raises(error):
            await handlers.create_book(payload)

        assert book_store.writes == 0
        assert book_store.documents == {}

    @pytest.mark.asyncio
    async def test_store_failure(self, handlers, book_store):
        book_store.insert = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))

        with pytest.raises(StoreFailureError):
            await handlers.create_book({"title": "Foundation", "author": "Asimov"})


class TestUpdateBook:
    """Test cases for update_book."""

    @pytest.mark.asyncio
    async def test_partial_update(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[1])[0]

        book = await handlers.update_book(book_id, {"rating": 4.9, "genres": ["Roman"]})

        assert book.rating == 4.9
        assert book.genres == ["Roman"]
        assert book.title == "La Nausée"

    @pytest.mark.asyncio
    async def test_missing_book(self, handlers):
        with pytest.raises(NotFoundError):
            await handlers.update_book(MISSING_ID, {"rating": 3})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("field", ["id", "_id"])
    async def test_identifier_rejected_before_store_access(self, handlers, book_store, sample_books, field):
        book_id = book_store.seed(sample_books[0])[0]
        book_store.find_one_and_update = AsyncMock()

        with pytest.raises(ImmutableFieldError):
            await handlers.update_book(book_id, {field: MISSING_ID, "rating": 2})

        book_store.find_one_and_update.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_identifier(self, handlers):
        with pytest.raises(InvalidIdentifierError):
            await handlers.update_book("not-an-id", {"rating": 3})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload, error", [
        ({"year": 1500}, InvalidYearError),
        ({"rating": -1}, InvalidRatingError),
        ({"genres": "Roman"}, InvalidGenresError),
    ])
    async def test_invalid_payload(self, handlers, book_store, sample_books, payload, error):
        book_id = book_store.seed(sample_books[0])[0]

        with pytest.raises(error):
            await handlers.update_book(book_id, payload)

        assert book_store.writes == 0

    @pytest.mark.asyncio
    async def test_empty_update_returns_current_book(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[0])[0]

        book = await handlers.update_book(book_id, {"publisher": "ignored"})

        assert book.title == "Le Prophète"
        assert book_store.writes == 0

    @pytest.mark.asyncio
    async def test_null_optional_field_is_removed(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[0])[0]

        book = await handlers.update_book(book_id, {"year": None, "rating": 4.9})

        assert book.year is None
        assert book.rating == 4.9
        assert "year" not in book_store.documents[ObjectId(book_id)]


class TestDeleteBook:
    """Test cases for delete_book."""

    @pytest.mark.asyncio
    async def test_delete(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[0])[0]

        result = await handlers.delete_book(book_id)

        assert result == {"message": "Book deleted successfully"}
        assert book_store.documents == {}

    @pytest.mark.asyncio
    async def test_delete_missing_is_idempotent(self, handlers):
        for _ in range(2):
            with pytest.raises(NotFoundError):
                await handlers.delete_book(MISSING_ID)

    @pytest.mark.asyncio
    async def test_delete_twice(self, handlers, book_store, sample_books):
        book_id = book_store.seed(sample_books[0])[0]

        await handlers.delete_book(book_id)
        with pytest.raises(NotFoundError):
            await handlers.delete_book(book_id)


@pytest.mark.asyncio
async def test_injected_logger_receives_outcomes(book_store):
    """Test that handlers report through the injected logger."""
    logger = Mock()
    handlers = BookHandlers(book_store, logger)

    created = await handlers.create_book({"title": "Foundation", "author": "Asimov"})
    with pytest.raises(NotFoundError):
        await handlers.delete_book(MISSING_ID)

    logger.success.assert_called_once_with("Book created successfully", book_id=created.id)
    logger.warn.assert_called_with("Book not found", book_id=MISSING_ID)
