"""
Resource handlers for book operations.

Each handler validates its input, performs at most one store operation and
either returns the result or raises a CatalogError describing the outcome.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Mapping

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from catalog.database import BookStore
from catalog.errors import CatalogError, InvalidIdentifierError, NotFoundError, StoreFailureError
from catalog.models import Book, BookQueryParams
from catalog.queries import build_book_query
from catalog.validation import validate_create, validate_update
from utilities.logger import CatalogLogger


class BookHandlers:
    """Orchestrates query building, validation and store calls per operation."""

    def __init__(self, store: BookStore, logger: CatalogLogger = None):
        self.store = store
        self.logger = logger or CatalogLogger("api.handlers")

    @asynccontextmanager
    async def _store_call(self, failure_message: str):
        try:
            yield
        except PyMongoError as e:
            self.logger.error(failure_message, error=str(e))
            raise StoreFailureError(failure_message) from e

    def _check_id(self, book_id: str) -> None:
        if not self.store.is_valid_id(book_id):
            self.logger.warn("Invalid book ID", book_id=book_id)
            raise InvalidIdentifierError("Invalid book ID")

    async def list_books(self, params: BookQueryParams) -> List[Book]:
        """
        List books matching the given filters.

        Raises:
            NotFoundError: no book matches
        """
        self.logger.info("Fetching books", filters=params.model_dump(by_alias=True, exclude_none=True))
        query = build_book_query(params)

        async with self._store_call("Error fetching books"):
            documents = await self.store.find(query.filter, query.sort)

        if not documents:
            self.logger.warn("No books found with the specified filters")
            raise NotFoundError("No books found with the specified filters")

        books = []
        for document in documents:
            try:
                books.append(Book.model_validate(document))
            except ValidationError as e:
                self.logger.warn("Skipping malformed stored book", book_id=document.get("id"), error=str(e))

        if not books:
            self.logger.warn("No readable books found with the specified filters")
            raise NotFoundError("No books found with the specified filters")

        return books

    async def get_book(self, book_id: str) -> Book:
        """Fetch a single book by id."""
        self.logger.info("Fetching book", book_id=book_id)
        self._check_id(book_id)

        async with self._store_call("Error fetching book"):
            document = await self.store.find_one(book_id)

        if document is None:
            self.logger.warn("Book not found", book_id=book_id)
            raise NotFoundError("Book not found")

        return self._to_book(document)

    async def create_book(self, payload: Mapping[str, Any]) -> Book:
        """
        Validate and insert a new book.

        Returns:
            The stored book: the store-assigned id plus the normalized fields
        """
        self.logger.info("Creating a new book")
        record = self._validated(validate_create, payload)

        async with self._store_call("Error creating book"):
            book_id = await self.store.insert(record)

        self.logger.success("Book created successfully", book_id=book_id)
        return Book.model_validate({"id": book_id, **record})

    async def update_book(self, book_id: str, payload: Mapping[str, Any]) -> Book:
        """
        Apply a partial update to a book.

        Returns:
            The book as stored after the update
        """
        self.logger.info("Updating book", book_id=book_id)
        self._check_id(book_id)
        update_data = self._validated(validate_update, payload)

        async with self._store_call("Error updating book"):
            if update_data:
                document = await self.store.find_one_and_update(book_id, update_data)
            else:
                # MongoDB rejects an empty $set
                document = await self.store.find_one(book_id)

        if document is None:
            self.logger.warn("Book not found", book_id=book_id)
            raise NotFoundError("Book not found")

        self.logger.success("Book updated successfully", book_id=book_id, fields=sorted(update_data))
        return self._to_book(document)

    async def delete_book(self, book_id: str) -> Dict[str, str]:
        """Delete a book by id."""
        self.logger.info("Deleting book", book_id=book_id)
        self._check_id(book_id)

        async with self._store_call("Error deleting book"):
            deleted_count = await self.store.delete_one(book_id)

        if deleted_count == 0:
            self.logger.warn("Book not found", book_id=book_id)
            raise NotFoundError("Book not found")

        self.logger.success("Book deleted successfully", book_id=book_id)
        return {"message": "Book deleted successfully"}

    def _to_book(self, document: Dict[str, Any]) -> Book:
        try:
            return Book.model_validate(document)
        except ValidationError as e:
            self.logger.error("Stored book could not be read", book_id=document.get("id"), error=str(e))
            raise StoreFailureError("Stored book could not be read") from e

    def _validated(self, validate, payload: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            return validate(payload)
        except CatalogError as e:
            self.logger.warn("Book payload rejected", reason=e.message, code=e.code)
            raise
