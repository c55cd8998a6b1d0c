"""
MongoDB gateway for the books collection.
Holds the process-wide connection and exposes single-document operations.
"""

from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import ConnectionFailure

from utilities.logger import get_logger

logger = get_logger(__name__)


def to_book_document(document: Dict[str, Any]) -> Dict[str, Any]:
    """Replace MongoDB's ObjectId ``_id`` with a string ``id``."""
    book = dict(document)
    book["id"] = str(book.pop("_id"))
    return book


class BookStore:
    """
    Async MongoDB gateway for book records.

    One instance is created at startup and shared by every request.
    Driver errors propagate to the caller untouched.
    """

    def __init__(self, connection_url: str, database_name: str, collection_name: str = "books"):
        """
        Initialize the gateway.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            collection_name: Name of the books collection
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection: Optional[AsyncIOMotorCollection] = None

    @staticmethod
    def is_valid_id(book_id: str) -> bool:
        """Check that an identifier is a 24 character hex ObjectId."""
        return isinstance(book_id, str) and ObjectId.is_valid(book_id)

    async def connect(self) -> None:
        """Establish connection to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url)
            self.database = self.client[self.database_name]
            self.collection = self.database[self.collection_name]

            await self.client.admin.command("ping")
            logger.info("Successfully connected to MongoDB",
                        database=self.database_name,
                        collection=self.collection_name)

            await self._create_indexes()

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            logger.info("Disconnected from MongoDB")

    async def _create_indexes(self) -> None:
        """Create indexes for the filter and sort fields."""
        try:
            await self.collection.create_index("author")
            await self.collection.create_index("genres")
            await self.collection.create_index("available")
            await self.collection.create_index("rating")
            await self.collection.create_index("year")

            logger.info("Successfully created MongoDB indexes")

        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def find(
        self,
        filter_query: Dict[str, Any],
        sort: Optional[List[Tuple[str, int]]] = None
    ) -> List[Dict[str, Any]]:
        """
        Find all books matching a filter.

        Args:
            filter_query: MongoDB filter document
            sort: List of (field, direction) pairs, empty for natural order

        Returns:
            List of book documents with string ids
        """
        cursor = self.collection.find(filter_query)
        if sort:
            cursor = cursor.sort(sort)
        documents = await cursor.to_list(length=None)

        logger.debug("Retrieved books", filter=filter_query, count=len(documents))
        return [to_book_document(document) for document in documents]

    async def find_one(self, book_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a book by id.

        Returns:
            Book document or None if not found
        """
        document = await self.collection.find_one({"_id": ObjectId(book_id)})
        if document is None:
            return None
        return to_book_document(document)

    async def insert(self, record: Dict[str, Any]) -> str:
        """
        Insert a new book.

        Args:
            record: Validated book fields

        Returns:
            Store-assigned identifier as a string
        """
        # insert_one adds _id to the dict it is given
        result = await self.collection.insert_one(dict(record))
        book_id = str(result.inserted_id)
        logger.debug("Successfully inserted book", book_id=book_id)
        return book_id

    async def find_one_and_update(self, book_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Set or remove fields on a book and return the document after the update.

        Args:
            book_id: Identifier of the book to update
            update_data: Fields to set; fields mapped to None are removed

        Returns:
            Updated book document or None if not found
        """
        to_set = {field: value for field, value in update_data.items() if value is not None}
        to_unset = {field: "" for field, value in update_data.items() if value is None}

        update = {}
        if to_set:
            update["$set"] = to_set
        if to_unset:
            update["$unset"] = to_unset

        document = await self.collection.find_one_and_update(
            {"_id": ObjectId(book_id)},
            update,
            return_document=ReturnDocument.AFTER
        )
        if document is None:
            return None
        return to_book_document(document)

    async def delete_one(self, book_id: str) -> int:
        """
        Delete a book by id.

        Returns:
            Number of deleted documents (0 or 1)
        """
        result = await self.collection.delete_one({"_id": ObjectId(book_id)})
        return result.deleted_count

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            books_count = await self.collection.count_documents({})

            return {
                "status": "healthy",
                "books_collection": "accessible",
                "books_count": books_count
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
