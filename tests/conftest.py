"""
Pytest configuration and shared fixtures.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.handlers import BookHandlers
from api.main import app, get_book_handlers
from catalog.database import BookStore, to_book_document


def _matches(document: Dict[str, Any], filter_query: Dict[str, Any]) -> bool:
    for field, condition in filter_query.items():
        value = document.get(field)
        if isinstance(condition, dict):
            if "$gte" in condition and (value is None or value < condition["$gte"]):
                return False
        elif isinstance(value, list):
            if condition not in value:
                return False
        elif value != condition:
            return False
    return True


class InMemoryBookStore(BookStore):
    """
    BookStore backed by a dict, supporting the equality and $gte
    predicates the query builder produces.
    """

    def __init__(self):
        super().__init__("mongodb://localhost:27017", "test_bookshelf")
        self.documents: Dict[ObjectId, Dict[str, Any]] = {}
        self.writes = 0

    def seed(self, *records: Dict[str, Any]) -> List[str]:
        ids = []
        for record in records:
            object_id = ObjectId()
            self.documents[object_id] = {"_id": object_id, **record}
            ids.append(str(object_id))
        return ids

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def find(
        self,
        filter_query: Dict[str, Any],
        sort: Optional[List[Tuple[str, int]]] = None
    ) -> List[Dict[str, Any]]:
        documents = [d for d in self.documents.values() if _matches(d, filter_query)]
        for field, direction in reversed(sort or []):
            documents.sort(key=lambda d: d.get(field), reverse=direction == -1)
        return [to_book_document(d) for d in documents]

    async def find_one(self, book_id: str) -> Optional[Dict[str, Any]]:
        document = self.documents.get(ObjectId(book_id))
        return to_book_document(document) if document else None

    async def insert(self, record: Dict[str, Any]) -> str:
        self.writes += 1
        return self.seed(record)[0]

    async def find_one_and_update(self, book_id: str, update_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        self.writes += 1
        document = self.documents.get(ObjectId(book_id))
        if document is None:
            return None
        for field, value in update_data.items():
            if value is None:
                document.pop(field, None)
            else:
                document[field] = value
        return to_book_document(document)

    async def delete_one(self, book_id: str) -> int:
        self.writes += 1
        return 1 if self.documents.pop(ObjectId(book_id), None) else 0

    async def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "books_count": len(self.documents)}


@pytest.fixture
def book_store():
    """Create an empty in-memory book store."""
    return InMemoryBookStore()


@pytest.fixture
def handlers(book_store):
    """Create handlers bound to the in-memory store."""
    return BookHandlers(book_store)


@pytest.fixture
def client(book_store):
    """Create a test client whose handlers use the in-memory store."""
    app.dependency_overrides[get_book_handlers] = lambda: BookHandlers(book_store)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_books():
    """Three books with distinct authors, years and ratings."""
    return [
        {"title": "Le Prophète", "author": "Khalil", "year": 1923, "rating": 4.8,
         "genres": ["Philosophie", "Poésie"], "available": True},
        {"title": "La Nausée", "author": "Sartre", "year": 1938, "rating": 4.1,
         "genres": ["Philosophie", "Roman"], "available": False},
        {"title": "Foundation", "author": "Asimov", "year": 1951, "rating": 4.5,
         "genres": ["Science Fiction"], "available": True},
    ]
