"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from api.config import config
from api.database import parse_book_id
from api.main import app
from api.models import BookDocument, BookRecord

TEST_API_KEY = "test_api_key"


class InMemoryBookStore:
    """Dict-backed test double with the same interface as BookStore."""

    def __init__(self):
        self.books: Dict[str, Dict[str, Any]] = {}
        self.write_calls = 0
        self.fail_listing = False

    async def find_all(self) -> List[BookRecord]:
        if self.fail_listing:
            raise RuntimeError("connection lost")
        return [BookRecord(**book) for book in self.books.values()]

    async def find_by_id(self, book_id: str) -> Optional[BookRecord]:
        parse_book_id(book_id)
        book = self.books.get(book_id)
        return BookRecord(**book) if book else None

    async def insert(self, fields: Mapping[str, Any]) -> BookRecord:
        self.write_calls += 1
        now = datetime.utcnow().isoformat()
        book = BookDocument(**fields).model_dump()
        book.update(id=str(ObjectId()), created_at=now, updated_at=now)
        self.books[book["id"]] = book
        return BookRecord(**book)

    async def replace_by_id(self, book_id: str, fields: Mapping[str, Any]) -> Optional[BookRecord]:
        self.write_calls += 1
        parse_book_id(book_id)
        update_data = BookDocument(**fields).model_dump()
        if book_id not in self.books:
            return None
        self.books[book_id].update(update_data, updated_at=datetime.utcnow().isoformat())
        return BookRecord(**self.books[book_id])

    async def delete_by_id(self, book_id: str) -> bool:
        self.write_calls += 1
        parse_book_id(book_id)
        return self.books.pop(book_id, None) is not None

    async def health_check(self) -> Dict:
        return {"status": "healthy", "books_count": len(self.books)}


@pytest.fixture
def book_store():
    """Create an empty in-memory book store."""
    return InMemoryBookStore()


@pytest.fixture
def client(book_store, monkeypatch):
    """Create a test client wired to the in-memory store and a known API key."""
    monkeypatch.setattr("api.main.book_store", book_store)
    monkeypatch.setattr(config, "api_keys", TEST_API_KEY)
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """Authorization header carrying the test API key."""
    return {"Authorization": f"Bearer {TEST_API_KEY}"}


@pytest.fixture
def sample_book():
    """Valid book request body."""
    return {"title": "A", "author": "B", "year": 2021, "genre": "Fiksi"}


@pytest.fixture
def sample_record():
    """Book record as returned by the store."""
    return BookRecord(
        id="64b7f0c2a1b2c3d4e5f60718",
        title="Laskar Pelangi",
        author="Andrea Hirata",
        year=2005,
        genre="Fiksi",
        created_at="2025-09-21T10:00:00",
        updated_at="2025-09-21T10:00:00"
    )
