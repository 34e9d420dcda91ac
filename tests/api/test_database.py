"""
Unit tests for the MongoDB book store.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pydantic import ValidationError
from pymongo import ReturnDocument

from api.database import BookStore, InvalidBookIdError, document_to_record, parse_book_id

BOOK_ID = ObjectId("64b7f0c2a1b2c3d4e5f60718")


@pytest.fixture
def book_doc():
    """Raw book document as stored in MongoDB."""
    return {
        "_id": BOOK_ID,
        "title": "Laskar Pelangi",
        "author": "Andrea Hirata",
        "year": 2005,
        "genre": "Fiksi",
        "created_at": datetime(2025, 9, 21, 10, 0, 0),
        "updated_at": datetime(2025, 9, 22, 8, 30, 0),
    }


@pytest.fixture
def collection():
    """Create a mock Motor collection."""
    collection = MagicMock()
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock()
    collection.find_one_and_update = AsyncMock()
    collection.delete_one = AsyncMock()
    collection.count_documents = AsyncMock(return_value=3)
    return collection


@pytest.fixture
def database(collection):
    """Create a mock Motor database exposing the collection."""
    database = MagicMock()
    database.__getitem__.return_value = collection
    database.command = AsyncMock(return_value={"ok": 1})
    return database


@pytest.fixture
def store(database):
    return BookStore(database, "books")


class TestHelpers:
    """Test cases for id parsing and document conversion."""

    def test_parse_valid_id(self):
        assert parse_book_id(str(BOOK_ID)) == BOOK_ID

    @pytest.mark.parametrize("book_id", ["abc", "", "64b7f0c2a1b2c3d4e5f6071z"])
    def test_parse_invalid_id(self, book_id):
        with pytest.raises(InvalidBookIdError):
            parse_book_id(book_id)

    def test_document_to_record(self, book_doc):
        record = document_to_record(book_doc)

        assert record.id == str(BOOK_ID)
        assert record.title == "Laskar Pelangi"
        assert record.created_at == "2025-09-21T10:00:00"
        assert record.updated_at == "2025-09-22T08:30:00"
        assert "_id" in book_doc


class TestBookStore:
    """Test cases for BookStore."""

    def test_uses_named_collection(self, database):
        BookStore(database, "library_books")
        database.__getitem__.assert_called_with("library_books")

    @pytest.mark.asyncio
    async def test_find_all(self, store, collection, book_doc):
        cursor = MagicMock()
        cursor.to_list = AsyncMock(return_value=[book_doc])
        collection.find.return_value = cursor

        books = await store.find_all()

        collection.find.assert_called_once_with({})
        assert [book.id for book in books] == [str(BOOK_ID)]

    @pytest.mark.asyncio
    async def test_find_all_propagates_errors(self, store, collection):
        collection.find.side_effect = RuntimeError("connection refused")

        with pytest.raises(RuntimeError):
            await store.find_all()

    @pytest.mark.asyncio
    async def test_find_by_id(self, store, collection, book_doc):
        collection.find_one.return_value = book_doc

        book = await store.find_by_id(str(BOOK_ID))

        collection.find_one.assert_awaited_once_with({"_id": BOOK_ID})
        assert book.author == "Andrea Hirata"

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, store, collection):
        collection.find_one.return_value = None

        assert await store.find_by_id(str(BOOK_ID)) is None

    @pytest.mark.asyncio
    async def test_find_by_id_malformed(self, store, collection):
        with pytest.raises(InvalidBookIdError):
            await store.find_by_id("not-an-id")
        collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert(self, store, collection):
        collection.insert_one.return_value = MagicMock(inserted_id=BOOK_ID)

        book = await store.insert({"title": "A", "author": "B", "year": "2021", "genre": "Fiksi"})

        stored = collection.insert_one.await_args.args[0]
        assert stored["year"] == 2021
        assert isinstance(stored["created_at"], datetime)
        assert stored["created_at"] == stored["updated_at"]
        assert book.id == str(BOOK_ID)
        assert book.year == 2021

    @pytest.mark.asyncio
    async def test_insert_schema_violation(self, store, collection):
        with pytest.raises(ValidationError):
            await store.insert({"title": "A", "author": "B", "year": "later", "genre": "Fiksi"})
        collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_replace_by_id(self, store, collection, book_doc):
        collection.find_one_and_update.return_value = book_doc
        fields = {"title": "Laskar Pelangi", "author": "Andrea Hirata", "year": 2005, "genre": "Fiksi"}

        book = await store.replace_by_id(str(BOOK_ID), fields)

        args, kwargs = collection.find_one_and_update.await_args
        assert args[0] == {"_id": BOOK_ID}
        update = args[1]["$set"]
        assert {key: update[key] for key in fields} == fields
        assert isinstance(update["updated_at"], datetime)
        assert "created_at" not in update
        assert kwargs["return_document"] == ReturnDocument.AFTER
        assert book.id == str(BOOK_ID)

    @pytest.mark.asyncio
    async def test_replace_by_id_missing(self, store, collection):
        collection.find_one_and_update.return_value = None

        result = await store.replace_by_id(str(BOOK_ID), {"title": "A", "author": "B", "year": 1, "genre": "C"})

        assert result is None

    @pytest.mark.asyncio
    async def test_delete_by_id(self, store, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=1)

        assert await store.delete_by_id(str(BOOK_ID)) is True
        collection.delete_one.assert_awaited_once_with({"_id": BOOK_ID})

    @pytest.mark.asyncio
    async def test_delete_by_id_missing(self, store, collection):
        collection.delete_one.return_value = MagicMock(deleted_count=0)

        assert await store.delete_by_id(str(BOOK_ID)) is False

    @pytest.mark.asyncio
    async def test_delete_legacy_document_without_genre(self, store, collection):
        # Stored before genre was required; never read back on delete
        collection.find_one.return_value = {"_id": BOOK_ID, "title": "A", "author": "B", "year": 1999}
        collection.delete_one.return_value = MagicMock(deleted_count=1)

        assert await store.delete_by_id(str(BOOK_ID)) is True
        collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_health_check(self, store, database):
        health = await store.health_check()

        database.command.assert_awaited_once_with("ping")
        assert health == {"status": "healthy", "books_collection": "accessible", "books_count": 3}

    @pytest.mark.asyncio
    async def test_health_check_unhealthy(self, store, database):
        database.command.side_effect = RuntimeError("no primary")

        health = await store.health_check()

        assert health["status"] == "unhealthy"
        assert health["error"] == "no primary"
