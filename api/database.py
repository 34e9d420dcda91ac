"""
Book store backed by MongoDB through Motor.
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from api.models import BookDocument, BookRecord

logger = structlog.get_logger(__name__)


class InvalidBookIdError(ValueError):
    """Raised when a book identifier cannot be parsed as an ObjectId."""


def parse_book_id(book_id: str) -> ObjectId:
    """
    Convert a path identifier into an ObjectId.

    Args:
        book_id: Book identifier as received in the URL

    Returns:
        The parsed ObjectId

    Raises:
        InvalidBookIdError: If the identifier is not a valid ObjectId
    """
    try:
        return ObjectId(book_id)
    except (InvalidId, TypeError) as e:
        raise InvalidBookIdError(str(e)) from e


def document_to_record(book_doc: Dict[str, Any]) -> BookRecord:
    """Convert a raw MongoDB document into a BookRecord."""
    book_doc = dict(book_doc)
    book_doc["id"] = str(book_doc.pop("_id"))

    # Convert datetime fields to ISO format strings for JSON serialization
    for field in ("created_at", "updated_at"):
        value = book_doc.get(field)
        if value is not None and hasattr(value, "isoformat"):
            book_doc[field] = value.isoformat()

    return BookRecord(**book_doc)


class BookStore:
    """Persistence for book records in a single MongoDB collection."""

    def __init__(self, database: AsyncIOMotorDatabase, collection_name: str = "books"):
        self.database = database
        self.collection = database[collection_name]

    async def find_all(self) -> List[BookRecord]:
        """
        Get every book in natural store order.

        Returns:
            List of BookRecord
        """
        try:
            cursor = self.collection.find({})
            books_docs = await cursor.to_list(length=None)
            return [document_to_record(book_doc) for book_doc in books_docs]
        except Exception as e:
            logger.error("Failed to list books", error=str(e))
            raise

    async def find_by_id(self, book_id: str) -> Optional[BookRecord]:
        """
        Get a single book by ID.

        Args:
            book_id: Book identifier

        Returns:
            BookRecord if found, None otherwise
        """
        object_id = parse_book_id(book_id)
        try:
            book_doc = await self.collection.find_one({"_id": object_id})
        except Exception as e:
            logger.error("Failed to get book by ID", book_id=book_id, error=str(e))
            raise

        if book_doc:
            return document_to_record(book_doc)
        return None

    async def insert(self, fields: Mapping[str, Any]) -> BookRecord:
        """
        Validate and insert a new book.

        Args:
            fields: title, author, year and genre

        Returns:
            The stored BookRecord with its assigned identifier

        Raises:
            pydantic.ValidationError: If the fields do not satisfy the book schema
        """
        book = BookDocument(**fields)
        now = datetime.utcnow()
        book_doc = book.model_dump()
        book_doc["created_at"] = now
        book_doc["updated_at"] = now

        try:
            result = await self.collection.insert_one(book_doc)
        except Exception as e:
            logger.error("Failed to insert book", title=book.title, error=str(e))
            raise

        book_doc["_id"] = result.inserted_id
        logger.debug("Successfully inserted book", book_id=str(result.inserted_id), title=book.title)
        return document_to_record(book_doc)

    async def replace_by_id(self, book_id: str, fields: Mapping[str, Any]) -> Optional[BookRecord]:
        """
        Replace all business fields of a book in one atomic update.

        Args:
            book_id: Book identifier
            fields: New title, author, year and genre

        Returns:
            The BookRecord after the update, None if no book matched
        """
        object_id = parse_book_id(book_id)
        update_data = BookDocument(**fields).model_dump()
        update_data["updated_at"] = datetime.utcnow()

        try:
            book_doc = await self.collection.find_one_and_update(
                {"_id": object_id},
                {"$set": update_data},
                return_document=ReturnDocument.AFTER
            )
        except Exception as e:
            logger.error("Failed to update book", book_id=book_id, error=str(e))
            raise

        if book_doc:
            logger.debug("Successfully updated book", book_id=book_id)
            return document_to_record(book_doc)
        return None

    async def delete_by_id(self, book_id: str) -> bool:
        """
        Delete a book.

        Args:
            book_id: Book identifier

        Returns:
            True if a book was deleted, False if no book matched
        """
        object_id = parse_book_id(book_id)
        try:
            result = await self.collection.delete_one({"_id": object_id})
        except Exception as e:
            logger.error("Failed to delete book", book_id=book_id, error=str(e))
            raise

        if result.deleted_count:
            logger.debug("Successfully deleted book", book_id=book_id)
            return True
        return False

    async def health_check(self) -> Dict:
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
