"""
Request handling for the book resource.

``BookResourceHandler`` checks the request shape, makes one store call and
turns the outcome into a handler result. Store and validation errors never
escape an operation.
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import status
from pydantic import ValidationError

from api.database import BookStore
from api.results import (
    HandlerResult, NotFound, Ok, ServerFailure, ValidationFailure
)

logger = structlog.get_logger(__name__)

BOOK_FIELDS = ("title", "author", "year", "genre")

MISSING_FIELDS_MESSAGE = "Semua field harus diisi."
INPUT_ERROR_PREFIX = "Kesalahan pada input: "
SERVER_ERROR_PREFIX = "Kesalahan pada server: "

CREATED_MESSAGE = "Buku berhasil ditambahkan"
LISTED_MESSAGE = "Daftar buku berhasil diambil"
FOUND_MESSAGE = "Buku berhasil ditemukan"
UPDATED_MESSAGE = "Buku berhasil diperbarui"
DELETED_MESSAGE = "Buku dihapus"


def extract_book_fields(body: Any) -> Optional[Dict[str, Any]]:
    """
    Pick the book fields out of a request body.

    Args:
        body: Parsed JSON request body

    Returns:
        Dict with the four book fields, or None if the body is not an object
        or any field is missing or falsy
    """
    if not isinstance(body, dict):
        return None

    fields = {name: body.get(name) for name in BOOK_FIELDS}
    if not all(fields.values()):
        return None
    return fields


def describe_error(error: Exception) -> str:
    """Render an exception as a single human-readable line."""
    if isinstance(error, ValidationError):
        problems = [
            f"{'.'.join(str(part) for part in problem['loc'])}: {problem['msg']}"
            for problem in error.errors()
        ]
        return "Book validation failed: " + ", ".join(problems)
    return str(error)


class BookResourceHandler:
    """Create, list, get, update and delete books."""

    def __init__(self, store: BookStore):
        self.store = store

    async def create(self, body: Any) -> HandlerResult:
        fields = extract_book_fields(body)
        if fields is None:
            return ValidationFailure(message=MISSING_FIELDS_MESSAGE)

        try:
            book = await self.store.insert(fields)
        except Exception as e:
            logger.warning("Book creation rejected", error=describe_error(e))
            return ValidationFailure(message=INPUT_ERROR_PREFIX + describe_error(e))

        logger.info("Book created", book_id=book.id)
        return Ok(message=CREATED_MESSAGE, status_code=status.HTTP_201_CREATED, book=book)

    async def list_books(self) -> HandlerResult:
        try:
            books = await self.store.find_all()
        except Exception as e:
            return ServerFailure(message=SERVER_ERROR_PREFIX + describe_error(e))

        return Ok(message=LISTED_MESSAGE, books=books)

    async def get(self, book_id: str) -> HandlerResult:
        try:
            book = await self.store.find_by_id(book_id)
        except Exception as e:
            return ValidationFailure(message=INPUT_ERROR_PREFIX + describe_error(e))

        if book is None:
            return NotFound()
        return Ok(message=FOUND_MESSAGE, book=book)

    async def update(self, book_id: str, body: Any) -> HandlerResult:
        """Replace title, author, year and genre of an existing book."""
        fields = extract_book_fields(body)
        if fields is None:
            return ValidationFailure(message=MISSING_FIELDS_MESSAGE)

        try:
            book = await self.store.replace_by_id(book_id, fields)
        except Exception as e:
            logger.warning("Book update rejected", book_id=book_id, error=describe_error(e))
            return ValidationFailure(message=INPUT_ERROR_PREFIX + describe_error(e))

        if book is None:
            return NotFound()

        logger.info("Book updated", book_id=book_id)
        return Ok(message=UPDATED_MESSAGE, book=book)

    async def delete(self, book_id: str) -> HandlerResult:
        try:
            deleted = await self.store.delete_by_id(book_id)
        except Exception as e:
            return ValidationFailure(message=INPUT_ERROR_PREFIX + describe_error(e))

        if not deleted:
            return NotFound()

        logger.info("Book deleted", book_id=book_id)
        return Ok(message=DELETED_MESSAGE)
