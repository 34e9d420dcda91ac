"""
API models and schemas for the book catalog.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class BookDocument(BaseModel):
    """Schema a book document must satisfy before it is written to the store."""
    title: str = Field(..., min_length=1, description="Book title")
    author: str = Field(..., min_length=1, description="Book author")
    year: int = Field(..., description="Publication year")
    genre: str = Field(..., min_length=1, description="Book genre")

    @field_validator("title", "author", "genre", mode="before")
    @classmethod
    def coerce_numbers_to_text(cls, v):
        """Store numeric text fields as their string form."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class BookRecord(BaseModel):
    """Book as returned by the API."""
    id: str = Field(..., description="Unique book identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Book author")
    year: int = Field(..., description="Publication year")
    genre: str = Field(..., description="Book genre")
    created_at: Optional[str] = Field(None, description="Creation timestamp")
    updated_at: Optional[str] = Field(None, description="Last update timestamp")


class BookEnvelope(BaseModel):
    """Response body for single-book operations."""
    message: str = Field(..., description="Outcome message")
    book: BookRecord = Field(..., description="The affected book")


class BookListEnvelope(BaseModel):
    """Response body for the book listing."""
    message: str = Field(..., description="Outcome message")
    books: List[BookRecord] = Field(..., description="List of books")


class MessageResponse(BaseModel):
    """Response body carrying only a message."""
    message: str = Field(..., description="Outcome message")


class ErrorResponse(BaseModel):
    """Error response model."""
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
