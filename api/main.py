"""
FastAPI main application for the Book Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import structlog
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.auth import verify_api_key
from api.config import config
from api.database import BookStore
from api.handlers import BookResourceHandler
from api.models import (
    BookEnvelope, BookListEnvelope, ErrorResponse, HealthResponse, MessageResponse
)
from api.results import to_response
from utilities.logger import setup_logging

logger = structlog.get_logger(__name__)

# Global book store, set up by the lifespan handler
book_store: BookStore = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.log_file,
        debug=config.debug
    )
    logger.info("Starting Book Catalog API")

    global book_store
    try:
        client = AsyncIOMotorClient(config.mongodb_url)
        database = client[config.mongodb_database]

        # Test connection
        await database.command("ping")
        logger.info("Database connection established", database=config.mongodb_database)

        book_store = BookStore(database, config.mongodb_collection)

    except Exception as e:
        logger.error("Failed to connect to database", error=str(e))
        raise

    yield

    logger.info("Shutting down Book Catalog API")
    book_store = None
    client.close()


app = FastAPI(
    title=config.api_title,
    description="""
    REST API for a catalog of books.

    ## Authentication

    Creating, updating and deleting books requires an API key in the Authorization header:

    ```
    Authorization: Bearer your_api_key_here
    ```

    Listing and reading books is open.
    """,
    version=config.api_version,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            message=str(exc.detail),
            status_code=exc.status_code
        ).model_dump(exclude_none=True),
        headers=exc.headers
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    """Report malformed requests as client errors."""
    problems = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            message="Invalid request: " + ", ".join(problems),
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump(exclude_none=True)
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            message="Internal server error",
            detail=str(exc) if config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump(exclude_none=True)
    )


def get_handler() -> BookResourceHandler:
    """Build a handler over the current book store."""
    if not book_store:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Database service not available"
        )
    return BookResourceHandler(book_store)


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON, None when it is empty or not JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


# Health check endpoint (no authentication required)
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if book_store:
        health_info = await book_store.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.utcnow(),
        version=config.api_version,
        database_status=db_status
    )


# Books endpoints
@app.post(
    "/books",
    response_model=BookEnvelope,
    status_code=status.HTTP_201_CREATED,
    tags=["Books"]
)
async def create_book(request: Request, api_key: str = Depends(verify_api_key)):
    """
    Add a new book.

    The JSON body must contain non-empty **title**, **author**, **year** and **genre**.
    """
    body = await read_json_body(request)
    return to_response(await get_handler().create(body))


@app.get("/books", response_model=BookListEnvelope, tags=["Books"])
async def list_books():
    """Get all books."""
    return to_response(await get_handler().list_books())


@app.get("/books/{book_id}", response_model=BookEnvelope, tags=["Books"])
async def get_book(book_id: str):
    """
    Get a single book by ID.

    - **book_id**: Book identifier (MongoDB ObjectId)
    """
    return to_response(await get_handler().get(book_id))


@app.put("/books/{book_id}", response_model=BookEnvelope, tags=["Books"])
async def update_book(book_id: str, request: Request, api_key: str = Depends(verify_api_key)):
    """
    Replace the title, author, year and genre of a book.

    All four fields are required; partial updates are not supported.
    """
    body = await read_json_body(request)
    return to_response(await get_handler().update(book_id, body))


@app.delete("/books/{book_id}", response_model=MessageResponse, tags=["Books"])
async def delete_book(book_id: str, api_key: str = Depends(verify_api_key)):
    """Delete a book by ID."""
    return to_response(await get_handler().delete(book_id))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="info"
    )
