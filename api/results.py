"""
Handler results and their mapping to HTTP responses.

Every book operation returns exactly one of ``Ok``, ``ValidationFailure``,
``NotFound`` or ``ServerFailure``. Routes turn the result into a
``JSONResponse`` with ``to_response``.
"""

from typing import List, Optional, Union

from fastapi import status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.models import BookRecord

NOT_FOUND_MESSAGE = "Buku tidak ditemukan"


class Ok(BaseModel):
    """Successful operation, optionally carrying one book or a list of books."""
    message: str
    status_code: int = status.HTTP_200_OK
    book: Optional[BookRecord] = None
    books: Optional[List[BookRecord]] = None


class ValidationFailure(BaseModel):
    """Missing field, malformed identifier or input rejected by the store."""
    message: str


class NotFound(BaseModel):
    """No book matches the requested identifier."""
    message: str = NOT_FOUND_MESSAGE


class ServerFailure(BaseModel):
    """Unexpected store failure."""
    message: str


HandlerResult = Union[Ok, ValidationFailure, NotFound, ServerFailure]


def to_response(result: HandlerResult) -> JSONResponse:
    """
    Map a handler result to a JSON response.

    Args:
        result: Outcome of a book operation

    Returns:
        JSONResponse with the status code for the result kind
    """
    if isinstance(result, Ok):
        content = result.model_dump(exclude={"status_code"}, exclude_none=True)
        return JSONResponse(status_code=result.status_code, content=content)

    if isinstance(result, ValidationFailure):
        status_code = status.HTTP_400_BAD_REQUEST
    elif isinstance(result, NotFound):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(result, ServerFailure):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    else:
        raise TypeError(f"Unsupported handler result: {type(result).__name__}")

    return JSONResponse(status_code=status_code, content={"message": result.message})
