"""
Bearer token authentication for mutating book operations.
"""

from typing import Optional

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.config import config

logger = structlog.get_logger(__name__)

# Security scheme; a missing header is reported by verify_api_key itself
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def verify_api_key(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Verify the bearer token of a request against the configured API keys.

    Args:
        credentials: HTTP authorization credentials

    Returns:
        API key if valid

    Raises:
        HTTPException: If the token is missing or invalid
    """
    if credentials is None or not credentials.credentials:
        logger.warning("Request without bearer token rejected")
        raise _unauthorized("Missing bearer token")

    api_key = credentials.credentials

    if api_key not in config.get_api_keys():
        logger.warning("Invalid API key attempted", api_key=api_key[:10] + "...")
        raise _unauthorized("Invalid API key")

    return api_key
