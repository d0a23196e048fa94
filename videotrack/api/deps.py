"""
API Dependencies

Reusable dependencies for API routes including authentication.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from videotrack.core.security import decode_access_token


# Tokens are issued by the surrounding platform
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


async def get_current_user_id(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> int:
    """
    Dependency to get the id of the authenticated viewer.

    This dependency:
    1. Extracts the JWT token from the Authorization header
    2. Decodes and validates the token
    3. Reads the integer user id from the subject claim
    4. Raises 401 if any step fails

    Args:
        token: JWT token from Authorization header (auto-extracted).

    Returns:
        int: The viewer's user id.

    Raises:
        HTTPException: 401 if authentication fails.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    user_id_str: str | None = payload.get("sub")
    if user_id_str is None:
        raise credentials_exception

    try:
        return int(user_id_str)
    except ValueError:
        raise credentials_exception
