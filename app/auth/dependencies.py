"""
Authentication dependencies for FastAPI.
Provides dependency injection for authenticated endpoints.
"""

import logging
from typing import Annotated, Any

from fastapi import Depends, Header, Request

from app.auth.jwt import dev_user_claims, extract_user_claims, validate_token
from app.config import get_settings
from app.core.exceptions import UnauthorizedException
from app.dependencies import DbSession
from app.models import User
from app.services.user_service import UserService

logger = logging.getLogger(__name__)
settings = get_settings()


async def get_token_claims(
    authorization: str | None = Header(default=None),
) -> dict[str, Any] | None:
    """
    Resolve the caller's identity claims from the Authorization header.

    In development mode (DEV_MODE=true), returns the fixed development user.
    Otherwise validates the ``Bearer <ID token>`` header.

    Returns:
        Normalized user claims, or None if the header is absent or the
        token does not validate
    """
    if settings.DEV_MODE:
        return dev_user_claims()

    if not authorization:
        return None

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Rejected malformed Authorization header")
        return None

    try:
        payload = await validate_token(parts[1])
        return extract_user_claims(payload)
    except UnauthorizedException as e:
        logger.info(f"Rejected token: {e.message}")
        return None


TokenClaims = Annotated[dict[str, Any] | None, Depends(get_token_claims)]


async def get_optional_user(
    request: Request,
    db: DbSession,
    claims: TokenClaims,
) -> User | None:
    """
    Dependency to optionally get the current user.

    Authenticated callers are upserted into the users table and stored on
    ``request.state.user``. Anonymous callers get None.
    """
    if claims is None:
        return None

    user = await UserService(db).upsert_from_claims(claims)
    request.state.user = user
    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """
    Dependency to get the current authenticated user.

    Raises:
        UnauthorizedException: If no valid identity was presented
    """
    if user is None:
        raise UnauthorizedException()
    return user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[User | None, Depends(get_optional_user)]
