"""
Access gate for Animal Share API.
Validates OpenID Connect ID tokens and resolves the calling user.
"""

from app.auth.jwt import dev_user_claims, extract_user_claims, fetch_jwks, validate_token
from app.auth.dependencies import (
    get_current_user,
    get_optional_user,
    get_token_claims,
    CurrentUser,
    OptionalUser,
)

__all__ = [
    # Token functions
    "validate_token",
    "extract_user_claims",
    "fetch_jwks",
    "dev_user_claims",
    # Dependencies
    "get_token_claims",
    "get_current_user",
    "get_optional_user",
    # Type aliases
    "CurrentUser",
    "OptionalUser",
]
