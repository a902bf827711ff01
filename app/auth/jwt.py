"""
OpenID Connect ID token validation with JWKS caching.
"""

import logging
import time
from typing import Any

import httpx
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from app.config import get_settings
from app.core.exceptions import UnauthorizedException

logger = logging.getLogger(__name__)
settings = get_settings()


# JWKS cache
_jwks_cache: dict[str, Any] = {}
_jwks_cache_time: float = 0


async def fetch_jwks() -> dict[str, Any]:
    """
    Fetch the identity provider's JSON Web Key Set.
    The key set is cached for JWKS_CACHE_TTL seconds.

    Returns:
        JWKS dictionary with public keys

    Raises:
        UnauthorizedException: If JWKS cannot be fetched and nothing is cached
    """
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()
    if _jwks_cache and (current_time - _jwks_cache_time) < settings.JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(settings.OAUTH_JWKS_URL, timeout=10.0)
            response.raise_for_status()

            _jwks_cache = response.json()
            _jwks_cache_time = current_time
            return _jwks_cache

    except httpx.HTTPError as e:
        # A stale key set is better than rejecting every request
        if _jwks_cache:
            logger.warning(f"JWKS refresh failed, using cached keys: {e}")
            return _jwks_cache
        logger.error(f"Failed to fetch JWKS from {settings.OAUTH_JWKS_URL}: {e}")
        raise UnauthorizedException("Unable to verify token")


def get_rsa_key(jwks: dict[str, Any], kid: str) -> dict[str, Any] | None:
    """
    Get RSA public key from JWKS by key ID.

    Args:
        jwks: JWKS dictionary
        kid: Key ID from JWT header

    Returns:
        RSA key dictionary or None if not found
    """
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return {
                "kty": key.get("kty"),
                "kid": key.get("kid"),
                "use": key.get("use"),
                "n": key.get("n"),
                "e": key.get("e"),
            }
    return None


async def validate_token(token: str) -> dict[str, Any]:
    """
    Validate an OpenID Connect ID token.

    Checks the RS256 signature against the provider's JWKS, then
    expiry, issuer and audience.

    Args:
        token: Encoded ID token

    Returns:
        Decoded token claims

    Raises:
        UnauthorizedException: If the token is invalid
    """
    try:
        unverified_header = jwt.get_unverified_header(token)
        kid = unverified_header.get("kid")

        if not kid:
            raise UnauthorizedException("Token missing key ID")

        jwks = await fetch_jwks()
        rsa_key = get_rsa_key(jwks, kid)

        if not rsa_key:
            raise UnauthorizedException("Unable to find appropriate key")

        return jwt.decode(
            token,
            rsa_key,
            algorithms=["RS256"],
            audience=settings.OAUTH_AUDIENCE,
            issuer=settings.OAUTH_ISSUER,
            # ID tokens may carry an access-token hash we do not verify
            options={"verify_at_hash": False},
        )

    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired")
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")


def extract_user_claims(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Map validated ID token claims onto user fields.

    - sub: stable user identifier
    - email
    - given_name / family_name
    - picture: profile image URL

    Args:
        payload: Decoded token payload

    Returns:
        Normalized user claims dictionary

    Raises:
        UnauthorizedException: If the token has no subject
    """
    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedException("Token missing subject")

    return {
        "user_id": user_id,
        "email": payload.get("email"),
        "first_name": payload.get("given_name"),
        "last_name": payload.get("family_name"),
        "profile_image_url": payload.get("picture"),
    }


def dev_user_claims() -> dict[str, Any]:
    """Claims of the fixed development user used when DEV_MODE is on."""
    return {
        "user_id": settings.DEV_USER_ID,
        "email": settings.DEV_USER_EMAIL,
        "first_name": settings.DEV_USER_FIRST_NAME,
        "last_name": settings.DEV_USER_LAST_NAME,
        "profile_image_url": None,
    }
