"""
User service - keeps the users table in step with identity-provider claims.
"""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models import User
from app.services.base import BaseService

logger = logging.getLogger(__name__)

# Claim keys (as produced by extract_user_claims) copied onto the User row
PROFILE_FIELDS = ("email", "first_name", "last_name", "profile_image_url")


class UserService(BaseService):
    """Service class for user records."""

    async def get(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    async def upsert_from_claims(self, claims: dict[str, Any]) -> User:
        """
        Create the user on first sight, otherwise refresh their profile.

        Claims that are missing or None never overwrite stored values. An
        email already held by another user is not copied; the account is
        kept under its own subject id without it.

        Args:
            claims: Normalized user claims with at least ``user_id``

        Returns:
            The persisted User
        """
        user_id = claims["user_id"]
        profile = {
            field: claims[field] for field in PROFILE_FIELDS if claims.get(field) is not None
        }
        await self._drop_taken_email(profile, user_id)

        user = await self.get(user_id)
        if user is None:
            user = await self._insert(user_id, profile)
            if user is not None:
                logger.info(f"Registered user {user_id}")
                return user

            user = await self.get(user_id)
            if user is None:
                # Lost a race for the email rather than for the id
                await self._drop_taken_email(profile, user_id)
                async with self.db.begin_nested():
                    user = User(id=user_id, **profile)
                    self.db.add(user)
                logger.info(f"Registered user {user_id}")
                return user
            logger.debug(f"User {user_id} registered concurrently, re-reading")

        changed = False
        for field, value in profile.items():
            if getattr(user, field) != value:
                setattr(user, field, value)
                changed = True
        if changed:
            await self.db.flush()
            logger.debug(f"Refreshed profile for user {user_id}")

        return user

    async def _insert(self, user_id: str, profile: dict[str, Any]) -> User | None:
        """Insert the user in a SAVEPOINT. Returns None on a uniqueness violation."""
        try:
            async with self.db.begin_nested():
                user = User(id=user_id, **profile)
                self.db.add(user)
        except IntegrityError:
            return None
        return user

    async def _drop_taken_email(self, profile: dict[str, Any], user_id: str) -> None:
        email = profile.get("email")
        if email is None:
            return
        owner_id = await self.db.scalar(select(User.id).where(User.email == email))
        if owner_id is not None and owner_id != user_id:
            logger.warning(f"Email of user {user_id} already belongs to user {owner_id}, not stored")
            del profile["email"]
