"""
Personalization service - favorites and per-user tag exclusions (zoning).
"""

import logging
from collections.abc import Iterable
from typing import Sequence

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    PostNotFoundException,
    TagNotFoundException,
    ValidationException,
)
from app.models import ExcludeTag, Favorite, Post, Tag
from app.services.base import BaseService
from app.services.feed_service import FeedPost, FeedService
from app.services.tag_service import TagService, unique_ids

logger = logging.getLogger(__name__)


class PersonalizationService(BaseService):
    """
    Service class for per-user state.

    Every add/remove here is idempotent: repeating a call leaves the same
    rows behind and never raises.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.tags = TagService(db)
        self.feed = FeedService(db)

    # Favorites

    async def add_favorite(self, user_id: str, post_id: str) -> bool:
        """
        Mark a post as a favorite of the user.

        Returns:
            True if the favorite was added, False if it already existed

        Raises:
            PostNotFoundException: If the post does not exist
        """
        if await self.db.get(Post, post_id) is None:
            raise PostNotFoundException(post_id)

        async def exists() -> bool:
            return await self._favorite_exists(user_id, post_id)

        return await self._insert_unless_exists(
            insert(Favorite).values(user_id=user_id, post_id=post_id),
            exists,
        )

    async def remove_favorite(self, user_id: str, post_id: str) -> bool:
        """Remove a favorite. Returns False if there was nothing to remove."""
        result = await self.db.execute(
            delete(Favorite).where(
                Favorite.user_id == user_id,
                Favorite.post_id == post_id,
            )
        )
        return result.rowcount > 0

    async def list_favorites(
        self,
        user_id: str,
        limit: int,
        offset: int,
    ) -> Sequence[FeedPost]:
        """
        List the user's favorite posts, most recently favorited first.

        Args:
            user_id: Owner of the favorites
            limit: Page size
            offset: Number of favorites to skip

        Returns:
            Posts in feed shape, all with is_favorited set
        """
        if limit < 0 or offset < 0:
            raise ValidationException("limit and offset must be non-negative")

        query = (
            select(Favorite.post_id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.post_id.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        post_ids = result.scalars().all()

        posts = await self.feed.hydrate(post_ids, viewer_id=user_id)
        for post in posts:
            post.is_favorited = True
        return posts

    # Exclude tags

    async def add_exclude_tag(self, user_id: str, tag_id: str) -> bool:
        """
        Hide a tag from the user's feed.

        Returns:
            True if the exclusion was added, False if it already existed

        Raises:
            TagNotFoundException: If the tag does not exist
        """
        if await self.db.get(Tag, tag_id) is None:
            raise TagNotFoundException(tag_id)

        async def exists() -> bool:
            return await self._exclusion_exists(user_id, tag_id)

        return await self._insert_unless_exists(
            insert(ExcludeTag).values(user_id=user_id, tag_id=tag_id),
            exists,
        )

    async def remove_exclude_tag(self, user_id: str, tag_id: str) -> bool:
        """Stop hiding a tag. Returns False if it was not excluded."""
        result = await self.db.execute(
            delete(ExcludeTag).where(
                ExcludeTag.user_id == user_id,
                ExcludeTag.tag_id == tag_id,
            )
        )
        return result.rowcount > 0

    async def set_exclude_tags(self, user_id: str, tag_ids: Iterable[str]) -> Sequence[Tag]:
        """
        Replace the user's exclusion set.

        The delete and the inserts share one SAVEPOINT, so a failure keeps
        the previous set. An empty list clears it.

        Returns:
            The new exclusion set, ordered by category and name

        Raises:
            ValidationException: If any tag id is unknown
        """
        ids = unique_ids(tag_ids)
        tags = await self.tags.get_by_ids(ids)
        if len(tags) != len(ids):
            missing = sorted(set(ids) - {tag.id for tag in tags})
            raise ValidationException("Unknown tag ids", details={"tagIds": missing})

        async with self.db.begin_nested():
            await self.db.execute(delete(ExcludeTag).where(ExcludeTag.user_id == user_id))
            if ids:
                await self.db.execute(
                    insert(ExcludeTag),
                    [{"user_id": user_id, "tag_id": tag_id} for tag_id in ids],
                )

        logger.info(f"Replaced exclude tags for user {user_id} ({len(ids)} tags)")
        return await self.list_exclude_tags(user_id)

    async def list_exclude_tags(self, user_id: str) -> Sequence[Tag]:
        """List the user's excluded tags ordered by category, then name."""
        query = (
            select(Tag)
            .join(ExcludeTag, ExcludeTag.tag_id == Tag.id)
            .where(ExcludeTag.user_id == user_id)
            .order_by(Tag.category.asc(), Tag.name.asc())
        )
        result = await self.db.execute(query)
        return result.scalars().all()

    async def _favorite_exists(self, user_id: str, post_id: str) -> bool:
        result = await self.db.execute(
            select(Favorite.post_id).where(
                Favorite.user_id == user_id,
                Favorite.post_id == post_id,
            )
        )
        return result.first() is not None

    async def _exclusion_exists(self, user_id: str, tag_id: str) -> bool:
        result = await self.db.execute(
            select(ExcludeTag.tag_id).where(
                ExcludeTag.user_id == user_id,
                ExcludeTag.tag_id == tag_id,
            )
        )
        return result.first() is not None
