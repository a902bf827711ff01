"""
Post service - Business logic for post operations.
Handles creation with tag validation, owner-only deletion and feed reads.
"""

import logging
from collections.abc import Iterable
from typing import Sequence

from sqlalchemy import delete, insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    PolicyViolationException,
    PostNotFoundException,
    ValidationException,
)
from app.models import Post, post_tags
from app.services.base import BaseService
from app.services.feed_service import FeedPost, FeedService
from app.services.tag_service import TagService, unique_ids

logger = logging.getLogger(__name__)


class PostService(BaseService):
    """Service class for post operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.tags = TagService(db)
        self.feed = FeedService(db)

    async def create(
        self,
        owner_id: str,
        image_url: str,
        caption: str | None,
        tag_ids: Iterable[str],
    ) -> Post:
        """
        Create a post together with its tag associations.

        The post row and every association row are written in one
        SAVEPOINT; if any of them fails nothing is kept.

        Args:
            owner_id: Creating user
            image_url: Image reference
            caption: Optional caption
            tag_ids: Tags to attach; duplicates are ignored

        Returns:
            Created Post model

        Raises:
            ValidationException: If no tags are given or a tag id is unknown,
                including a tag removed while the post was being written
            PolicyViolationException: If no classification tag is present
        """
        ids = unique_ids(tag_ids)
        if not ids:
            raise ValidationException("At least one tag is required")

        tags = await self.tags.get_by_ids(ids)
        if len(tags) != len(ids):
            missing = sorted(set(ids) - {tag.id for tag in tags})
            raise ValidationException("Unknown tag ids", details={"tagIds": missing})

        if not any(tag.is_classification for tag in tags):
            raise PolicyViolationException(
                "A post needs at least one classification (分類) tag"
            )

        post = Post(user_id=owner_id, image_url=image_url, caption=caption)
        try:
            async with self.db.begin_nested():
                self.db.add(post)
                await self.db.flush()
                await self.db.execute(
                    insert(post_tags),
                    [{"post_id": post.id, "tag_id": tag_id} for tag_id in ids],
                )
        except IntegrityError as e:
            logger.warning(f"Post creation for user {owner_id} rolled back: {e.orig}")
            # Only a tag removed since validation is the caller's fault
            remaining = await self.tags.get_by_ids(ids)
            if len(remaining) != len(ids):
                missing = sorted(set(ids) - {tag.id for tag in remaining})
                raise ValidationException("Unknown tag ids", details={"tagIds": missing})
            raise

        logger.info(f"Created post {post.id} for user {owner_id} with {len(ids)} tags")
        return post

    async def delete(self, post_id: str, caller_id: str) -> bool:
        """
        Delete a post owned by the caller.

        Tag associations and favorites go with it through ON DELETE CASCADE.

        Returns:
            True if a row was removed. A missing post and a post owned by
            someone else both give False.
        """
        result = await self.db.execute(
            delete(Post).where(Post.id == post_id, Post.user_id == caller_id)
        )
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted post {post_id} for user {caller_id}")
        return deleted

    async def get_by_id(self, post_id: str, viewer_id: str | None = None) -> FeedPost:
        """
        Get a post in feed shape.

        Raises:
            PostNotFoundException: If the post does not exist
        """
        post = await self.feed.get(post_id, viewer_id=viewer_id)
        if post is None:
            raise PostNotFoundException(post_id)
        return post

    async def list_by_owner(
        self,
        owner_id: str,
        limit: int,
        offset: int,
        viewer_id: str | None = None,
    ) -> Sequence[FeedPost]:
        """List posts owned by a user. The owner's own zoning is not applied."""
        return await self.feed.query(
            limit,
            offset,
            viewer_id=viewer_id,
            owner_id=owner_id,
            apply_viewer_exclusions=False,
        )

    async def list(
        self,
        limit: int,
        offset: int,
        tag_ids: Sequence[str] | None = None,
        exclude_tag_ids: Sequence[str] | None = None,
        viewer_id: str | None = None,
    ) -> Sequence[FeedPost]:
        """
        Fetch one feed page.

        Args:
            limit: Page size
            offset: Number of posts to skip
            tag_ids: Posts must carry all of these tags
            exclude_tag_ids: Posts carrying any of these tags are hidden
            viewer_id: Caller; their stored exclusions are applied too

        Returns:
            Posts ordered newest first
        """
        return await self.feed.query(
            limit,
            offset,
            include_tag_ids=tag_ids,
            exclude_tag_ids=exclude_tag_ids,
            viewer_id=viewer_id,
        )
