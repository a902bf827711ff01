"""
Feed query engine - filtered, paginated, denormalized post listings.

A feed request runs in two steps:

1. A posts-only query applies the tag filters, ordering and limit/offset,
   yielding the ids on the requested page. Tags are never joined here, so a
   post counts once toward the page no matter how many tags it has.
2. A hydration query joins the page's posts to their owner, every tag and
   the viewer's favorite row. That join fans out to one row per
   (post, tag); collapse_feed_rows() reduces it back to one record per post.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from sqlalchemy import Select, and_, distinct, func, select

from app.core.exceptions import ValidationException
from app.models import ExcludeTag, Favorite, Post, Tag, User, post_tags
from app.services.base import BaseService
from app.services.tag_service import unique_ids

logger = logging.getLogger(__name__)


@dataclass
class FeedPost:
    """A post with its owner, all of its tags and the viewer's favorite flag."""
    post: Post
    user: User
    tags: list[Tag] = field(default_factory=list)
    is_favorited: bool = False


@dataclass(frozen=True)
class FeedRow:
    """One row of the post/tag join fan-out. ``tag`` is None for untagged posts."""
    post: Post
    user: User
    tag: Tag | None
    is_favorited: bool = False


def collapse_feed_rows(rows: Iterable[FeedRow]) -> list[FeedPost]:
    """
    Group join rows by post id into one FeedPost per post.

    Posts keep the order in which they first appear. Tags are
    de-duplicated by id, and a post is favorited if any of its rows is.
    """
    collapsed: dict[str, FeedPost] = {}
    seen_tags: dict[str, set[str]] = {}

    for row in rows:
        post_id = row.post.id
        entry = collapsed.get(post_id)
        if entry is None:
            entry = FeedPost(post=row.post, user=row.user, is_favorited=row.is_favorited)
            collapsed[post_id] = entry
            seen_tags[post_id] = set()
        elif row.is_favorited:
            entry.is_favorited = True

        if row.tag is not None and row.tag.id not in seen_tags[post_id]:
            seen_tags[post_id].add(row.tag.id)
            entry.tags.append(row.tag)

    return list(collapsed.values())


class FeedService(BaseService):
    """Read path shared by the post, user and favorite listings."""

    async def query(
        self,
        limit: int,
        offset: int,
        include_tag_ids: Sequence[str] | None = None,
        exclude_tag_ids: Sequence[str] | None = None,
        viewer_id: str | None = None,
        owner_id: str | None = None,
        apply_viewer_exclusions: bool = True,
    ) -> list[FeedPost]:
        """
        Fetch one page of the feed.

        Args:
            limit: Maximum number of posts on the page
            offset: Number of posts to skip
            include_tag_ids: Posts must carry every one of these tags
            exclude_tag_ids: Posts carrying any of these tags are dropped
            viewer_id: Caller, used for favorite flags and stored exclusions
            owner_id: Restrict to posts owned by this user
            apply_viewer_exclusions: Whether the viewer's zoning applies

        Returns:
            Posts ordered newest first, one record per post
        """
        if limit < 0 or offset < 0:
            raise ValidationException("limit and offset must be non-negative")

        excluded = set(exclude_tag_ids or ())
        if viewer_id and apply_viewer_exclusions:
            excluded |= await self.viewer_excluded_tag_ids(viewer_id)

        page_query = (
            self._filtered_post_ids(include_tag_ids, excluded, owner_id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(page_query)
        post_ids = result.scalars().all()
        logger.debug(
            f"Feed page limit={limit} offset={offset} excluded={len(excluded)}: {len(post_ids)} posts"
        )

        return await self.hydrate(post_ids, viewer_id=viewer_id)

    async def get(self, post_id: str, viewer_id: str | None = None) -> FeedPost | None:
        """Fetch a single post in feed shape, or None if it does not exist."""
        posts = await self.hydrate([post_id], viewer_id=viewer_id)
        return posts[0] if posts else None

    async def hydrate(
        self,
        post_ids: Sequence[str],
        viewer_id: str | None = None,
    ) -> list[FeedPost]:
        """
        Load owner, tags and favorite flag for the given posts.

        The result follows the order of ``post_ids``; ids with no post are
        skipped.
        """
        ids = unique_ids(post_ids)
        if not ids:
            return []

        columns = [Post, User, Tag]
        if viewer_id:
            columns.append(Favorite.user_id)

        query = (
            select(*columns)
            .join(User, User.id == Post.user_id)
            .outerjoin(post_tags, post_tags.c.post_id == Post.id)
            .outerjoin(Tag, Tag.id == post_tags.c.tag_id)
        )
        if viewer_id:
            query = query.outerjoin(
                Favorite,
                and_(Favorite.post_id == Post.id, Favorite.user_id == viewer_id),
            )
        query = query.where(Post.id.in_(ids)).order_by(Tag.category.asc(), Tag.name.asc())

        result = await self.db.execute(query)
        rows = [
            FeedRow(
                post=row[0],
                user=row[1],
                tag=row[2],
                is_favorited=viewer_id is not None and row[3] is not None,
            )
            for row in result.all()
        ]

        by_id = {entry.post.id: entry for entry in collapse_feed_rows(rows)}
        return [by_id[post_id] for post_id in ids if post_id in by_id]

    def _filtered_post_ids(
        self,
        include_tag_ids: Sequence[str] | None,
        excluded_tag_ids: set[str],
        owner_id: str | None,
    ) -> Select:
        """Build the posts-only id query with every filter and the feed ordering."""
        query = select(Post.id)

        # AND filter: the number of distinct matching tags must equal the
        # number of requested tags. Duplicates are dropped first so {A, A}
        # means {A}.
        include = unique_ids(include_tag_ids or ())
        if include:
            posts_with_all_tags = (
                select(post_tags.c.post_id)
                .where(post_tags.c.tag_id.in_(include))
                .group_by(post_tags.c.post_id)
                .having(func.count(distinct(post_tags.c.tag_id)) == len(include))
            )
            query = query.where(Post.id.in_(posts_with_all_tags))

        if excluded_tag_ids:
            posts_with_excluded_tags = select(post_tags.c.post_id).where(
                post_tags.c.tag_id.in_(sorted(excluded_tag_ids))
            )
            query = query.where(Post.id.not_in(posts_with_excluded_tags))

        if owner_id:
            query = query.where(Post.user_id == owner_id)

        # id breaks ties between equal timestamps so pages are stable
        return query.order_by(Post.created_at.desc(), Post.id.desc())

    async def viewer_excluded_tag_ids(self, viewer_id: str) -> set[str]:
        """Ids of the tags the viewer has excluded from their feed."""
        result = await self.db.execute(
            select(ExcludeTag.tag_id).where(ExcludeTag.user_id == viewer_id)
        )
        return set(result.scalars().all())
