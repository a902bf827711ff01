"""
Pydantic schemas for Post, User and Favorite request/response validation.
"""

from collections.abc import Sequence
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.tag import TagResponse
from app.services.feed_service import FeedPost


class UserResponse(BaseModel):
    """Public view of a user."""

    id: str
    email: str | None = None
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    profile_image_url: str | None = Field(default=None, alias="profileImageUrl")
    created_at: datetime | None = Field(default=None, alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class PostCreate(BaseModel):
    """Request schema for creating a post."""

    image_url: str = Field(
        ...,
        alias="imageUrl",
        min_length=1,
        max_length=2048,
        description="Reference to the uploaded image",
    )
    caption: str | None = Field(
        default=None,
        max_length=2000,
    )
    tag_ids: list[str] = Field(
        ...,
        alias="tagIds",
        min_length=1,
        description="Tag ids; at least one must be a classification tag",
    )

    model_config = ConfigDict(populate_by_name=True)


class PostResponse(BaseModel):
    """A post with its owner, tags and the caller's favorite flag."""

    id: str
    user_id: str = Field(alias="userId")
    image_url: str = Field(alias="imageUrl")
    caption: str | None = None
    created_at: datetime = Field(alias="createdAt")
    user: UserResponse
    tags: list[TagResponse]
    is_favorited: bool = Field(default=False, alias="isFavorited")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_feed(cls, entry: FeedPost) -> "PostResponse":
        """Build the response from a hydrated feed record."""
        post = entry.post
        return cls(
            id=post.id,
            user_id=post.user_id,
            image_url=post.image_url,
            caption=post.caption,
            created_at=post.created_at,
            user=UserResponse.model_validate(entry.user),
            tags=[TagResponse.model_validate(tag) for tag in entry.tags],
            is_favorited=entry.is_favorited,
        )


class FeedPageResponse(BaseModel):
    """One page of posts."""

    items: list[PostResponse]
    limit: int
    offset: int

    @classmethod
    def from_feed(cls, entries: Sequence[FeedPost], limit: int, offset: int) -> "FeedPageResponse":
        return cls(
            items=[PostResponse.from_feed(entry) for entry in entries],
            limit=limit,
            offset=offset,
        )


class FavoriteCreate(BaseModel):
    """Request schema for favoriting a post."""

    post_id: str = Field(..., alias="postId", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class SuccessResponse(BaseModel):
    success: bool = True
