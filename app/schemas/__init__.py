"""
Pydantic schemas for request/response validation.
"""

from app.schemas.post import (
    FavoriteCreate,
    FeedPageResponse,
    PostCreate,
    PostResponse,
    SuccessResponse,
    UserResponse,
)
from app.schemas.tag import (
    AddExcludeTagsRequest,
    ExcludeTagsRequest,
    TagCategoryInfo,
    TagCategoryListResponse,
    TagCreate,
    TagListResponse,
    TagResponse,
)
from app.schemas.error import ERROR_RESPONSES, ErrorResponse

__all__ = [
    # Post schemas
    "PostCreate",
    "PostResponse",
    "FeedPageResponse",
    "FavoriteCreate",
    "UserResponse",
    "SuccessResponse",
    # Tag schemas
    "TagCreate",
    "TagResponse",
    "TagListResponse",
    "TagCategoryInfo",
    "TagCategoryListResponse",
    "ExcludeTagsRequest",
    "AddExcludeTagsRequest",
    # Error schemas
    "ErrorResponse",
    "ERROR_RESPONSES",
]
