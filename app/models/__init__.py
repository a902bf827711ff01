"""
SQLAlchemy ORM models for Animal Share API.
"""

from app.models.user import User
from app.models.tag import DEFAULT_TAGS, Tag, TagCategory
from app.models.post import Post
from app.models.associations import ExcludeTag, Favorite, post_tags

__all__ = [
    "User",
    "Tag",
    "TagCategory",
    "DEFAULT_TAGS",
    "Post",
    "Favorite",
    "ExcludeTag",
    "post_tags",
]
