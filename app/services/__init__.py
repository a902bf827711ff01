"""
Business logic services for Animal Share API.
Services handle core operations separate from API endpoints.
"""

from app.services.feed_service import FeedPost, FeedService, collapse_feed_rows
from app.services.personalization_service import PersonalizationService
from app.services.post_service import PostService
from app.services.tag_service import TagService
from app.services.user_service import UserService

__all__ = [
    "FeedPost",
    "FeedService",
    "PersonalizationService",
    "PostService",
    "TagService",
    "UserService",
    "collapse_feed_rows",
]
