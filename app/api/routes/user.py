"""
Endpoints scoped to the signed-in user: their favorites and their posts.
"""

from fastapi import APIRouter

from app.auth.dependencies import CurrentUser
from app.dependencies import DbSession, Page
from app.schemas.error import ERROR_RESPONSES
from app.schemas.post import FeedPageResponse
from app.services.personalization_service import PersonalizationService
from app.services.post_service import PostService

router = APIRouter()


@router.get("/favorites", response_model=FeedPageResponse, responses={401: ERROR_RESPONSES[401]})
async def list_my_favorites(
    db: DbSession,
    user: CurrentUser,
    page: Page,
):
    """List the caller's favorite posts, most recently favorited first."""
    posts = await PersonalizationService(db).list_favorites(user.id, page.limit, page.offset)
    return FeedPageResponse.from_feed(posts, page.limit, page.offset)


@router.get("/posts", response_model=FeedPageResponse, responses={401: ERROR_RESPONSES[401]})
async def list_my_posts(
    db: DbSession,
    user: CurrentUser,
    page: Page,
):
    """List the caller's own posts, newest first. Excluded tags do not apply here."""
    posts = await PostService(db).list_by_owner(
        user.id, page.limit, page.offset, viewer_id=user.id
    )
    return FeedPageResponse.from_feed(posts, page.limit, page.offset)
