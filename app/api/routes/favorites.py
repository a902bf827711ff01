"""
Favorite endpoints.
"""

from fastapi import APIRouter

from app.auth.dependencies import CurrentUser
from app.dependencies import DbSession
from app.schemas.error import ERROR_RESPONSES
from app.schemas.post import FavoriteCreate, SuccessResponse
from app.services.personalization_service import PersonalizationService

router = APIRouter()


@router.post("", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def add_favorite(
    data: FavoriteCreate,
    db: DbSession,
    user: CurrentUser,
):
    """Favorite a post. Favoriting it again has no effect."""
    await PersonalizationService(db).add_favorite(user.id, data.post_id)
    return SuccessResponse()


@router.delete("/{post_id}", response_model=SuccessResponse, responses={401: ERROR_RESPONSES[401]})
async def remove_favorite(
    post_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Remove a favorite. Succeeds even if the post was not a favorite."""
    await PersonalizationService(db).remove_favorite(user.id, post_id)
    return SuccessResponse()
