"""
Auth endpoints.
"""

from fastapi import APIRouter

from app.auth.dependencies import CurrentUser
from app.schemas.error import ERROR_RESPONSES
from app.schemas.post import UserResponse

router = APIRouter()


@router.get("/user", response_model=UserResponse, responses={401: ERROR_RESPONSES[401]})
async def get_authenticated_user(user: CurrentUser):
    """Return the signed-in user's record."""
    return UserResponse.model_validate(user)
