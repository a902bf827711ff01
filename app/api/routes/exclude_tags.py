"""
Exclude-tag (zoning) endpoints.
Tags listed here are hidden from the caller's feed.
"""

from fastapi import APIRouter

from app.auth.dependencies import CurrentUser
from app.dependencies import DbSession
from app.schemas.error import ERROR_RESPONSES
from app.schemas.post import SuccessResponse
from app.schemas.tag import (
    AddExcludeTagsRequest,
    ExcludeTagsRequest,
    TagListResponse,
    TagResponse,
)
from app.services.personalization_service import PersonalizationService
from app.services.tag_service import unique_ids

router = APIRouter()


@router.get("", response_model=TagListResponse, responses={401: ERROR_RESPONSES[401]})
async def list_exclude_tags(
    db: DbSession,
    user: CurrentUser,
):
    """List the caller's excluded tags."""
    tags = await PersonalizationService(db).list_exclude_tags(user.id)
    items = [TagResponse.model_validate(tag) for tag in tags]
    return TagListResponse(items=items, total=len(items))


@router.post("", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def add_exclude_tags(
    data: AddExcludeTagsRequest,
    db: DbSession,
    user: CurrentUser,
):
    """
    Add tags to the caller's exclusions.

    Tags that are already excluded are left as they are. Blank ids are
    ignored.
    """
    service = PersonalizationService(db)
    for tag_id in unique_ids(t.strip() for t in data.tag_ids):
        if tag_id:
            await service.add_exclude_tag(user.id, tag_id)
    return SuccessResponse()


@router.put("", response_model=TagListResponse, responses=ERROR_RESPONSES)
async def replace_exclude_tags(
    data: ExcludeTagsRequest,
    db: DbSession,
    user: CurrentUser,
):
    """Replace the caller's exclusions. An empty list clears them."""
    tags = await PersonalizationService(db).set_exclude_tags(user.id, data.tag_ids)
    items = [TagResponse.model_validate(tag) for tag in tags]
    return TagListResponse(items=items, total=len(items))


@router.delete("/{tag_id}", response_model=SuccessResponse, responses={401: ERROR_RESPONSES[401]})
async def remove_exclude_tag(
    tag_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """Stop excluding a tag. Succeeds even if it was not excluded."""
    await PersonalizationService(db).remove_exclude_tag(user.id, tag_id)
    return SuccessResponse()
