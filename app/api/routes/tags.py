"""
Tag endpoints - taxonomy listing and get-or-create.
"""

from fastapi import APIRouter, Query, Response, status

from app.auth.dependencies import CurrentUser
from app.dependencies import DbSession
from app.models.tag import TagCategory
from app.schemas.error import ERROR_RESPONSES
from app.schemas.tag import (
    TagCategoryInfo,
    TagCategoryListResponse,
    TagCreate,
    TagListResponse,
    TagResponse,
)
from app.services.tag_service import TagService

router = APIRouter()


@router.get("", response_model=TagListResponse, responses={400: ERROR_RESPONSES[400]})
async def list_tags(
    db: DbSession,
    category: str | None = Query(
        default=None,
        description="Filter by category (分類, 角度, パーツ, 自由)",
    ),
):
    """
    List tags ordered by category, then name.

    The taxonomy is small, so the whole list is returned without paging.
    """
    service = TagService(db)

    if category:
        tags = await service.list_by_category(category)
    else:
        tags = await service.list_all()

    items = [TagResponse.model_validate(tag) for tag in tags]
    return TagListResponse(items=items, total=len(items))


@router.get("/categories", response_model=TagCategoryListResponse)
async def list_tag_categories():
    """List the four tag categories."""
    return TagCategoryListResponse(
        items=[
            TagCategoryInfo(
                value=category,
                label=_CATEGORY_LABELS[category],
                description=_CATEGORY_DESCRIPTIONS[category],
                required=category == TagCategory.CLASSIFICATION,
            )
            for category in TagCategory
        ]
    )


@router.post(
    "",
    response_model=TagResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_tag(
    data: TagCreate,
    response: Response,
    db: DbSession,
    user: CurrentUser,
):
    """
    Get or create a tag.

    Returns 201 when the tag was created and 200 when an identical
    (name, category) tag already existed.
    """
    tag, created = await TagService(db).get_or_create_with_flag(data.name, data.category)
    if not created:
        response.status_code = status.HTTP_200_OK
    return TagResponse.model_validate(tag)


_CATEGORY_LABELS = {
    TagCategory.CLASSIFICATION: "Classification",
    TagCategory.ANGLE: "Angle",
    TagCategory.PART: "Part",
    TagCategory.FREE: "Free",
}

_CATEGORY_DESCRIPTIONS = {
    TagCategory.CLASSIFICATION: "Kind of animal. Every post needs at least one.",
    TagCategory.ANGLE: "Camera angle of the photo",
    TagCategory.PART: "Body part in focus",
    TagCategory.FREE: "Free-form user tags",
}
