"""
Post endpoints - feed listing, single post, create and delete.
"""

from fastapi import APIRouter, Query, status

from app.auth.dependencies import CurrentUser, OptionalUser
from app.core.exceptions import PostNotFoundException
from app.dependencies import DbSession, Page
from app.schemas.error import ERROR_RESPONSES
from app.schemas.post import FeedPageResponse, PostCreate, PostResponse, SuccessResponse
from app.services.post_service import PostService

router = APIRouter()


@router.get("", response_model=FeedPageResponse, responses={400: ERROR_RESPONSES[400]})
async def list_posts(
    db: DbSession,
    user: OptionalUser,
    page: Page,
    tag_ids: list[str] | None = Query(
        default=None,
        alias="tagIds",
        description="Only posts carrying all of these tags (repeatable)",
    ),
    exclude_tag_ids: list[str] | None = Query(
        default=None,
        alias="excludeTagIds",
        description="Hide posts carrying any of these tags (repeatable)",
    ),
):
    """
    Get a feed page, newest first.

    Signed-in callers get their favorite flags and have their excluded
    tags applied on top of ``excludeTagIds``.
    """
    posts = await PostService(db).list(
        page.limit,
        page.offset,
        tag_ids=tag_ids,
        exclude_tag_ids=exclude_tag_ids,
        viewer_id=user.id if user else None,
    )
    return FeedPageResponse.from_feed(posts, page.limit, page.offset)


@router.get("/{post_id}", response_model=PostResponse, responses={404: ERROR_RESPONSES[404]})
async def get_post(
    post_id: str,
    db: DbSession,
    user: OptionalUser,
):
    """Get a single post with its owner and tags."""
    post = await PostService(db).get_by_id(post_id, viewer_id=user.id if user else None)
    return PostResponse.from_feed(post)


@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
async def create_post(
    data: PostCreate,
    db: DbSession,
    user: CurrentUser,
):
    """
    Create a post.

    At least one tag is required and one of the tags must be a
    classification (分類) tag.
    """
    service = PostService(db)
    post = await service.create(
        owner_id=user.id,
        image_url=data.image_url,
        caption=data.caption,
        tag_ids=data.tag_ids,
    )
    return PostResponse.from_feed(await service.get_by_id(post.id, viewer_id=user.id))


@router.delete("/{post_id}", response_model=SuccessResponse, responses=ERROR_RESPONSES)
async def delete_post(
    post_id: str,
    db: DbSession,
    user: CurrentUser,
):
    """
    Delete one of the caller's posts.

    A post that belongs to someone else is reported as not found.
    """
    if not await PostService(db).delete(post_id, caller_id=user.id):
        raise PostNotFoundException(post_id)
    return SuccessResponse()
