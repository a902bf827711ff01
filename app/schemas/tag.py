"""
Pydantic schemas for Tag request/response validation.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.tag import TagCategory


class TagResponse(BaseModel):
    """Response schema for a single tag."""

    id: str
    name: str
    category: TagCategory
    created_at: datetime = Field(alias="createdAt")

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class TagListResponse(BaseModel):
    """Response schema for tag listing."""

    items: list[TagResponse]
    total: int


class TagCreate(BaseModel):
    """Request schema for get-or-create of a tag."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Tag name, matched case-sensitively",
        examples=["しっぽ"],
    )
    category: TagCategory = Field(
        ...,
        description="One of 分類, 角度, パーツ, 自由",
    )

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        """Reject names that are only whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Tag name must not be blank")
        return v


class TagCategoryInfo(BaseModel):
    """One tag category with a short description."""

    value: TagCategory
    label: str
    description: str
    required: bool = Field(
        default=False,
        description="Whether every post needs at least one tag of this category",
    )


class TagCategoryListResponse(BaseModel):
    items: list[TagCategoryInfo]


class ExcludeTagsRequest(BaseModel):
    """Request schema for adding or replacing excluded tags."""

    tag_ids: list[str] = Field(
        ...,
        alias="tagIds",
        description="Tag ids to hide from the feed",
    )

    model_config = ConfigDict(populate_by_name=True)


class AddExcludeTagsRequest(ExcludeTagsRequest):
    """POST variant: at least one id is required."""

    tag_ids: list[str] = Field(..., alias="tagIds", min_length=1)
