"""
Tests for the post service.
"""

import pytest
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    PolicyViolationException,
    PostNotFoundException,
    ValidationException,
)
from app.models import Favorite, Post, Tag, TagCategory, post_tags
from app.services.personalization_service import PersonalizationService
from app.services.post_service import PostService


async def _count(db_session, column, *criteria) -> int:
    return await db_session.scalar(select(func.count(column)).where(*criteria))


@pytest.mark.asyncio
async def test_create_post_with_tags(db_session, seeded_tags, make_user):
    alice = await make_user("alice")
    service = PostService(db_session)

    post = await service.create(
        owner_id=alice.id,
        image_url="https://images.example.com/dog.jpg",
        caption="Good boy",
        tag_ids=[seeded_tags["犬"], seeded_tags["正面"], seeded_tags["犬"]],
    )

    entry = await service.get_by_id(post.id)
    assert entry.post.caption == "Good boy"
    assert entry.user.id == alice.id
    assert {t.name for t in entry.tags} == {"犬", "正面"}


@pytest.mark.asyncio
async def test_create_requires_classification_tag(db_session, seeded_tags, make_user):
    alice = await make_user("alice")

    with pytest.raises(PolicyViolationException):
        await PostService(db_session).create(
            owner_id=alice.id,
            image_url="https://images.example.com/side.jpg",
            caption=None,
            tag_ids=[seeded_tags["横"]],
        )

    assert await _count(db_session, Post.id) == 0


@pytest.mark.asyncio
async def test_create_rejects_unknown_tags(db_session, seeded_tags, make_user):
    alice = await make_user("alice")

    with pytest.raises(ValidationException) as exc_info:
        await PostService(db_session).create(
            owner_id=alice.id,
            image_url="https://images.example.com/x.jpg",
            caption=None,
            tag_ids=[seeded_tags["犬"], "no-such-tag"],
        )

    assert exc_info.value.details == {"tagIds": ["no-such-tag"]}


@pytest.mark.asyncio
async def test_create_rejects_empty_tags(db_session, make_user):
    alice = await make_user("alice")

    with pytest.raises(ValidationException):
        await PostService(db_session).create(alice.id, "https://images.example.com/x.jpg", None, [])


@pytest.mark.asyncio
async def test_create_is_atomic(db_session, seeded_tags, make_user):
    """A failing association insert leaves no post behind."""
    alice = await make_user("alice")
    dog = seeded_tags["犬"]
    # Tag passes validation but is gone by the time the association is written
    doomed = Tag(name="消える", category=TagCategory.CLASSIFICATION)
    db_session.add(doomed)
    await db_session.flush()
    doomed_id = doomed.id
    service = PostService(db_session)

    real_get_by_ids = service.tags.get_by_ids

    async def get_by_ids_then_drop(tag_ids):
        tags = await real_get_by_ids(tag_ids)
        await db_session.execute(delete(Tag).where(Tag.id == doomed_id))
        return tags

    service.tags.get_by_ids = get_by_ids_then_drop

    with pytest.raises(ValidationException) as exc_info:
        await service.create(alice.id, "https://images.example.com/x.jpg", None, [dog, doomed_id])

    assert exc_info.value.details == {"tagIds": [doomed_id]}
    assert await _count(db_session, Post.id) == 0
    assert await _count(db_session, post_tags.c.post_id) == 0


@pytest.mark.asyncio
async def test_create_store_fault_is_not_a_validation_error(db_session, seeded_tags):
    """An integrity failure unrelated to the tags propagates as a store error."""
    with pytest.raises(IntegrityError):
        await PostService(db_session).create(
            owner_id="no-such-user",
            image_url="https://images.example.com/x.jpg",
            caption=None,
            tag_ids=[seeded_tags["犬"]],
        )

    assert await _count(db_session, Post.id) == 0


@pytest.mark.asyncio
async def test_delete_by_owner(db_session, seeded_tags, make_user, make_post):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await make_post(alice, [seeded_tags["犬"], seeded_tags["耳"]])
    await PersonalizationService(db_session).add_favorite(bob.id, post.id)

    assert await PostService(db_session).delete(post.id, alice.id) is True

    assert await _count(db_session, Post.id) == 0
    assert await _count(db_session, post_tags.c.post_id) == 0
    assert await _count(db_session, Favorite.post_id) == 0


@pytest.mark.asyncio
async def test_delete_by_non_owner_keeps_post(db_session, seeded_tags, make_user, make_post):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await make_post(alice, [seeded_tags["犬"]])
    service = PostService(db_session)

    assert await service.delete(post.id, bob.id) is False
    assert await service.delete("missing", alice.id) is False
    assert (await service.get_by_id(post.id)).post.id == post.id


@pytest.mark.asyncio
async def test_tag_in_use_cannot_be_deleted(db_session, seeded_tags, make_user, make_post):
    alice = await make_user("alice")
    await make_post(alice, [seeded_tags["犬"]])

    with pytest.raises(IntegrityError):
        async with db_session.begin_nested():
            await db_session.execute(delete(Tag).where(Tag.id == seeded_tags["犬"]))


@pytest.mark.asyncio
async def test_get_by_id_missing(db_session):
    with pytest.raises(PostNotFoundException):
        await PostService(db_session).get_by_id("missing")


@pytest.mark.asyncio
async def test_list_by_owner_paginates_only_owned_posts(db_session, seeded_tags, make_user, make_post):
    """Pages of the owner listing are full even when others posted in between."""
    alice = await make_user("alice")
    bob = await make_user("bob")
    mine = []
    for _ in range(3):
        mine.append(await make_post(alice, [seeded_tags["犬"]]))
        await make_post(bob, [seeded_tags["猫"]])
    service = PostService(db_session)

    first = await service.list_by_owner(alice.id, 2, 0)
    second = await service.list_by_owner(alice.id, 2, 2)

    assert len(first) == 2
    assert len(second) == 1
    assert {p.post.id for p in first + second} == {p.id for p in mine}


@pytest.mark.asyncio
async def test_list_passes_filters(db_session, seeded_tags, make_user, make_post):
    alice = await make_user("alice")
    dog = await make_post(alice, [seeded_tags["犬"]])
    await make_post(alice, [seeded_tags["猫"]])

    posts = await PostService(db_session).list(20, 0, tag_ids=[seeded_tags["犬"]])

    assert [p.post.id for p in posts] == [dog.id]
