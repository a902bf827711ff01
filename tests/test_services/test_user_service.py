"""
Tests for user upsert from identity claims.
"""

import pytest
from sqlalchemy import func, select

from app.models import User
from app.services.user_service import UserService


@pytest.mark.asyncio
async def test_upsert_creates_then_refreshes(db_session):
    service = UserService(db_session)

    created = await service.upsert_from_claims({"user_id": "u1", "email": "u1@example.com", "first_name": "Old"})
    updated = await service.upsert_from_claims({"user_id": "u1", "first_name": "New", "last_name": None})

    assert created.id == updated.id == "u1"
    assert updated.first_name == "New"
    # Missing claims do not wipe stored values
    assert updated.email == "u1@example.com"
    assert await db_session.scalar(select(func.count(User.id))) == 1


@pytest.mark.asyncio
async def test_upsert_recovers_when_user_appears_concurrently(db_session, monkeypatch):
    service = UserService(db_session)
    await service.upsert_from_claims({"user_id": "u2"})
    await db_session.flush()
    db_session.expunge_all()

    real_get = service.get
    calls = []

    async def stale_get(user_id):
        calls.append(user_id)
        if len(calls) == 1:
            return None
        return await real_get(user_id)

    monkeypatch.setattr(service, "get", stale_get)

    user = await service.upsert_from_claims({"user_id": "u2", "first_name": "Later"})

    assert user.id == "u2"
    assert user.first_name == "Later"
    assert await db_session.scalar(select(func.count(User.id))) == 1


@pytest.mark.asyncio
async def test_get_unknown_user(db_session):
    assert await UserService(db_session).get("nobody") is None


@pytest.mark.asyncio
async def test_upsert_new_subject_with_taken_email(db_session):
    service = UserService(db_session)
    await service.upsert_from_claims({"user_id": "sub-1", "email": "shared@example.com"})

    user = await service.upsert_from_claims(
        {"user_id": "sub-2", "email": "shared@example.com", "first_name": "Second"}
    )

    assert user.id == "sub-2"
    assert user.email is None
    assert user.first_name == "Second"
    assert (await service.get("sub-1")).email == "shared@example.com"
    assert await db_session.scalar(select(func.count(User.id))) == 2


@pytest.mark.asyncio
async def test_refresh_keeps_email_when_new_one_is_taken(db_session):
    service = UserService(db_session)
    await service.upsert_from_claims({"user_id": "u1", "email": "one@example.com"})
    await service.upsert_from_claims({"user_id": "u2", "email": "two@example.com"})

    user = await service.upsert_from_claims(
        {"user_id": "u2", "email": "one@example.com", "last_name": "Moved"}
    )

    assert user.email == "two@example.com"
    assert user.last_name == "Moved"


@pytest.mark.asyncio
async def test_upsert_recovers_when_email_is_taken_concurrently(db_session, monkeypatch):
    service = UserService(db_session)
    await service.upsert_from_claims({"user_id": "first", "email": "race@example.com"})

    real_drop = service._drop_taken_email
    calls = []

    async def stale_drop(profile, user_id):
        # First check misses the competing row
        calls.append(user_id)
        if len(calls) > 1:
            await real_drop(profile, user_id)

    monkeypatch.setattr(service, "_drop_taken_email", stale_drop)

    user = await service.upsert_from_claims({"user_id": "second", "email": "race@example.com"})

    assert user.id == "second"
    assert user.email is None
    assert len(calls) == 2
