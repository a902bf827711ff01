"""
Pytest configuration and fixtures for Animal Share API tests.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable
from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio
from fastapi import Header
from httpx import AsyncClient, ASGITransport
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.auth.dependencies import get_token_claims
from app.db.base import Base
from app.db.session import build_engine, get_db
from app.main import app
from app.models import Post, User, post_tags
from app.services.tag_service import TagService
from app.services.user_service import UserService


def claims_for(user_id: str) -> dict[str, Any]:
    """Identity claims of a test user, keyed off their id."""
    return {
        "user_id": user_id,
        "email": f"{user_id}@example.com",
        "first_name": user_id.title(),
        "last_name": "Tester",
        "profile_image_url": None,
    }


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a test database engine backed by a fresh SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    ``Authorization: Bearer <user-id>`` authenticates as that user;
    requests without the header are anonymous.
    """

    async def override_get_db():
        yield db_session

    async def override_get_token_claims(
        authorization: str | None = Header(default=None),
    ) -> dict[str, Any] | None:
        if not authorization:
            return None
        scheme, _, user_id = authorization.partition(" ")
        if scheme.lower() != "bearer" or not user_id:
            return None
        return claims_for(user_id)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_claims] = override_get_token_claims

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Authorization headers for the main test user."""
    return {"Authorization": "Bearer alice"}


@pytest.fixture
def other_auth_headers() -> dict[str, str]:
    """Authorization headers for a second, unrelated user."""
    return {"Authorization": "Bearer bob"}


@pytest_asyncio.fixture
async def seeded_tags(db_session) -> dict[str, str]:
    """Seed the default taxonomy and map each tag name to its id."""
    service = TagService(db_session)
    await service.seed_defaults()
    return {tag.name: tag.id for tag in await service.list_all()}


@pytest_asyncio.fixture
async def make_user(db_session) -> Callable[[str], Awaitable[User]]:
    """Factory registering a user the way the access gate does."""

    async def _make_user(user_id: str) -> User:
        return await UserService(db_session).upsert_from_claims(claims_for(user_id))

    return _make_user


@pytest_asyncio.fixture
async def make_post(db_session) -> Callable[..., Awaitable[Post]]:
    """
    Factory inserting a post with tags directly.

    Unlike PostService.create it skips tag validation and accepts an
    explicit creation time, so ordering can be controlled.
    """

    async def _make_post(
        owner: User,
        tag_ids: Iterable[str],
        created_at: datetime | None = None,
        caption: str | None = None,
    ) -> Post:
        post = Post(
            user_id=owner.id,
            image_url=f"https://images.example.com/{owner.id}.jpg",
            caption=caption,
        )
        if created_at is not None:
            post.created_at = created_at
        db_session.add(post)
        await db_session.flush()

        rows = [{"post_id": post.id, "tag_id": tag_id} for tag_id in tag_ids]
        if rows:
            await db_session.execute(insert(post_tags), rows)
        return post

    return _make_post
