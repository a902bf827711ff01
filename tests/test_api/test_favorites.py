"""
Tests for favorite endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_favorite_flow(client: AsyncClient, auth_headers, seeded_tags, make_user, make_post):
    bob = await make_user("bob")
    post = await make_post(bob, [seeded_tags["犬"]])

    response = await client.post("/api/favorites", json={"postId": post.id}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    # Favoriting twice is not an error
    again = await client.post("/api/favorites", json={"postId": post.id}, headers=auth_headers)
    assert again.status_code == 200

    single = await client.get(f"/api/posts/{post.id}", headers=auth_headers)
    assert single.json()["isFavorited"] is True

    favorites = await client.get("/api/user/favorites", headers=auth_headers)
    items = favorites.json()["items"]
    assert [p["id"] for p in items] == [post.id]
    assert items[0]["isFavorited"] is True

    removed = await client.delete(f"/api/favorites/{post.id}", headers=auth_headers)
    assert removed.status_code == 200
    favorites = await client.get("/api/user/favorites", headers=auth_headers)
    assert favorites.json()["items"] == []


@pytest.mark.asyncio
async def test_favorite_flag_false_for_anonymous(client: AsyncClient, auth_headers, seeded_tags, make_user, make_post):
    bob = await make_user("bob")
    post = await make_post(bob, [seeded_tags["犬"]])
    await client.post("/api/favorites", json={"postId": post.id}, headers=auth_headers)

    response = await client.get("/api/posts")

    assert response.json()["items"][0]["isFavorited"] is False


@pytest.mark.asyncio
async def test_favorite_unknown_post(client: AsyncClient, auth_headers):
    response = await client.post("/api/favorites", json={"postId": "missing"}, headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_favorite_requires_post_id(client: AsyncClient, auth_headers):
    response = await client.post("/api/favorites", json={}, headers=auth_headers)

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_remove_favorite_not_favorited(client: AsyncClient, auth_headers):
    response = await client.delete("/api/favorites/missing", headers=auth_headers)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_favorites_require_auth(client: AsyncClient):
    assert (await client.post("/api/favorites", json={"postId": "x"})).status_code == 401
    assert (await client.get("/api/user/favorites")).status_code == 401
