"""
API Router - Aggregates all endpoints.
Base Path: /api
"""

from fastapi import APIRouter

from app.api.routes import auth, exclude_tags, favorites, health, posts, tags, user

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(health.router, tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(posts.router, prefix="/posts", tags=["posts"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(user.router, prefix="/user", tags=["user"])
api_router.include_router(exclude_tags.router, prefix="/exclude-tags", tags=["exclude-tags"])
