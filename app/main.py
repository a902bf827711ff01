"""
Animal Share API - Main Application Entry Point.

FastAPI application for a tag-based animal photo sharing service:
posts annotated with a fixed tag taxonomy, a tag-filtered feed,
favorites and per-user tag exclusions.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.api.routes.router import api_router
from app.config import get_settings
from app.core.exceptions import AnimalShareException
from app.services.metrics import MetricsMiddleware

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_default_tags() -> None:
    """Create any missing default tags in a session of its own."""
    from app.db.session import AsyncSessionLocal
    from app.services.tag_service import TagService

    async with AsyncSessionLocal() as session:
        created = await TagService(session).seed_defaults()
        await session.commit()
    logger.info(f"Default tags seeded ({created} created)")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.PROJECT_NAME} v{__version__}")
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"Dev mode (bypass auth): {settings.DEV_MODE}")

    from app.db.session import engine, is_using_sqlite_fallback

    # Auto-create tables for SQLite (dev mode); PostgreSQL uses migrations
    if is_using_sqlite_fallback():
        logger.warning("[DEV MODE] Using SQLite fallback database")
        from app.db.base import Base
        from app import models  # noqa: F401
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Development database ready")
    else:
        logger.info("Database: PostgreSQL")

    if settings.SEED_DEFAULT_TAGS:
        await seed_default_tags()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.PROJECT_NAME}")
    await engine.dispose()


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
## Animal Share API

Share animal photos and find them again by tag.

### Features
- **Posts**: Image reference, caption and tags; deletable by the owner only
- **Tag Taxonomy**: 分類 (classification), 角度 (angle), パーツ (part), 自由 (free)
- **Feed**: Newest first, AND-filtered by tag, with per-request exclusions
- **Favorites**: Bookmark posts and list them later
- **Zoning**: Tags a user never wants to see are hidden from their feed
- **Authentication**: OpenID Connect ID tokens
    """,
    version=__version__,
    openapi_tags=[
        {"name": "posts", "description": "Post feed and management"},
        {"name": "tags", "description": "Tag taxonomy"},
        {"name": "favorites", "description": "Favorite posts"},
        {"name": "user", "description": "The signed-in user's content"},
        {"name": "exclude-tags", "description": "Per-user tag exclusions (zoning)"},
        {"name": "auth", "description": "Authenticated user"},
        {"name": "health", "description": "Service health checks and metrics"},
    ],
    lifespan=lifespan,
)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Metrics middleware for request tracking
app.add_middleware(MetricsMiddleware)


@app.exception_handler(AnimalShareException)
async def animal_share_exception_handler(
    request: Request, exc: AnimalShareException
) -> JSONResponse:
    """Return the standard error body for application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests as 400 instead of FastAPI's default 422."""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "error": "validation_failed",
            "message": "Request validation failed",
            "details": jsonable_encoder({"errors": errors}),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def store_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handler for database errors that escaped the service layer.
    Logs the full error but returns a sanitized response.
    """
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "store_failure",
            "message": "The request could not be completed",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all exception handler for unexpected errors.
    Logs the full error but returns a sanitized response.
    """
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
        },
    )


# Include API routers
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint pointing at the API documentation."""
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs",
        "openapi": "/openapi.json",
        "api": settings.API_PREFIX,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
