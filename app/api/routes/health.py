"""
Health and metrics endpoints.
No authentication required.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import is_using_sqlite_fallback
from app.dependencies import DbSession
from app.models import Favorite, Post, Tag, User
from app.services.metrics import METRIC_PREFIX, get_metrics_collector

router = APIRouter()


@router.get("/health")
async def health_check(db: DbSession):
    """
    Service health check endpoint.

    Returns:
        {"status": "ok"} when service is healthy
        {"status": "degraded", "issues": [...]} when the database is unreachable
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {
            "status": "degraded",
            "issues": [f"Database: {e.__class__.__name__}"],
        }

    response = {
        "status": "ok",
        "database": "sqlite (dev fallback)" if is_using_sqlite_fallback() else "postgresql",
    }
    if is_using_sqlite_fallback():
        response["warnings"] = ["Using SQLite dev fallback - PostgreSQL not configured"]

    return response


async def _content_counts(db: AsyncSession) -> dict[str, int]:
    counts = {}
    for name, model_id in (
        ("users", User.id),
        ("posts", Post.id),
        ("tags", Tag.id),
        ("favorites", Favorite.post_id),
    ):
        result = await db.execute(select(func.count(model_id)))
        counts[name] = result.scalar() or 0
    return counts


@router.get("/metrics")
async def metrics(db: DbSession):
    """Request metrics plus row counts of the main tables, as JSON."""
    metrics_data = get_metrics_collector().get_metrics()
    metrics_data["content"] = await _content_counts(db)
    return metrics_data


@router.get("/metrics/prometheus", response_class=PlainTextResponse)
async def metrics_prometheus(db: DbSession):
    """
    Prometheus text exposition format endpoint.
    Compatible with Prometheus scraping.
    """
    text_output = get_metrics_collector().to_prometheus()

    metric = f"{METRIC_PREFIX}_rows_total"
    text_output += f"# HELP {metric} Number of rows per table\n"
    text_output += f"# TYPE {metric} gauge\n"
    for table, count in (await _content_counts(db)).items():
        text_output += f'{metric}{{table="{table}"}} {count}\n'

    return PlainTextResponse(
        content=text_output,
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
