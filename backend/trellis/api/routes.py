"""Primary API route definitions."""

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from trellis.core.db import get_session
from trellis.core.logging import get_logger

logger = get_logger(__name__)

health_router = APIRouter()


@health_router.get("/", summary="Readiness probe", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Report service readiness, including whether the row store answers."""

    database = "ok"
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health.database_unavailable", error=str(exc))
        database = "unavailable"

    return {"status": "ok", "database": database}
