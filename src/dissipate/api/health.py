"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running
and the database is reachable. Open — no token required.
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from dissipate import __version__
from dissipate.db.engine import get_db

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Check server health and database connectivity."""
    checks = {"server": "ok", "version": __version__}

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as e:
        logger.warning("health.database_unavailable", error=str(e))
        checks["database"] = "error"

    status = "ok" if checks["database"] == "ok" else "degraded"
    return {"status": status, **checks}
