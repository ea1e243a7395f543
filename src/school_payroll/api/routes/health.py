"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.api.dependencies import DbSession
from school_payroll.config import get_settings
from school_payroll.models import PayrollPeriodLock

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str
    version: str


async def _database_status(db: AsyncSession) -> str:
    # Reading the lock table also proves the schema has been created
    try:
        await db.execute(select(PayrollPeriodLock.id).limit(1))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return "unhealthy"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: DbSession) -> HealthResponse:
    """Report API and database health; always 200 so it can be scraped."""
    db_status = await _database_status(db)
    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
        version=get_settings().engine_version,
    )


@router.get("/ready")
async def readiness_check(db: DbSession, response: Response) -> dict[str, str]:
    """Ready once the payroll schema is reachable; 503 otherwise."""
    if await _database_status(db) != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready"}
    return {"status": "ready"}


@router.get("/live")
async def liveness_check() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {"status": "alive"}
