"""Liveness and database connectivity check."""
import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import get_async_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

DatabaseStatus = Literal["healthy", "unhealthy"]


class HealthResponse(BaseModel):
    """Overall status plus the result of the database round trip."""

    status: Literal["healthy", "degraded"]
    database: DatabaseStatus


async def check_database(db: AsyncSession) -> DatabaseStatus:
    """Run a trivial query; any driver or pool error counts as unhealthy."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return "unhealthy"
    return "healthy"


@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_async_session)) -> HealthResponse:
    """Report whether the API can reach its database. Needs no authentication."""
    database = await check_database(db)
    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        database=database,
    )
