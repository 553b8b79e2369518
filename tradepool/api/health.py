"""
Health check endpoints.

Liveness, plus a readiness probe that checks the proposal store and
the card catalog.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradepool.db.database import get_session
from tradepool.services.card_catalog import get_card_catalog

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not check dependencies."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 unless both the database answers and the card catalog
    has been loaded.
    """
    try:
        await session.execute(text("SELECT 1"))
        database = "connected"
    except SQLAlchemyError:
        database = "disconnected"

    try:
        catalog = f"{len(get_card_catalog())} cards"
    except FileNotFoundError:
        catalog = "missing"

    if database != "connected" or catalog == "missing":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database=database, catalog=catalog)
    return HealthResponse(status="ready", database=database, catalog=catalog)
