import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tradepool.api import (
    cards_router,
    health_router,
    proposals_router,
    trades_router,
    users_router,
)
from tradepool.config import settings
from tradepool.db.database import async_session_factory, init_db
from tradepool.models.failure import KnownError
from tradepool.services.trade_executor import resume_pending_trades

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables and finish any trades interrupted before shutdown."""
    await init_db()
    async with async_session_factory() as session:
        await resume_pending_trades(session)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("tradepool"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render known failures with their own status code."""
    logger.info("Known failure %s: %s", exc.kind.value, exc.detail or exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_detail().model_dump(mode="json"),
    )


app.include_router(cards_router)
app.include_router(health_router)
app.include_router(proposals_router)
app.include_router(trades_router)
app.include_router(users_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
