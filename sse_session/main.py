"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sse_session.config import settings
from sse_session.routes import events, health

logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration and shutdown."""
    logger.info(
        "SSE demo ready (retry=%s ms, ping every %s s)",
        settings.retry_ms,
        settings.ping_interval,
    )
    yield
    logger.info("SSE demo shutting down")


app = FastAPI(
    title="sse-session",
    description="Server-Sent Events sessions — demo API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(events.router)
