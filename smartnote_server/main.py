# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""SmartNote Server - Main FastAPI application."""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from smartnote_server.config import settings
from smartnote_server.database import async_session_maker, dispose_db, init_db
from smartnote_server.error_handling import register_exception_handlers
from smartnote_server.routers import auth, notes
from smartnote_server.services.reaper import reap_loop

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    if not (settings.smtp_host and settings.smtp_user):
        logger.warning("SMTP not configured - password reset emails cannot be sent")

    reaper = None
    if settings.token_reap_interval_minutes > 0:
        reaper = asyncio.create_task(
            reap_loop(async_session_maker, settings.token_reap_interval_minutes)
        )
    yield
    if reaper is not None:
        reaper.cancel()
    await dispose_db()


app = FastAPI(
    title="SmartNote Server",
    description="Personal notes API with JWT auth and email password reset",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or auth headers)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response

app.include_router(auth.router, prefix="/api")
app.include_router(notes.router, prefix="/api")


@app.get("/")
async def root():
    """API info."""
    return {
        "name": "SmartNote Server",
        "version": VERSION,
        "api": "/api",
        "docs": "/api/docs",
    }


@app.get("/health")
async def health():
    """Health check for load balancers."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
