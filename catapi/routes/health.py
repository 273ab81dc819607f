"""
Cat API — Health Check Route
==============================

What:  Health check endpoint for container and load balancer probes.
How:   Runs SELECT 1 against the store and checks that the upload directory
       is writable.

Status levels:
    healthy:    store reachable, storage writable
    degraded:   store reachable, storage not writable (reads still work)
    unhealthy:  store unreachable
"""

import logging
import os
import time
from pathlib import Path

from fastapi import APIRouter
from sqlalchemy import text

from catapi import __version__
from catapi.config import settings
from catapi.database import engine
from catapi.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    storage_status = "writable"
    overall = "healthy"

    # ── Check Database ────────────────────────────────────────────────────
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    # ── Check Storage ─────────────────────────────────────────────────────
    storage_root = Path(settings.storage_root)
    if not (storage_root.is_dir() and os.access(storage_root, os.W_OK)):
        storage_status = "unavailable"
        overall = "degraded" if overall != "unhealthy" else overall
        logger.warning("Health check: storage root %s not writable", storage_root)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
