"""
Murmur Backend — Health and Welcome Routes
============================================

What:  GET /health for probes; GET / and GET /api welcome messages.
How:   /health runs SELECT 1 through the Database handle and reports
       `unhealthy` (still HTTP 200) when the store cannot be reached.
"""

import logging
import time

from fastapi import APIRouter, Depends

from murmur import __version__
from murmur.database import Database
from murmur.dependencies import get_database
from murmur.schemas.common import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Welcome")
async def root() -> MessageResponse:
    return MessageResponse(message="Backend is running. Welcome to API base route.")


@router.get("/api", response_model=MessageResponse, summary="API welcome")
async def api_root() -> MessageResponse:
    return MessageResponse(message="API running successfully")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(database: Database = Depends(get_database)) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        await database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
