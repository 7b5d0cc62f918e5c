"""
Jam Session Backend — Health Check Route
==========================================

What:  GET /health for Docker health checks and load balancer probes.
How:   Runs SELECT 1 against the database. The service is "healthy" only
       when the database answers; otherwise it reports "unhealthy" with 503.
       No authentication, no access log.
"""

import logging
import time

from fastapi import APIRouter, Response, status
from sqlalchemy import text

from jamsession import __version__
from jamsession.database import engine
from jamsession.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def check_database() -> bool:
    """True when the database accepts a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", e)
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(response: Response) -> HealthResponse:
    db_ok = await check_database()
    if not db_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        database="connected" if db_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
