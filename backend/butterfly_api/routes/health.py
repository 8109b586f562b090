"""
Butterfly API — Root and Health Check Routes
=============================================

What:  GET / (liveness message) and GET /health (service and database state).
Who:   Docker health checks, load balancers, humans with curl.
"""

import logging
import time

from fastapi import APIRouter, Depends

from butterfly_api import __version__
from butterfly_api.database import JSONDatabase, get_database
from butterfly_api.schemas.records import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Liveness message")
async def root() -> MessageResponse:
    return MessageResponse(message="Server is running!")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description=(
        "Reports whether the JSON database has been loaded and how many "
        "records each collection holds."
    ),
)
async def health_check(db: JSONDatabase = Depends(get_database)) -> HealthResponse:
    """
    healthy:    the document is loaded in memory
    unhealthy:  startup has not (successfully) read the document yet
    """
    if db.loaded:
        overall, db_status = "healthy", "loaded"
    else:
        overall, db_status = "unhealthy", "not_loaded"
        logger.warning("Health check: database %s not loaded", db.path)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        database_path=str(db.path),
        collections=db.counts(),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
