"""
TimeRelay Backend — Liveness and Health Routes
================================================

What:  GET / (plain-text liveness string) and GET /health (JSON status).
Who:   GET / is what the hosting platform and the front end ping to wake the
       service; GET /health is for monitoring.

Status levels:
    - healthy:   Google Sheets credentials present, every endpoint usable
    - degraded:  Sheets not configured, report endpoint will answer 500

    Neither route calls Notion or Google; they only report local state.
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from timerelay import __version__
from timerelay.schemas.records import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

LIVENESS_TEXT = "Servidor do Cronômetro Notion está no ar!"

_start_time = time.time()


@router.get("/", response_class=PlainTextResponse, summary="Liveness probe")
async def root() -> str:
    return LIVENESS_TEXT


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Reports version, uptime and whether the report integration is configured."""
    configured = request.app.state.report_service.spreadsheet is not None
    return HealthResponse(
        status="healthy" if configured else "degraded",
        version=__version__,
        spreadsheet="configured" if configured else "not_configured",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
