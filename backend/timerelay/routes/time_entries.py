"""
TimeRelay Backend — Time Entries Route Handler
================================================

What:  POST /api/time-entries — stores one finished timer session.
Who:   Called by the front end when the user stops the timer.

Request:
    {"demandId": "…", "durationSeconds": 5400}

Stored in Notion:
    Tarefa  = "Registro de DD/MM/YYYY"
    Demanda = relation to demandId
    Duração = 1.5        (hours, rounded to 4 decimal places)
    Data    = current timestamp
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends

from timerelay.dependencies import get_tracking_service
from timerelay.schemas.records import ErrorResponse, TimeEntryCreate
from timerelay.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Time entries"])


@router.post(
    "/time-entries",
    status_code=201,
    responses={
        201: {"description": "The Notion page created for the entry"},
        500: {"description": "Notion write failed", "model": ErrorResponse},
    },
    summary="Log a timer session",
)
async def create_time_entry(
    body: TimeEntryCreate,
    service: TrackingService = Depends(get_tracking_service),
) -> Dict[str, Any]:
    return await service.log_time_entry(body.demand_id, body.duration_seconds)
