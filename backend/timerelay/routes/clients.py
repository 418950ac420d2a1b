"""
TimeRelay Backend — Clients Route Handler
===========================================

What:  GET /api/clients — every client in the Notion clients database.
Who:   Called by the timer front end to fill its client picker.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from timerelay.dependencies import get_tracking_service
from timerelay.schemas.records import ClientOut, ErrorResponse
from timerelay.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Clients"])


@router.get(
    "/clients",
    response_model=List[ClientOut],
    responses={
        200: {"description": "Clients ordered by name"},
        500: {"description": "Notion query failed", "model": ErrorResponse},
    },
    summary="List clients",
)
async def list_clients(
    service: TrackingService = Depends(get_tracking_service),
) -> List[ClientOut]:
    """
    Returns `{id, name}` for each client, ordered by name.

    An empty database yields an empty array. Clients without a title get the
    placeholder name "Sem nome".
    """
    clients = await service.list_clients()
    return [ClientOut(id=client.id, name=client.name) for client in clients]
