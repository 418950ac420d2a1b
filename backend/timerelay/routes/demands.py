"""
TimeRelay Backend — Demands Route Handlers
============================================

What:  GET /api/demands (list) and POST /api/demands (create).
Who:   Called by the timer front end's demand picker and "new demand" form.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from timerelay.dependencies import get_tracking_service
from timerelay.models.records import Demand
from timerelay.schemas.records import DemandCreate, DemandOut, ErrorResponse
from timerelay.services.tracking_service import TrackingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Demands"])


def _to_out(demand: Demand) -> DemandOut:
    return DemandOut(id=demand.id, name=demand.name, client_id=demand.client_id)


@router.get(
    "/demands",
    response_model=List[DemandOut],
    responses={
        200: {"description": "Demands ordered by name"},
        500: {"description": "Notion query failed", "model": ErrorResponse},
    },
    summary="List demands",
)
async def list_demands(
    service: TrackingService = Depends(get_tracking_service),
) -> List[DemandOut]:
    """
    Returns `{id, name, clientId}` for each demand, ordered by name.

    clientId is null for demands not linked to any client.
    """
    demands = await service.list_demands()
    return [_to_out(demand) for demand in demands]


@router.post(
    "/demands",
    status_code=201,
    response_model=DemandOut,
    responses={
        201: {"description": "Demand created", "model": DemandOut},
        500: {"description": "Notion write failed", "model": ErrorResponse},
    },
    summary="Create a demand for a client",
)
async def create_demand(
    body: DemandCreate,
    service: TrackingService = Depends(get_tracking_service),
) -> DemandOut:
    """
    Creates a demand titled `demandName` linked to `clientId`.

    The client id is trusted as sent; it is not looked up first.
    """
    demand = await service.create_demand(body.client_id, body.demand_name)
    return _to_out(demand)
