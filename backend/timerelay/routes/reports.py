"""
TimeRelay Backend — Report Route Handler
==========================================

What:  POST /api/generate-report — exports last week's hours per demand of
       one client to the Google Sheet tab named after the client.
How:   Delegates to ReportService; this handler only shapes the response.

Responses:
    200 {"message": "Planilha atualizada com sucesso!", "sheetUrl": "…"}
    200 {"message": "Nenhuma demanda encontrada para o cliente Acme."}
    200 {"message": "Nenhum registro de tempo na última semana para Acme."}
    500 {"error": "Falha ao gerar relatório."}
"""

import logging

from fastapi import APIRouter, Depends

from timerelay.dependencies import get_report_service
from timerelay.schemas.records import ErrorResponse, ReportRequest, ReportResponse
from timerelay.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reports"])


@router.post(
    "/generate-report",
    response_model=ReportResponse,
    response_model_exclude_none=True,
    responses={
        200: {"description": "Report written, or nothing to report", "model": ReportResponse},
        500: {
            "description": "Spreadsheet not configured, or a remote call failed",
            "model": ErrorResponse,
        },
    },
    summary="Export weekly hours of a client to Google Sheets",
)
async def generate_report(
    body: ReportRequest,
    service: ReportService = Depends(get_report_service),
) -> ReportResponse:
    logger.info("Generating report for client %s (%s)", body.client_id, body.client_name)
    outcome = await service.generate(body.client_id, body.client_name)
    return ReportResponse(message=outcome.message, sheet_url=outcome.sheet_url)
