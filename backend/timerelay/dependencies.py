"""
Dependency wiring for the FastAPI app.

The application factory stores one instance of each service on `app.state`;
these functions hand them to route handlers through `Depends`.
"""

from fastapi import Request

from timerelay.services.report_service import ReportService
from timerelay.services.tracking_service import TrackingService


def get_tracking_service(request: Request) -> TrackingService:
    return request.app.state.tracking_service


def get_report_service(request: Request) -> ReportService:
    return request.app.state.report_service
