"""
TimeRelay Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the remote clients and services,
       registers middleware, exception handlers and routes, and returns a
       configured FastAPI instance.
Who:   Called by uvicorn (`uvicorn timerelay.main:app`), by the `timerelay`
       console script, and by tests with fake remote clients.
When:  Once at server startup.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                   FastAPI App                        │
    │                                                      │
    │  Middleware:  Request ID → Logging → CORS            │
    │                                                      │
    │  Routes:                                             │
    │    GET /             GET /health                     │
    │    GET /api/clients  GET|POST /api/demands           │
    │    POST /api/time-entries  POST /api/generate-report │
    │                                                      │
    │  app.state:                                          │
    │    record_store      → NotionRecordStore             │
    │    tracking_service  → TrackingService               │
    │    report_service    → ReportService (+ Sheets)      │
    │                                                      │
    │  Exception Handlers: TimeRelayError → 500 {error}    │
    │                      RequestValidationError → 422    │
    └──────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Callable, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timerelay import __version__
from timerelay.config import Settings, settings as default_settings
from timerelay.exceptions import TimeRelayError
from timerelay.middleware.logging import RequestLoggingMiddleware
from timerelay.middleware.request_id import RequestIDMiddleware, request_id_var
from timerelay.routes import clients, demands, health, reports, time_entries
from timerelay.services.record_store import NotionRecordStore, RecordStore
from timerelay.services.report_service import ReportService
from timerelay.services.spreadsheet import GoogleSheetsClient, SpreadsheetClient
from timerelay.services.tracking_service import TrackingService, utc_now

logger = logging.getLogger(__name__)

# Fixed 500 messages per endpoint, keyed by route name
FAILURE_MESSAGES = {
    "list_clients": "Falha ao obter clientes do Notion.",
    "list_demands": "Falha ao obter demandas do Notion.",
    "create_demand": "Falha ao criar demanda no Notion.",
    "create_time_entry": "Falha ao criar registro de tempo no Notion.",
    "generate_report": "Falha ao gerar relatório.",
}
GENERIC_FAILURE_MESSAGE = "Falha ao processar a requisição."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (captured by the hosting platform)
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every HTTP round trip
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("notion_client").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Warn about missing Notion settings and disabled reports
    Shutdown:
        1. Close the Notion HTTP client
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("TimeRelay %s starting up...", __version__)

    missing = app_settings.missing_notion_settings()
    if missing:
        logger.warning("Notion settings missing: %s", ", ".join(missing))
    if app.state.report_service.spreadsheet is None:
        logger.warning(
            "Google Sheets credentials not configured; /api/generate-report is disabled"
        )

    logger.info("Server ready on port %d", app_settings.port)
    logger.info("=" * 60)

    yield

    logger.info("TimeRelay shutting down...")
    await app.state.record_store.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def failure_message(request: Request) -> str:
    route = request.scope.get("route")
    return FAILURE_MESSAGES.get(getattr(route, "name", ""), GENERIC_FAILURE_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application errors to HTTP 500 `{"error": <endpoint message>}`.

    Handler hierarchy:
        RequestValidationError                                  → 422
        TimeRelayError (RemoteQueryError, RemoteWriteError, SpreadsheetError,
                        ConfigurationError, DataIntegrityError) → 500
        Exception (fallback)                                    → 500

    Exception messages and context go to the log only.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed body: 422 with field locations only, never the rejected input."""
        rid = request_id_var.get("")
        details = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        logger.warning("[%s] Invalid request to %s: %s", rid, request.url.path, details)
        return JSONResponse(status_code=422, content={"detail": details})

    @app.exception_handler(TimeRelayError)
    async def handle_relay_error(request: Request, exc: TimeRelayError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s on %s %s: %s | Context: %s",
            rid,
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
            exc.context,
        )
        return JSONResponse(status_code=500, content={"error": failure_message(request)})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": failure_message(request)})


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    record_store: Optional[RecordStore] = None,
    spreadsheet: Optional[SpreadsheetClient] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to use; defaults to the environment-loaded singleton.
        record_store: Record store to use; defaults to a NotionRecordStore.
        spreadsheet:  Report destination; defaults to a GoogleSheetsClient when
                      credentials are configured, otherwise None (reports disabled).
        clock:        Current-time source for time entries and report windows.
    """
    app_settings = app_settings or default_settings

    if record_store is None:
        record_store = NotionRecordStore(api_key=app_settings.notion_api_key)
    if spreadsheet is None and app_settings.sheets_configured:
        spreadsheet = GoogleSheetsClient(
            spreadsheet_id=app_settings.google_sheet_id,
            client_email=app_settings.google_client_email,
            private_key=app_settings.google_private_key,
        )

    app = FastAPI(
        title="TimeRelay API",
        description=(
            "Relay between the Notion timer front end and Notion / Google Sheets. "
            "Keeps API credentials server-side."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Services (one instance per app, injected via dependencies) ────────
    app.state.settings = app_settings
    app.state.record_store = record_store
    app.state.tracking_service = TrackingService(record_store, app_settings, clock=clock)
    app.state.report_service = ReportService(
        record_store, spreadsheet, app_settings, clock=clock
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: Request ID → Logging → CORS
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(clients.router)
    app.include_router(demands.router)
    app.include_router(time_entries.router)
    app.include_router(reports.router)

    return app


# uvicorn expects `timerelay.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    uvicorn.run(
        "timerelay.main:app",
        host=default_settings.host,
        port=default_settings.port,
        log_level=default_settings.log_level.lower(),
    )
