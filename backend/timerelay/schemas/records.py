"""
TimeRelay Backend — Pydantic Request/Response Schemas
=======================================================

What:  The JSON contract between the timer front end and the relay.
How:   FastAPI validates request bodies against these models and serializes
       responses through them. Field names are snake_case in Python and
       camelCase on the wire (aliases), matching what the front end sends.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    """Accepts both alias and field names; FastAPI serializes by alias."""

    model_config = ConfigDict(populate_by_name=True)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class DemandCreate(CamelModel):
    client_id: str = Field(alias="clientId", description="Notion id of the owning client")
    demand_name: str = Field(alias="demandName", description="Title of the new demand")


class TimeEntryCreate(CamelModel):
    demand_id: str = Field(alias="demandId", description="Notion id of the demand")
    duration_seconds: float = Field(
        alias="durationSeconds",
        ge=0,
        allow_inf_nan=False,
        description="Timer duration in seconds",
    )


class ReportRequest(CamelModel):
    client_id: str = Field(alias="clientId")
    client_name: str = Field(
        alias="clientName",
        min_length=1,
        description="Client display name; also the destination sheet name",
    )


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ClientOut(CamelModel):
    id: str
    name: str


class DemandOut(CamelModel):
    id: str
    name: str
    client_id: Optional[str] = Field(default=None, alias="clientId")


class ReportResponse(CamelModel):
    """
    message is always present; sheetUrl only when a sheet was written.
    The two "nothing to report" outcomes carry only a message.
    """

    message: str
    sheet_url: Optional[str] = Field(default=None, alias="sheetUrl")


class ErrorResponse(BaseModel):
    """Body of every 500 response. Never contains internal details."""

    error: str = Field(description="Human-readable failure message")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    spreadsheet: str = Field(description="Google Sheets integration: configured, not_configured")
    uptime_seconds: float = Field(description="Seconds since service started")
