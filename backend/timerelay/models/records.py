"""
TimeRelay Backend — Record View Models
========================================

What:  Transient, typed views of the Notion pages the relay works with.
How:   Services read a page's properties through the property codec and
       build one of these models; routes serialize them through the API
       schemas. Nothing here is persisted.
When:  Created while handling a request, discarded once the response is sent.

Defaults:
    Notion leaves empty titles, relations and numbers out of the page payload.
    Each optional attribute has an explicit default instead of ad-hoc
    fallbacks at every call site.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

# Placeholder shown for records whose title is empty
UNNAMED = "Sem nome"

# Placeholder for a time entry pointing at a demand outside the current lookup
UNKNOWN_DEMAND = "Demanda Desconhecida"


class Client(BaseModel):
    """A customer the timer app tracks time for."""

    id: str
    name: str = UNNAMED


class Demand(BaseModel):
    """A task or project belonging (optionally) to one client."""

    id: str
    name: str = UNNAMED
    client_id: Optional[str] = Field(
        default=None,
        description="Referenced client id; None for unlinked demands",
    )


class TimeEntry(BaseModel):
    """
    One logged timer session.

    duration_hours is stored in hours although the front end sends seconds;
    see `seconds_to_hours` for the conversion.
    """

    id: str
    task_label: str = ""
    demand_id: Optional[str] = None
    duration_hours: float = 0.0
    date: Optional[datetime] = None


class ReportRow(BaseModel):
    """Total hours logged against one demand name inside the report window."""

    demand_name: str
    total_hours: float


def seconds_to_hours(seconds: float) -> float:
    """Converts a timer duration in seconds to hours, rounded to 4 decimal places."""
    return round(seconds / 3600, 4)
