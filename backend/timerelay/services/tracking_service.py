"""
TimeRelay Backend — Tracking Service
======================================

What:  Reads and writes the records the timer front end works with:
       clients, demands and time entries.
How:   Issues one record-store call per operation and maps Notion pages to
       the view models in `timerelay.models.records`.
Who:   Called by the clients, demands and time-entries route handlers.

Workflows:
    list_clients()       → query(clients, sorted by name)
    list_demands()       → query(demands, sorted by name)
    create_demand()      → create(demands, {title, client relation})
    log_time_entry()     → create(time log, {label, demand relation, hours, date})

    The service holds no per-request state. Record-store errors
    (RemoteQueryError, RemoteWriteError) propagate unchanged to the global
    exception handler.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from timerelay.config import Settings
from timerelay.models.records import UNNAMED, Client, Demand, seconds_to_hours
from timerelay.services import notion_properties as props
from timerelay.services.record_store import RecordStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TrackingService:
    """
    Business logic for the timer's list and create operations.

    Args:
        store:    Record store holding the three collections
        settings: Collection ids and property names
        clock:    Returns the current time; injectable for tests
    """

    def __init__(
        self,
        store: RecordStore,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.settings = settings
        self.clock = clock

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_clients(self) -> List[Client]:
        """All clients, ordered by name. Empty titles become the placeholder name."""
        name_prop = self.settings.client_name_property
        pages = await self.store.query(
            self.settings.clients_db_id,
            sorts=[props.ascending(name_prop)],
        )
        return [
            Client(id=page["id"], name=props.title_text(page, name_prop) or UNNAMED)
            for page in pages
        ]

    async def list_demands(self) -> List[Demand]:
        """All demands, ordered by name, with the first linked client (if any)."""
        pages = await self.store.query(
            self.settings.demands_db_id,
            sorts=[props.ascending(self.settings.demand_name_property)],
        )
        return [self.demand_from_page(page) for page in pages]

    def demand_from_page(self, page: Dict[str, Any]) -> Demand:
        return Demand(
            id=page["id"],
            name=props.title_text(page, self.settings.demand_name_property) or UNNAMED,
            client_id=props.first_relation_id(page, self.settings.demand_client_property),
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_demand(self, client_id: str, demand_name: str) -> Demand:
        """
        Creates a demand linked to `client_id`.

        The client id is not checked for existence; Notion rejects unknown
        ids with an API error, which surfaces as RemoteWriteError.
        """
        page = await self.store.create(
            self.settings.demands_db_id,
            {
                self.settings.demand_name_property: props.title_property(demand_name),
                self.settings.demand_client_property: props.relation_property(client_id),
            },
        )
        logger.info("Demand '%s' created for client %s", demand_name, client_id)
        return Demand(id=page["id"], name=demand_name, client_id=client_id)

    async def log_time_entry(self, demand_id: str, duration_seconds: float) -> Dict[str, Any]:
        """
        Records a finished timer session against a demand.

        Returns:
            The created Notion page, unmodified.
        """
        now = self.clock()
        hours = seconds_to_hours(duration_seconds)
        page = await self.store.create(
            self.settings.time_log_db_id,
            {
                self.settings.entry_task_property: props.title_property(task_label(now)),
                self.settings.entry_demand_property: props.relation_property(demand_id),
                self.settings.entry_duration_property: props.number_property(hours),
                self.settings.entry_date_property: props.date_property(now),
            },
        )
        logger.info(
            "Logged %.4fh (%ss) against demand %s", hours, duration_seconds, demand_id
        )
        return page


def task_label(moment: datetime) -> str:
    """Title given to every time entry, e.g. 'Registro de 15/01/2024'."""
    return f"Registro de {moment:%d/%m/%Y}"
