"""
TimeRelay Backend — Report Service (Aggregation Step)
=======================================================

What:  Builds the weekly hours-per-demand table for one client and writes it
       to a sheet named after the client.
How:   Two record-store queries joined in memory, grouped by demand name,
       then a clear-then-write on the spreadsheet.
Who:   Called by POST /api/generate-report.

Orchestration Flow:
    ┌──────────────┐   ┌────────────────┐   ┌────────────┐   ┌──────────────┐
    │ Demands of   │──▶│ Time entries   │──▶│ Group by   │──▶│ ensure sheet │
    │ the client   │   │ in the window  │   │ demand name│   │ clear, write │
    └──────────────┘   └────────────────┘   └────────────┘   └──────────────┘
           │                    │
           ▼                    ▼
     "no demands"        "no time entries"      (200 responses, no sheet calls)

Failure policy:
    Any remote error aborts the report. A time entry without a demand
    relation raises DataIntegrityError; it is never skipped.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from timerelay.config import Settings
from timerelay.exceptions import ConfigurationError, DataIntegrityError
from timerelay.models.records import UNKNOWN_DEMAND, ReportRow, TimeEntry
from timerelay.services import notion_properties as props
from timerelay.services.record_store import Record, RecordStore
from timerelay.services.spreadsheet import SpreadsheetClient
from timerelay.services.tracking_service import utc_now

logger = logging.getLogger(__name__)

REPORT_HEADER = ["Demand", "Hours"]

NO_DEMANDS_MESSAGE = "Nenhuma demanda encontrada para o cliente {client_name}."
NO_ENTRIES_MESSAGE = "Nenhum registro de tempo na última semana para {client_name}."
SUCCESS_MESSAGE = "Planilha atualizada com sucesso!"


class ReportOutcome(BaseModel):
    """
    Result of a report run.

    table is None for the two informational outcomes (no demands, no time
    entries); sheet_url is set only once the table has been written.
    """

    message: str
    table: Optional[List[List[Any]]] = None
    sheet_url: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Aggregation (pure functions)
# ══════════════════════════════════════════════════════════════════════════

def time_entry_from_page(page: Record, settings: Settings) -> TimeEntry:
    """
    Reads a time-log page into a TimeEntry view object.

    Raises:
        DataIntegrityError: the date property holds an unparseable value.
    """
    try:
        date = props.date_start(page, settings.entry_date_property)
    except ValueError as e:
        raise DataIntegrityError(
            entry_id=page["id"],
            problem="has an unreadable date",
            context={"error": str(e)},
        ) from e
    return TimeEntry(
        id=page["id"],
        task_label=props.title_text(page, settings.entry_task_property) or "",
        demand_id=props.first_relation_id(page, settings.entry_demand_property),
        duration_hours=props.number_value(page, settings.entry_duration_property) or 0.0,
        date=date,
    )


def resolve_entries(
    entries: Iterable[TimeEntry],
    demand_names: Dict[str, str],
) -> List[Tuple[str, float]]:
    """
    Pairs every time entry with the name of its demand.

    Raises:
        DataIntegrityError: an entry has no demand relation at all.
    """
    resolved = []
    for entry in entries:
        if entry.demand_id is None:
            raise DataIntegrityError(entry_id=entry.id)
        name = demand_names.get(entry.demand_id, UNKNOWN_DEMAND)
        resolved.append((name, entry.duration_hours))
    return resolved


def aggregate_hours(pairs: Iterable[Tuple[str, float]]) -> List[ReportRow]:
    """Sums hours per exact demand name; one row per distinct name."""
    totals: Dict[str, float] = {}
    for name, hours in pairs:
        totals[name] = totals.get(name, 0.0) + hours
    return [ReportRow(demand_name=name, total_hours=total) for name, total in totals.items()]


def report_table(rows: Iterable[ReportRow]) -> List[List[Any]]:
    return [list(REPORT_HEADER)] + [[row.demand_name, row.total_hours] for row in rows]


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════

class ReportService:
    """
    Orchestrates the report workflow.

    The spreadsheet client is optional: when Google credentials are missing
    the factory passes None and every report request fails with
    ConfigurationError, while the rest of the API keeps working.
    """

    def __init__(
        self,
        store: RecordStore,
        spreadsheet: Optional[SpreadsheetClient],
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.spreadsheet = spreadsheet
        self.settings = settings
        self.clock = clock

    async def build_report(self, client_id: str, client_name: str) -> ReportOutcome:
        """
        Runs the aggregation for one client over the trailing window.

        Returns:
            ReportOutcome with a table, or an informational message when the
            client has no demands or no time entries in the window.
        """
        s = self.settings

        # ── Step 1: demands of the client ─────────────────────────────────
        demands = await self.store.query(
            s.demands_db_id,
            filter=props.relation_contains(s.demand_client_property, client_id),
        )
        if not demands:
            logger.info("Report for %s: client has no demands", client_id)
            return ReportOutcome(message=NO_DEMANDS_MESSAGE.format(client_name=client_name))

        # ── Step 2: id → name lookup ──────────────────────────────────────
        demand_names = {
            page["id"]: props.title_text(page, s.demand_name_property) or UNKNOWN_DEMAND
            for page in demands
        }

        # ── Step 3: time entries in the window for those demands ──────────
        now = self.clock()
        window_start = now - timedelta(days=s.report_window_days)
        entries = await self.store.query(
            s.time_log_db_id,
            filter=props.all_of(
                props.date_on_or_after(s.entry_date_property, window_start),
                props.date_on_or_before(s.entry_date_property, now),
                props.any_of(
                    *(
                        props.relation_contains(s.entry_demand_property, demand_id)
                        for demand_id in demand_names
                    )
                ),
            ),
        )
        if not entries:
            logger.info("Report for %s: no time entries since %s", client_id, window_start)
            return ReportOutcome(message=NO_ENTRIES_MESSAGE.format(client_name=client_name))

        # ── Steps 4-6: resolve, group, tabulate ──────────────────────────
        pairs = resolve_entries(
            (time_entry_from_page(page, s) for page in entries), demand_names
        )
        rows = aggregate_hours(pairs)
        logger.info(
            "Report for %s: %d entries across %d demands",
            client_id,
            len(pairs),
            len(rows),
        )
        return ReportOutcome(message=SUCCESS_MESSAGE, table=report_table(rows))

    async def generate(self, client_id: str, client_name: str) -> ReportOutcome:
        """
        Builds the report and writes it to the sheet named `client_name`.

        Raises:
            ConfigurationError: Google Sheets credentials are not configured.
            RemoteQueryError / SpreadsheetError / DataIntegrityError: see module docstring.
        """
        if self.spreadsheet is None:
            raise ConfigurationError(context={"client_id": client_id})

        outcome = await self.build_report(client_id, client_name)
        if outcome.table is None:
            return outcome

        await self.spreadsheet.ensure_sheet(client_name)
        await self.spreadsheet.write_table(client_name, outcome.table)
        return outcome.model_copy(update={"sheet_url": self.spreadsheet.sheet_url})
