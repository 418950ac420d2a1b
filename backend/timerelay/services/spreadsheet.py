"""
TimeRelay Backend — Remote Spreadsheet Client
===============================================

What:  Abstract spreadsheet contract plus its Google Sheets implementation.
How:   SpreadsheetClient defines four primitive calls (sheet names, add
       sheet, clear range, write range) and builds the two capabilities the
       report needs on top of them: ensure_sheet() and write_table().
       GoogleSheetsClient implements the primitives with the Sheets v4
       discovery client; blocking calls run in a worker thread.
Who:   Constructed by the application factory when Google credentials are
       present; used by ReportService.

Write sequence (not transactional):
    get metadata → (add sheet) → clear sheet → write values at A1
    A failure after the clear leaves the sheet empty until the next
    successful report run.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence, Set

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from timerelay.exceptions import SpreadsheetError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
TOKEN_URI = "https://oauth2.googleapis.com/token"

Rows = Sequence[Sequence[Any]]


def a1_range(sheet_name: str, cell: Optional[str] = None) -> str:
    """
    Builds an A1 range addressing a whole sheet or one of its cells.

    Sheet names are always quoted so names with spaces, digits or
    apostrophes resolve to the right tab:
        a1_range("Acme Corp")        → "'Acme Corp'"
        a1_range("Joe's", "A1")      → "'Joe''s'!A1"
    """
    quoted = "'" + sheet_name.replace("'", "''") + "'"
    return f"{quoted}!{cell}" if cell else quoted


class SpreadsheetClient(ABC):
    """
    Abstract interface for the report destination.

    Contract:
        - Primitive calls are issued one at a time, never retried
        - All implementation-specific errors are wrapped in SpreadsheetError
    """

    def __init__(self, spreadsheet_id: str):
        self.spreadsheet_id = spreadsheet_id

    @property
    def sheet_url(self) -> str:
        """Browser URL of the spreadsheet."""
        return f"https://docs.google.com/spreadsheets/d/{self.spreadsheet_id}"

    @abstractmethod
    async def get_sheet_names(self, spreadsheet_id: str) -> Set[str]:
        ...

    @abstractmethod
    async def add_sheet(self, spreadsheet_id: str, name: str) -> None:
        """Adds a sheet (tab). Fails if a sheet with this name already exists."""
        ...

    @abstractmethod
    async def clear_range(self, spreadsheet_id: str, range_name: str) -> None:
        ...

    @abstractmethod
    async def write_values(self, spreadsheet_id: str, range_name: str, rows: Rows) -> None:
        """Writes a 2-D table starting at the top-left cell of `range_name`."""
        ...

    async def ensure_sheet(self, name: str) -> bool:
        """
        Makes sure a sheet named exactly `name` exists.

        Returns:
            True if the sheet had to be created, False if it already existed.
        """
        if name in await self.get_sheet_names(self.spreadsheet_id):
            return False
        await self.add_sheet(self.spreadsheet_id, name)
        logger.info("Created sheet '%s'", name)
        return True

    async def write_table(self, name: str, rows: Rows) -> None:
        """Replaces the whole content of sheet `name` with `rows` (header first)."""
        await self.clear_range(self.spreadsheet_id, a1_range(name))
        await self.write_values(self.spreadsheet_id, a1_range(name, "A1"), rows)
        logger.info("Wrote %d rows to sheet '%s'", len(rows), name)


class GoogleSheetsClient(SpreadsheetClient):
    """
    Google Sheets v4 implementation authenticated as a service account.

    The discovery client is built lazily on first use, so a malformed private
    key surfaces as a SpreadsheetError on the report endpoint instead of
    preventing the whole process from starting.
    """

    def __init__(
        self,
        spreadsheet_id: str,
        client_email: str,
        private_key: str,
        service: Any = None,
        credentials: Any = None,
    ):
        super().__init__(spreadsheet_id)
        self.client_email = client_email
        self._private_key = private_key
        self._service = service
        self._credentials = credentials

    def _get_service(self) -> Any:
        if self._service is None:
            try:
                self._credentials = service_account.Credentials.from_service_account_info(
                    {
                        "client_email": self.client_email,
                        "private_key": self._private_key,
                        "token_uri": TOKEN_URI,
                    },
                    scopes=SCOPES,
                )
            except (ValueError, GoogleAuthError) as e:
                raise SpreadsheetError(
                    message=f"Invalid Google service account credentials: {e}",
                    context={"client_email": self.client_email},
                ) from e
            self._service = build(
                "sheets", "v4", credentials=self._credentials, cache_discovery=False
            )
            logger.info("Google Sheets client initialized for %s", self.client_email)
        return self._service

    def _request_http(self) -> Optional[AuthorizedHttp]:
        """
        A fresh authorized transport for one request.

        httplib2.Http is not thread-safe and every request runs in its own
        worker thread, so requests never share the service's default Http.
        """
        if self._credentials is None:
            return None
        return AuthorizedHttp(self._credentials, http=httplib2.Http())

    async def _execute(
        self,
        operation: str,
        request_factory: Callable[[Any], Any],
        sheet_name: Optional[str] = None,
    ) -> Any:
        """Runs one Sheets API request in a worker thread and wraps its errors."""
        request = request_factory(self._get_service())
        http = self._request_http()

        def run() -> Any:
            if http is None:
                return request.execute()
            return request.execute(http=http)

        try:
            return await asyncio.to_thread(run)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            logger.error("Sheets %s failed with HTTP %s: %s", operation, status, str(e))
            raise SpreadsheetError(
                message=f"Google Sheets {operation} failed",
                sheet_name=sheet_name,
                context={"status": status, "operation": operation},
            ) from e
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.error("Sheets %s failed: %s", operation, str(e))
            raise SpreadsheetError(
                message=f"Google Sheets {operation} failed",
                sheet_name=sheet_name,
                context={"error_type": type(e).__name__, "operation": operation},
            ) from e

    async def get_sheet_names(self, spreadsheet_id: str) -> Set[str]:
        metadata = await self._execute(
            "metadata read",
            lambda service: service.spreadsheets().get(
                spreadsheetId=spreadsheet_id, fields="sheets.properties.title"
            ),
        )
        return {sheet["properties"]["title"] for sheet in metadata.get("sheets", [])}

    async def add_sheet(self, spreadsheet_id: str, name: str) -> None:
        body = {"requests": [{"addSheet": {"properties": {"title": name}}}]}
        await self._execute(
            "add sheet",
            lambda service: service.spreadsheets().batchUpdate(
                spreadsheetId=spreadsheet_id, body=body
            ),
            sheet_name=name,
        )

    async def clear_range(self, spreadsheet_id: str, range_name: str) -> None:
        await self._execute(
            "clear",
            lambda service: service.spreadsheets().values().clear(
                spreadsheetId=spreadsheet_id, range=range_name, body={}
            ),
            sheet_name=range_name,
        )

    async def write_values(self, spreadsheet_id: str, range_name: str, rows: Rows) -> None:
        body = {"values": [list(row) for row in rows]}
        await self._execute(
            "write",
            lambda service: service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                body=body,
            ),
            sheet_name=range_name,
        )
