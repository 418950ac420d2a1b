"""
TimeRelay Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every way a relay request can fail.
How:   Each exception class carries a message and optional context dict.
       One global exception handler (registered in main.py) logs the context
       and answers HTTP 500 with the endpoint's fixed failure message.
Who:   Raised by remote clients and services; caught by the global handler.
When:  During request processing, whenever a remote call or data check fails.

Exception Hierarchy:
    TimeRelayError (base)
    ├── RemoteQueryError     → Notion query failed (transport, auth, API error)
    ├── RemoteWriteError     → Notion page creation failed
    ├── SpreadsheetError     → Google Sheets call failed
    ├── ConfigurationError   → Spreadsheet integration not configured
    └── DataIntegrityError   → A time entry has no demand relation

    All of them map to HTTP 500. The response body never contains the
    message or context of the exception; those go to the server log only.
"""

from typing import Any, Dict, Optional


class TimeRelayError(Exception):
    """
    Base exception for all TimeRelay application errors.

    Attributes:
        message:  Description of the failure (logged, never returned to clients)
        context:  Additional debug info such as collection ids or sheet names
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class RemoteQueryError(TimeRelayError):
    """
    Raised when querying a Notion database fails.

    When:    Network failure, timeout, invalid token, unknown database id,
             malformed filter.
    Retry:   Never. The request fails on the first error.
    """

    def __init__(
        self,
        message: str = "Remote record query failed",
        collection_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection_id:
            ctx["collection_id"] = collection_id
        super().__init__(message=message, context=ctx)
        self.collection_id = collection_id


class RemoteWriteError(TimeRelayError):
    """Raised when creating a page in a Notion database fails."""

    def __init__(
        self,
        message: str = "Remote record write failed",
        collection_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if collection_id:
            ctx["collection_id"] = collection_id
        super().__init__(message=message, context=ctx)
        self.collection_id = collection_id


class SpreadsheetError(TimeRelayError):
    """
    Raised when a Google Sheets call fails.

    Partial failure:
        The report write is clear-then-write. If the clear succeeds and the
        write fails, the sheet is left empty. Calling generate-report again
        repopulates it.
    """

    def __init__(
        self,
        message: str = "Spreadsheet operation failed",
        sheet_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if sheet_name:
            ctx["sheet_name"] = sheet_name
        super().__init__(message=message, context=ctx)
        self.sheet_name = sheet_name


class ConfigurationError(TimeRelayError):
    """Raised when the report endpoint runs without Google Sheets credentials."""

    def __init__(
        self,
        message: str = "Spreadsheet integration is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DataIntegrityError(TimeRelayError):
    """
    Raised when a time entry record cannot be used in a report.

    When:    A time entry carries no demand relation at all, or its date
             property is not a readable ISO 8601 value.
    Effect:  The whole report is aborted; the entry is not skipped.
    """

    def __init__(
        self,
        entry_id: Optional[str] = None,
        problem: str = "has no demand relation",
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"Time entry {problem}"
        if entry_id:
            message = f"Time entry '{entry_id}' {problem}"
        ctx = context or {}
        if entry_id:
            ctx["entry_id"] = entry_id
        super().__init__(message=message, context=ctx)
        self.entry_id = entry_id
