"""
TimeRelay Backend — Application Package Initializer
=====================================================

What: Marks the `timerelay` directory as a Python package.
Who:  Used by uvicorn (`timerelay.main:app`), pytest, and the `timerelay` console script.

Architecture Note:
    The relay is a thin layered service in front of two hosted APIs:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Tracking, Report)       │  ← Orchestration, aggregation
    ├─────────────────────────────────────┤
    │   Models & Schemas (View objects)   │  ← Pydantic, transient per request
    ├─────────────────────────────────────┤
    │   Remote clients (Notion, Sheets)   │  ← Record store + spreadsheet
    └─────────────────────────────────────┘

    Nothing is persisted locally. Every entity lives in Notion or Google Sheets
    and is only mirrored for the lifetime of one request.
"""

__version__ = "1.0.0"
