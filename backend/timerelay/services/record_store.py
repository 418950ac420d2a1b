"""
TimeRelay Backend — Remote Record Store
=========================================

What:  Abstract record-store contract plus its Notion implementation.
How:   RecordStore exposes the two capabilities the relay needs
       (query-by-filter and create-record). NotionRecordStore maps them onto
       `databases.query` and `pages.create` of the official async SDK and
       translates every SDK/transport failure into RemoteQueryError or
       RemoteWriteError.
Who:   Constructed once by the application factory; used by TrackingService
       and ReportService.

Known limitation:
    Only the first page of a query result is read (Notion returns up to 100
    records per page). Larger collections are silently truncated.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError

from timerelay.exceptions import RemoteQueryError, RemoteWriteError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# Every failure mode the Notion SDK can surface for a single call
_NOTION_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError)


class RecordStore(ABC):
    """
    Abstract interface for the hosted document database.

    Contract:
        - Records are plain dicts with at least an "id" and a "properties" map
        - Implementations never retry; the first failure is raised
        - All implementation-specific errors are wrapped in
          RemoteQueryError / RemoteWriteError
    """

    @abstractmethod
    async def query(
        self,
        collection_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Record]:
        """
        Return the records of a collection matching `filter`, ordered by `sorts`.

        Raises:
            RemoteQueryError: transport, authentication or API failure.
        """
        ...

    @abstractmethod
    async def create(self, collection_id: str, properties: Dict[str, Any]) -> Record:
        """
        Create a record in a collection and return it as stored remotely.

        Raises:
            RemoteWriteError: transport, authentication or API failure.
        """
        ...

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""


class NotionRecordStore(RecordStore):
    """
    Record store backed by the Notion API.

    Collections are Notion databases; records are pages.
    """

    def __init__(self, api_key: str, client: Optional[AsyncClient] = None):
        self.client = client or AsyncClient(auth=api_key or None)

    async def query(
        self,
        collection_id: str,
        filter: Optional[Dict[str, Any]] = None,
        sorts: Optional[List[Dict[str, Any]]] = None,
    ) -> List[Record]:
        params: Dict[str, Any] = {"database_id": collection_id}
        if filter is not None:
            params["filter"] = filter
        if sorts:
            params["sorts"] = sorts

        start_time = time.perf_counter()
        try:
            response = await self.client.databases.query(**params)
        except _NOTION_ERRORS as e:
            logger.error("Notion query on %s failed: %s", collection_id, str(e))
            raise RemoteQueryError(
                message=f"Notion query failed: {e}",
                collection_id=collection_id,
                context={"error_type": type(e).__name__},
            ) from e

        results = response.get("results", [])
        if response.get("has_more"):
            logger.warning(
                "Notion query on %s returned more than one page; only the first %d records are used",
                collection_id,
                len(results),
            )
        logger.debug(
            "Notion query on %s returned %d records in %.0fms",
            collection_id,
            len(results),
            (time.perf_counter() - start_time) * 1000,
        )
        return results

    async def create(self, collection_id: str, properties: Dict[str, Any]) -> Record:
        try:
            page = await self.client.pages.create(
                parent={"database_id": collection_id},
                properties=properties,
            )
        except _NOTION_ERRORS as e:
            logger.error("Notion page creation in %s failed: %s", collection_id, str(e))
            raise RemoteWriteError(
                message=f"Notion page creation failed: {e}",
                collection_id=collection_id,
                context={"error_type": type(e).__name__},
            ) from e

        logger.info("Created Notion page %s in %s", page.get("id"), collection_id)
        return page

    async def aclose(self) -> None:
        await self.client.aclose()
