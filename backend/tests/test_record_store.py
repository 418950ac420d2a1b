"""
TimeRelay Backend — Notion Record Store Unit Tests (Mocked)
=============================================================

What:  Tests for NotionRecordStore with a mocked notion_client.AsyncClient.
How:   The SDK client is replaced by a MagicMock whose endpoint methods are
       AsyncMocks; transport errors are simulated with httpx exceptions.

What we test:
    ✅ Query parameters forwarded (filter/sorts only when given)
    ✅ First page of results returned, even when Notion reports more
    ✅ Transport failures wrapped in RemoteQueryError / RemoteWriteError
    ❌ Real API calls
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from timerelay.exceptions import RemoteQueryError, RemoteWriteError
from timerelay.services.record_store import NotionRecordStore


@pytest.fixture
def notion():
    client = MagicMock()
    client.databases.query = AsyncMock(return_value={"results": [], "has_more": False})
    client.pages.create = AsyncMock(return_value={"id": "page-1"})
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def store(notion):
    return NotionRecordStore(api_key="test-key", client=notion)


class TestQuery:

    @pytest.mark.asyncio
    async def test_plain_query_sends_only_database_id(self, store, notion):
        await store.query("db-1")
        notion.databases.query.assert_awaited_once_with(database_id="db-1")

    @pytest.mark.asyncio
    async def test_filter_and_sorts_forwarded(self, store, notion):
        flt = {"property": "Cliente", "relation": {"contains": "c1"}}
        sorts = [{"property": "Nome", "direction": "ascending"}]

        await store.query("db-1", filter=flt, sorts=sorts)

        notion.databases.query.assert_awaited_once_with(
            database_id="db-1", filter=flt, sorts=sorts
        )

    @pytest.mark.asyncio
    async def test_returns_results(self, store, notion):
        pages = [{"id": "a"}, {"id": "b"}]
        notion.databases.query.return_value = {"results": pages, "has_more": False}

        assert await store.query("db-1") == pages

    @pytest.mark.asyncio
    async def test_truncated_result_is_first_page_only(self, store, notion):
        pages = [{"id": str(i)} for i in range(100)]
        notion.databases.query.return_value = {
            "results": pages,
            "has_more": True,
            "next_cursor": "cursor-2",
        }

        result = await store.query("db-1")

        assert result == pages
        notion.databases.query.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_transport_failure_wrapped(self, store, notion):
        notion.databases.query.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(RemoteQueryError) as info:
            await store.query("db-1")

        assert info.value.collection_id == "db-1"
        assert info.value.context["error_type"] == "ConnectError"

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self, store, notion):
        notion.databases.query.side_effect = httpx.ReadTimeout("slow")

        with pytest.raises(RemoteQueryError):
            await store.query("db-1")


class TestCreate:

    @pytest.mark.asyncio
    async def test_creates_page_in_database(self, store, notion):
        properties = {"Nome": {"title": [{"text": {"content": "Acme"}}]}}

        page = await store.create("db-1", properties)

        assert page == {"id": "page-1"}
        notion.pages.create.assert_awaited_once_with(
            parent={"database_id": "db-1"}, properties=properties
        )

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, store, notion):
        notion.pages.create.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(RemoteWriteError) as info:
            await store.create("db-1", {})

        assert info.value.collection_id == "db-1"


@pytest.mark.asyncio
async def test_aclose_closes_sdk_client(store, notion):
    await store.aclose()
    notion.aclose.assert_awaited_once()
