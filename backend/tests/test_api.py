"""
TimeRelay Backend — HTTP Endpoint Tests
=========================================

What:  Exercises every route through the ASGI app with mocked remote clients.
How:   HTTPX AsyncClient + ASGITransport (see conftest.test_client).

What we test:
    ✅ Status codes and JSON shapes of every endpoint
    ✅ Fixed, non-leaking {"error": …} bodies on remote failures
    ✅ Report endpoint disabled (500) without Google credentials
    ✅ Request ID header, access log fields and open CORS
    ✅ 422 on malformed bodies; catch-all handler keeps the per-route message
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from notion_pages import client_page, demand_page, entry_page
from timerelay.exceptions import (
    RemoteQueryError,
    RemoteWriteError,
    SpreadsheetError,
)
from timerelay.main import create_app


class TestLiveness:

    @pytest.mark.asyncio
    async def test_root_returns_plain_text(self, test_client):
        response = await test_client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "no ar" in response.text

    @pytest.mark.asyncio
    async def test_health_reports_spreadsheet_configured(self, test_client):
        response = await test_client.get("/health")
        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["spreadsheet"] == "configured"

    @pytest.mark.asyncio
    async def test_request_id_echoed(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_with_unsafe_characters_replaced(self, test_client):
        response = await test_client.get("/", headers={"X-Request-ID": "x [ERROR] forged"})

        rid = response.headers["X-Request-ID"]
        assert rid != "x [ERROR] forged"
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_access_log_names_matched_route(self, test_client, mock_store, caplog):
        caplog.set_level(logging.INFO, logger="timerelay.access")

        await test_client.get("/api/clients", headers={"X-Request-ID": "trace-1"})

        (record,) = [r for r in caplog.records if r.name == "timerelay.access"]
        assert record.route == "list_clients"
        assert record.status == 200
        assert record.request_id == "trace-1"
        assert "GET /api/clients -> list_clients 200" in record.getMessage()

    @pytest.mark.asyncio
    async def test_health_not_access_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="timerelay.access")

        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "timerelay.access"]

    @pytest.mark.asyncio
    async def test_cors_open_to_any_origin(self, test_client):
        response = await test_client.get("/api/clients", headers={"Origin": "https://timer.example"})
        assert response.headers["access-control-allow-origin"] == "*"


class TestClientsEndpoint:

    @pytest.mark.asyncio
    async def test_lists_clients(self, test_client, mock_store):
        mock_store.query.return_value = [client_page("c1", "Acme"), client_page("c2")]

        response = await test_client.get("/api/clients")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "c1", "name": "Acme"},
            {"id": "c2", "name": "Sem nome"},
        ]

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client, mock_store):
        response = await test_client.get("/api/clients")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_remote_failure_returns_500(self, test_client, mock_store):
        mock_store.query.side_effect = RemoteQueryError(
            message="unauthorized token abc", collection_id="clients-db"
        )

        response = await test_client.get("/api/clients")

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao obter clientes do Notion."}

    @pytest.mark.asyncio
    async def test_unexpected_error_returns_route_message(self, app, mock_store):
        mock_store.query.side_effect = KeyError("properties")

        # Starlette re-raises unhandled errors after the 500 is sent unless told not to
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/clients")

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao obter clientes do Notion."}


class TestDemandsEndpoints:

    @pytest.mark.asyncio
    async def test_lists_demands_with_client_id(self, test_client, mock_store):
        mock_store.query.return_value = [demand_page("d1", "Design", "c1"), demand_page("d2", "Solo")]

        response = await test_client.get("/api/demands")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "d1", "name": "Design", "clientId": "c1"},
            {"id": "d2", "name": "Solo", "clientId": None},
        ]

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client, mock_store):
        response = await test_client.get("/api/demands")
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_failure_returns_500(self, test_client, mock_store):
        mock_store.query.side_effect = RemoteQueryError()

        response = await test_client.get("/api/demands")

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao obter demandas do Notion."}

    @pytest.mark.asyncio
    async def test_create_demand(self, test_client, mock_store):
        mock_store.create.return_value = {"id": "generated-id"}

        response = await test_client.post(
            "/api/demands", json={"clientId": "C1", "demandName": "Onboarding"}
        )

        assert response.status_code == 201
        assert response.json() == {"id": "generated-id", "name": "Onboarding", "clientId": "C1"}

    @pytest.mark.asyncio
    async def test_create_failure_returns_500(self, test_client, mock_store):
        mock_store.create.side_effect = RemoteWriteError()

        response = await test_client.post(
            "/api/demands", json={"clientId": "C1", "demandName": "Onboarding"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao criar demanda no Notion."}

    @pytest.mark.asyncio
    async def test_missing_field_rejected(self, test_client, mock_store):
        response = await test_client.post("/api/demands", json={"clientId": "C1"})
        assert response.status_code == 422
        mock_store.create.assert_not_awaited()


class TestTimeEntriesEndpoint:

    @pytest.mark.asyncio
    async def test_returns_created_record(self, test_client, mock_store):
        created = {"object": "page", "id": "entry-1", "url": "https://notion.so/entry-1"}
        mock_store.create.return_value = created

        response = await test_client.post(
            "/api/time-entries", json={"demandId": "D1", "durationSeconds": 3600}
        )

        assert response.status_code == 201
        assert response.json() == created
        properties = mock_store.create.await_args.args[1]
        assert properties["Duração"] == {"number": 1.0}

    @pytest.mark.asyncio
    async def test_negative_duration_rejected(self, test_client, mock_store):
        response = await test_client.post(
            "/api/time-entries", json={"demandId": "D1", "durationSeconds": -5}
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_non_finite_duration_rejected(self, test_client, mock_store):
        # 1e400 is valid JSON but overflows to inf
        response = await test_client.post(
            "/api/time-entries",
            content=b'{"demandId": "D1", "durationSeconds": 1e400}',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"] == ["body", "durationSeconds"]
        mock_store.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_write_failure_returns_500(self, test_client, mock_store):
        mock_store.create.side_effect = RemoteWriteError()

        response = await test_client.post(
            "/api/time-entries", json={"demandId": "D1", "durationSeconds": 60}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao criar registro de tempo no Notion."}


class TestGenerateReportEndpoint:

    @staticmethod
    def _serve(mock_store, demands, entries):
        async def query(collection_id, filter=None, sorts=None):
            return demands if collection_id == "demands-db" else entries

        mock_store.query.side_effect = query

    @pytest.mark.asyncio
    async def test_writes_report(self, test_client, mock_store, mock_spreadsheet):
        self._serve(mock_store, [demand_page("D1", "Design", "C1")], [entry_page("E1", "D1", 2.0)])

        response = await test_client.post(
            "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Planilha atualizada com sucesso!",
            "sheetUrl": "https://docs.google.com/spreadsheets/d/sheet-123",
        }
        mock_spreadsheet.write_table.assert_awaited_once_with(
            "Acme", [["Demand", "Hours"], ["Design", 2.0]]
        )

    @pytest.mark.asyncio
    async def test_no_demands_message_only(self, test_client, mock_store, mock_spreadsheet):
        self._serve(mock_store, [], [])

        response = await test_client.post(
            "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Nenhuma demanda encontrada para o cliente Acme."}
        mock_spreadsheet.ensure_sheet.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_entries_message_only(self, test_client, mock_store):
        self._serve(mock_store, [demand_page("D1", "Design", "C1")], [])

        response = await test_client.post(
            "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "message": "Nenhum registro de tempo na última semana para Acme."
        }

    @pytest.mark.asyncio
    async def test_spreadsheet_failure_returns_500(self, test_client, mock_store, mock_spreadsheet):
        self._serve(mock_store, [demand_page("D1", "Design", "C1")], [entry_page("E1", "D1", 2.0)])
        mock_spreadsheet.write_table.side_effect = SpreadsheetError(sheet_name="Acme")

        response = await test_client.post(
            "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao gerar relatório."}

    @pytest.mark.asyncio
    async def test_data_integrity_failure_returns_500(self, test_client, mock_store):
        self._serve(mock_store, [demand_page("D1", "Design", "C1")], [entry_page("E1", None, 2.0)])

        response = await test_client.post(
            "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "Falha ao gerar relatório."}

    @pytest.mark.asyncio
    async def test_unconfigured_spreadsheet_returns_500(
        self, unconfigured_settings, mock_store, clock
    ):
        app = create_app(unconfigured_settings, record_store=mock_store, clock=clock)
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            report = await client.post(
                "/api/generate-report", json={"clientId": "C1", "clientName": "Acme"}
            )
            clients = await client.get("/api/clients")
            health = await client.get("/health")

        assert report.status_code == 500
        assert report.json() == {"error": "Falha ao gerar relatório."}
        assert clients.status_code == 200
        assert health.json()["spreadsheet"] == "not_configured"
