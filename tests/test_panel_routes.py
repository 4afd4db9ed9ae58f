"""
Panel HTTP surface tests, plus an end-to-end run against the mock import backend
"""
import asyncio
from types import SimpleNamespace

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from main import app
from routes.api import register_routes
from import_panel.http.controllers import mock
from import_panel.models import OperationKind, SubmissionOutcome
from import_panel.services.backend_client import ImportBackendClient
from import_panel.services.form_state import (
    MSG_DATES_REQUIRED,
    MSG_DATES_WITH_FULL_SYNC,
    MSG_START_AFTER_END,
    StartOperation,
)
from import_panel.services.panel_controller import PanelController, get_panel_controller

from conftest import STORE, fill_form


@pytest.fixture
def client(panel):
    app.dependency_overrides[get_panel_controller] = lambda: panel
    yield TestClient(app)
    app.dependency_overrides.clear()


def fill_via_api(client, credentials):
    for name, value in credentials.items():
        assert client.patch("/panel/form", json={"name": name, "value": value}).status_code == 200


class TestPanelView:
    """GET /panel and the activity refresh route"""

    def test_first_view_loads_activity(self, client, backend):
        """Test the first view loads activity once and derives the buttons"""
        response = client.get("/panel")

        assert response.status_code == 200
        data = response.json()
        assert [row["id"] for row in data["activity"]] == [1, 2]
        assert data["status"] == "IDLE"
        assert data["form"]["api_version"] == "2025-01"
        assert data["buttons"] == {
            "fetch_disabled": False,
            "sync_disabled": False,
            "refresh_disabled": False,
            "fetch_label": "Fetch Data",
            "sync_label": "Sync Data",
        }

        client.get("/panel")
        assert len([r for r in backend.requests if r.method == "GET"]) == 1

    def test_secrets_are_masked(self, client, valid_credentials):
        """Test API key and password are masked in the view"""
        fill_via_api(client, valid_credentials)

        form = client.get("/panel").json()["form"]

        assert form["api_key"] == "*" * 32
        assert form["password"] == "*" * 32
        assert form["store_url"] == STORE

    def test_refresh_reloads_activity(self, client, backend):
        """Test the refresh route issues another GET"""
        client.get("/panel")
        response = client.post("/panel/activity/refresh")

        assert response.status_code == 200
        assert len([r for r in backend.requests if r.method == "GET"]) == 2


class TestFormRoutes:
    """Form field and date routes"""

    def test_full_sync_clears_dates(self, client):
        """Test enabling full sync clears both dates"""
        client.put("/panel/form/dates/created_at_min", json={"value": "2025-01-01T00:00:00Z"})
        client.put("/panel/form/dates/created_at_max", json={"value": "2025-01-31T00:00:00Z"})

        form = client.patch("/panel/form", json={"name": "full_fetch_sync", "value": True}).json()["form"]

        assert form["full_fetch_sync"] is True
        assert form["created_at_min"] is None
        assert form["created_at_max"] is None

    def test_full_sync_string_false_keeps_dates(self, client):
        """Test a "false" string for full sync keeps the dates"""
        client.put("/panel/form/dates/created_at_min", json={"value": "2025-01-01T00:00:00Z"})

        form = client.patch("/panel/form", json={"name": "full_fetch_sync", "value": "false"}).json()["form"]

        assert form["full_fetch_sync"] is False
        assert form["created_at_min"] == "2025-01-01T00:00:00.000Z"

    def test_date_refused_while_full_sync_on(self, client):
        """Test picking a date with full sync on is refused with an error"""
        client.patch("/panel/form", json={"name": "full_fetch_sync", "value": True})

        data = client.put("/panel/form/dates/created_at_min", json={"value": "2025-01-01T00:00:00Z"}).json()

        assert data["form"]["created_at_min"] is None
        assert data["form"]["full_fetch_sync"] is True
        assert data["errors"] == [MSG_DATES_WITH_FULL_SYNC]

    def test_rejected_date_shows_error(self, client):
        """Test an out-of-order date is refused with an error"""
        client.put("/panel/form/dates/created_at_max", json={"value": "2025-01-31T00:00:00Z"})
        data = client.put("/panel/form/dates/created_at_min", json={"value": "2025-02-01T00:00:00Z"}).json()

        assert data["form"]["created_at_min"] is None
        assert data["errors"] == [MSG_START_AFTER_END]

    def test_unknown_date_field(self, client):
        """Test an unknown date field answers 400"""
        response = client.put("/panel/form/dates/updated_at", json={"value": None})
        assert response.status_code == 400

    def test_unknown_field(self, client):
        """Test an unknown form field answers 400"""
        response = client.patch("/panel/form", json={"name": "shop_secret", "value": "x"})
        assert response.status_code == 400

    def test_wrong_type(self, client):
        """Test a value pydantic cannot coerce answers 422"""
        response = client.patch("/panel/form", json={"name": "api_key", "value": {"nested": True}})
        assert response.status_code == 422

    def test_api_version_filter(self, client):
        """Test the API version filter route"""
        assert client.get("/panel/api-versions").json()["versions"][0] == "2025-01"
        assert client.get("/panel/api-versions", params={"query": "2024-1"}).json() == {"versions": ["2024-10"]}


class TestSubmissionRoutes:
    """Fetch, sync and dismissal routes"""

    def test_invalid_fetch(self, client, valid_credentials, backend):
        """Test an invalid fetch reports errors without calling the backend"""
        fill_via_api(client, valid_credentials)

        data = client.post("/panel/fetch").json()

        assert data["outcome"] == "invalid"
        assert data["panel"]["errors"] == [MSG_DATES_REQUIRED]
        assert not [r for r in backend.requests if r.method == "POST"]

    def test_successful_sync(self, client, valid_credentials):
        """Test a successful sync shows the notification"""
        fill_via_api(client, valid_credentials)

        data = client.post("/panel/sync").json()

        assert data["outcome"] == "success"
        assert data["panel"]["notification"]["visible"] is True
        assert data["panel"]["status"] == "IDLE"

    def test_dismissals(self, client, valid_credentials):
        """Test errors and the notification can be dismissed"""
        client.post("/panel/fetch")
        assert client.delete("/panel/errors").json()["errors"] == []

        fill_via_api(client, valid_credentials)
        client.post("/panel/sync")
        assert client.delete("/panel/notification").json()["notification"]["visible"] is False

    def test_busy_panel_answers_conflict(self, client, panel):
        """Test a submission while busy answers 409"""
        panel.dispatch(StartOperation(kind=OperationKind.FETCH))
        response = client.post("/panel/sync")
        assert response.status_code == 409


class TestAppRoutes:
    """Application-level routes"""

    def test_health(self):
        """Test the health check"""
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_mock_backend_mounted_only_when_enabled(self):
        """Test the mock backend is served only when enabled"""
        enabled = FastAPI()
        register_routes(enabled, SimpleNamespace(MOCK_BACKEND=True, MOCK_BACKEND_PREFIX="/mock-backend"))
        disabled = FastAPI()
        register_routes(disabled, SimpleNamespace(MOCK_BACKEND=False, MOCK_BACKEND_PREFIX="/mock-backend"))

        assert TestClient(enabled).get("/mock-backend/").status_code == 200
        assert TestClient(disabled).get("/mock-backend/").status_code == 404


class TestAgainstMockBackend:
    """Panel controller talking to the mock backend over ASGI"""

    @pytest.fixture
    def mock_panel(self):
        backend_app = FastAPI()
        backend_app.include_router(mock.router, prefix="/mock-backend")
        client = ImportBackendClient(
            "http://mock.local/mock-backend",
            transport=httpx.ASGITransport(app=backend_app),
        )
        return PanelController(
            client,
            allowed_store_urls=[STORE, "other-store.myshopify.com"],
            api_versions=["2025-01"],
        )

    def test_activity_from_fixtures(self, mock_panel):
        """Test activity rows come from the mock fixtures"""
        asyncio.run(mock_panel.mount())
        assert [r.store_name for r in mock_panel.state.activity] == ["rdx-sports-store", "rdx-sports-outlet"]

    def test_fetch_round_trip(self, mock_panel, valid_credentials, date_range):
        """Test a fetch succeeds against the mock backend"""
        fill_form(mock_panel, valid_credentials, date_range)
        assert asyncio.run(mock_panel.submit_fetch()) == SubmissionOutcome.SUCCESS

    def test_backend_rejection_surfaces_its_message(self, mock_panel, valid_credentials):
        """Test the mock backend's rejection message is shown"""
        fill_form(mock_panel, dict(valid_credentials, store_url="other-store.myshopify.com"))

        assert asyncio.run(mock_panel.submit_sync()) == SubmissionOutcome.REJECTED
        assert mock_panel.state.error_list() == ["invalid credentials"]
