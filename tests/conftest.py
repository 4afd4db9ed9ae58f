"""
Shared fixtures: a PanelController wired to an in-memory import backend.
"""
import json
from datetime import datetime, timezone

import httpx
import pytest

from import_panel.services.backend_client import ImportBackendClient
from import_panel.services.panel_controller import PanelController

BACKEND_URL = "http://backend.test"
STORE = "rdx-sports-store.myshopify.com"
API_VERSIONS = ["2025-01", "2024-10", "2024-07", "2024-04"]

STATUS_BODY = {
    "store_order_dates": [
        {
            "store_name": "rdx-sports-store",
            "created_at_min_shopify": "2025-01-01T00:00:00Z",
            "created_at_max_shopify": "2025-01-31T12:30:00Z",
            "updated_at": "2025-02-01T08:00:00Z",
        },
        {
            "store_name": "rdx-sports-outlet",
            "created_at_min_shopify": None,
            "created_at_max_shopify": "2024-12-31T00:00:00Z",
            "updated_at": None,
        },
    ],
    "last_sync_min": "2025-02-01T00:00:00Z",
    "last_sync_max": "2025-02-02T00:00:00Z",
}


class RecordingBackend:
    """MockTransport handler that records requests and answers from a route table"""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"message": "not found"})
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(request)
        return answer

    def json_bodies(self, path: str):
        return [json.loads(r.content) for r in self.requests if r.url.path == path]


@pytest.fixture
def backend():
    return RecordingBackend({
        ("GET", "/"): httpx.Response(200, json=STATUS_BODY),
        ("POST", "/api/save/"): httpx.Response(200, json={"message": "queued"}),
        ("POST", "/api/sync/"): httpx.Response(200, json={"message": "queued"}),
    })


@pytest.fixture
def make_panel():
    def _make(handler, **kwargs) -> PanelController:
        client = ImportBackendClient(BACKEND_URL, transport=httpx.MockTransport(handler))
        options = {
            "allowed_store_urls": [STORE],
            "api_versions": API_VERSIONS,
        }
        options.update(kwargs)
        return PanelController(client, **options)
    return _make


@pytest.fixture
def panel(make_panel, backend):
    return make_panel(backend)


@pytest.fixture
def valid_credentials():
    return {"api_key": "A" * 32, "password": "B" * 32, "store_url": STORE}


@pytest.fixture
def date_range():
    return (
        datetime(2025, 1, 1, tzinfo=timezone.utc),
        datetime(2025, 1, 31, tzinfo=timezone.utc),
    )


def fill_form(panel: PanelController, credentials: dict, dates=None) -> None:
    for name, value in credentials.items():
        panel.update_field(name, value)
    if dates:
        panel.update_date("created_at_min", dates[0])
        panel.update_date("created_at_max", dates[1])
