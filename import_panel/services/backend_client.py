"""
Import backend API client.

GET  /            store order-date ranges and last sync bounds (activity table)
POST /api/save/   trigger a scoped fetch
POST /api/sync/   trigger a full or date-scoped sync
"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from import_panel.http.requests.schemas import BackendStatusResponse
from import_panel.models import OperationKind
from import_panel.services.errors import ServerRejection, TransportFailure
from import_panel.services.http_client import get_with_retry, post_no_retry

logger = logging.getLogger(__name__)

ENDPOINTS = {
    OperationKind.FETCH: "/api/save/",
    OperationKind.SYNC: "/api/sync/",
}


def extract_message(response: httpx.Response) -> Optional[str]:
    """Server-supplied message from a JSON body: "message", else a string "detail" (FastAPI)."""
    try:
        data = response.json()
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    for key in ("message", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


class ImportBackendClient:
    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        activity_max_retries: int = 0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.activity_max_retries = activity_max_retries
        self.transport = transport

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def get_status(self) -> BackendStatusResponse:
        """Fetch the activity summary. Raises ServerRejection / TransportFailure."""
        url = self.url("/")
        try:
            response = await get_with_retry(
                url,
                timeout=self.timeout,
                max_retries=self.activity_max_retries,
                transport=self.transport,
            )
        except httpx.HTTPError as e:
            raise TransportFailure(f"GET {url} failed: {e}") from e

        if not response.is_success:
            raise ServerRejection(response.status_code, extract_message(response))

        try:
            return BackendStatusResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise TransportFailure(f"GET {url} returned an unreadable body: {e}") from e

    async def submit(self, kind: OperationKind, payload: Dict[str, Any]) -> Optional[str]:
        """
        POST the form payload for a fetch or sync. Single attempt, no retries.
        Returns the server's message (if any) on 2xx.
        """
        url = self.url(ENDPOINTS[kind])
        logger.info("POST %s for store=%s", url, payload.get("store_url"))
        try:
            response = await post_no_retry(url, json=payload, timeout=self.timeout, transport=self.transport)
        except httpx.HTTPError as e:
            raise TransportFailure(f"POST {url} failed: {e}") from e

        if not response.is_success:
            raise ServerRejection(response.status_code, extract_message(response))
        return extract_message(response)
