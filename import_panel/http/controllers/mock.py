"""
Mock import backend. When MOCK_BACKEND=true these routes are mounted under
/mock-backend and the panel talks to them instead of a real backend.
"""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from import_panel.http.requests.schemas import BackendSubmission
from import_panel.mock_data import (
    MOCK_BACKEND_STATUS,
    MOCK_FETCH_RESPONSE,
    MOCK_STORES,
    MOCK_SYNC_RESPONSE,
    MOCK_UNKNOWN_STORE_MESSAGE,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _reject_unknown_store(body: BackendSubmission):
    if body.store_url not in MOCK_STORES:
        logger.info("Mock backend: rejecting unknown store %s", body.store_url)
        return JSONResponse(status_code=400, content={"message": MOCK_UNKNOWN_STORE_MESSAGE})
    return None


@router.get("/")
async def mock_status():
    return MOCK_BACKEND_STATUS


@router.post("/api/save/")
async def mock_fetch(body: BackendSubmission):
    rejection = _reject_unknown_store(body)
    if rejection is not None:
        return rejection
    logger.info("Mock backend: fetch %s %s..%s", body.store_url, body.created_at_min, body.created_at_max)
    return MOCK_FETCH_RESPONSE


@router.post("/api/sync/")
async def mock_sync(body: BackendSubmission):
    rejection = _reject_unknown_store(body)
    if rejection is not None:
        return rejection
    logger.info("Mock backend: sync %s (full=%s)", body.store_url, body.full_fetch_sync)
    return MOCK_SYNC_RESPONSE
