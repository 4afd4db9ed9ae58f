"""
Central route registration. The panel is mounted under /panel; the mock
import backend (development only) under settings.MOCK_BACKEND_PREFIX.
"""
import logging
from fastapi import FastAPI

from import_panel.http.controllers import mock, panel

logger = logging.getLogger(__name__)


def register_routes(app: FastAPI, settings) -> None:
    """Register all routers. Call from main.py after creating the FastAPI app."""
    if getattr(settings, "MOCK_BACKEND", False):
        app.include_router(mock.router, prefix=settings.MOCK_BACKEND_PREFIX, tags=["mock-backend"])
        logger.info("📦 MOCK_BACKEND=true: mock import backend mounted at %s", settings.MOCK_BACKEND_PREFIX)

    app.include_router(panel.router, prefix="/panel", tags=["panel"])
