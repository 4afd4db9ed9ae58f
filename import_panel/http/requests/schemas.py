"""
Pydantic schemas for request/response validation (Http/Requests).
Covers both the panel's own routes and the import backend's wire format.
"""
from pydantic import BaseModel, Field
from typing import Any, Optional, List
from datetime import datetime

from import_panel.models import ActivityRecord, OperationStatus, SubmissionOutcome


# Import backend wire format
class StoreOrderDates(BaseModel):
    store_name: str
    created_at_min_shopify: Optional[str] = None
    created_at_max_shopify: Optional[str] = None
    updated_at: Optional[str] = None


class BackendStatusResponse(BaseModel):
    """GET / on the import backend"""
    store_order_dates: List[StoreOrderDates] = Field(default_factory=list)
    last_sync_min: Optional[str] = None
    last_sync_max: Optional[str] = None


class BackendSubmission(BaseModel):
    """Body of POST /api/save/ and /api/sync/"""
    api_key: str
    password: str
    store_url: str
    api_version: str
    created_at_min: Optional[str] = None
    created_at_max: Optional[str] = None
    full_fetch_sync: bool = False


# Panel routes
class FieldUpdateRequest(BaseModel):
    name: str
    value: Any = None


class DateUpdateRequest(BaseModel):
    value: Optional[datetime] = None


class FormView(BaseModel):
    api_key: str
    password: str
    store_url: str
    api_version: str
    created_at_min: Optional[str] = None
    created_at_max: Optional[str] = None
    full_fetch_sync: bool


class ButtonView(BaseModel):
    fetch_disabled: bool
    sync_disabled: bool
    refresh_disabled: bool
    fetch_label: str
    sync_label: str


class NotificationView(BaseModel):
    visible: bool
    message: str


class PanelResponse(BaseModel):
    form: FormView
    errors: List[str]
    status: OperationStatus
    buttons: ButtonView
    notification: NotificationView
    activity: List[ActivityRecord]
    api_versions: List[str]


class SubmissionResponse(BaseModel):
    outcome: SubmissionOutcome
    panel: PanelResponse


class ApiVersionsResponse(BaseModel):
    versions: List[str]
