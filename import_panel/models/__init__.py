"""
Panel state models.
All state and enum definitions live here for simplicity and to avoid circular imports.
Every model is frozen: state changes only by building a new object (see services/form_state.reduce).
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import enum

from pydantic import BaseModel, ConfigDict, field_validator


# Enums
class OperationKind(str, enum.Enum):
    FETCH = "FETCH"
    SYNC = "SYNC"


class OperationStatus(str, enum.Enum):
    IDLE = "IDLE"
    FETCH_IN_FLIGHT = "FETCH_IN_FLIGHT"
    SYNC_IN_FLIGHT = "SYNC_IN_FLIGHT"

    @classmethod
    def in_flight(cls, kind: OperationKind) -> "OperationStatus":
        return cls.FETCH_IN_FLIGHT if kind == OperationKind.FETCH else cls.SYNC_IN_FLIGHT


class SubmissionOutcome(str, enum.Enum):
    SUCCESS = "success"
    INVALID = "invalid"
    REJECTED = "rejected"
    FAILED = "failed"


class DateField(str, enum.Enum):
    CREATED_AT_MIN = "created_at_min"
    CREATED_AT_MAX = "created_at_max"


class FormState(BaseModel):
    """Shopify credentials plus the order date range the backend should work on"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str = ""
    password: str = ""
    store_url: str = ""
    api_version: str = ""
    created_at_min: Optional[datetime] = None
    created_at_max: Optional[datetime] = None
    full_fetch_sync: bool = False

    @field_validator("created_at_min", "created_at_max")
    @classmethod
    def assume_utc(cls, v):
        # Naive datetimes cannot be compared with aware ones
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    visible: bool = False
    message: str = ""
    shown_at: Optional[datetime] = None


class ActivityRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    store_name: str
    fetched_range: str
    last_sync_summary: str


class PanelState(BaseModel):
    """Everything the panel view renders. Replaced wholesale on every transition."""
    model_config = ConfigDict(frozen=True)

    form: FormState = FormState()
    errors: Tuple[str, ...] = ()
    status: OperationStatus = OperationStatus.IDLE
    notification: Notification = Notification()
    activity: Tuple[ActivityRecord, ...] = ()
    activity_loading: bool = False
    mounted: bool = False

    @property
    def busy(self) -> bool:
        return self.status != OperationStatus.IDLE

    def error_list(self) -> List[str]:
        return list(self.errors)
