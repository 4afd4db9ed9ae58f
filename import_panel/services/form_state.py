"""
Form state transitions and validation.

All panel state changes go through ``reduce(state, action)``: it never mutates
the incoming ``PanelState`` and returns a new one, so every transition can be
tested on its own. Validation is a pure function of the form and the injected
store allow-list.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict

from import_panel.models import (
    ActivityRecord,
    DateField,
    FormState,
    Notification,
    OperationKind,
    OperationStatus,
    PanelState,
)
from import_panel.services.errors import OperationInProgress

logger = logging.getLogger(__name__)

MIN_CREDENTIAL_LENGTH = 32

MSG_REQUIRED = "API key, password and store URL are required."
MSG_API_KEY_LENGTH = "API key must be at least {n} characters long."
MSG_PASSWORD_LENGTH = "Password must be at least {n} characters long."
MSG_INVALID_STORE = "Invalid store URL. Please enter a known store domain."
MSG_DATES_REQUIRED = "Please select both a start date and an end date, or enable full fetch & sync."
MSG_START_AFTER_END = "Start date cannot be after the end date."
MSG_END_BEFORE_START = "End date cannot be before the start date."
MSG_DATES_WITH_FULL_SYNC = "Turn off full fetch & sync to pick a date range."
MSG_UNSUPPORTED_VERSION = "Unsupported API version: {v}"

TEXT_FIELDS = ("api_key", "password", "store_url", "api_version")
DATE_FIELDS = tuple(f.value for f in DateField)


# ----- Actions -----
class Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SetField(Action):
    name: str
    value: Any = None


class SetDate(Action):
    which: DateField
    value: Optional[datetime] = None


class ShowErrors(Action):
    errors: Tuple[str, ...]


class ClearErrors(Action):
    pass


class StartOperation(Action):
    kind: OperationKind


class FinishOperation(Action):
    pass


class ShowNotification(Action):
    message: str
    shown_at: datetime


class DismissNotification(Action):
    pass


class StartActivityLoad(Action):
    pass


class ActivityLoaded(Action):
    records: Tuple[ActivityRecord, ...]


class ActivityLoadFailed(Action):
    pass


class MarkMounted(Action):
    pass


def initial_state(default_api_version: str) -> PanelState:
    """Fresh panel: empty credentials, default API version, no dates."""
    return PanelState(form=FormState(api_version=default_api_version))


# ----- Reducer -----
def _set_date(state: PanelState, which: DateField, value: Optional[datetime]) -> PanelState:
    form = state.form
    # Normalise through the model so naive datetimes become UTC before comparing
    candidate = FormState.model_validate({**form.model_dump(), which.value: value})
    new_value = getattr(candidate, which.value)

    if new_value is not None:
        if form.full_fetch_sync:
            logger.debug("Rejected %s=%s (full fetch & sync is on)", which.value, new_value)
            return state.model_copy(update={"errors": state.errors + (MSG_DATES_WITH_FULL_SYNC,)})
        if which == DateField.CREATED_AT_MIN and form.created_at_max and new_value > form.created_at_max:
            logger.debug("Rejected %s=%s (after end date)", which.value, new_value)
            return state.model_copy(update={"errors": state.errors + (MSG_START_AFTER_END,)})
        if which == DateField.CREATED_AT_MAX and form.created_at_min and new_value < form.created_at_min:
            logger.debug("Rejected %s=%s (before start date)", which.value, new_value)
            return state.model_copy(update={"errors": state.errors + (MSG_END_BEFORE_START,)})

    return state.model_copy(update={"form": candidate})


def _set_field(state: PanelState, name: str, value: Any, api_versions: Optional[Sequence[str]]) -> PanelState:
    if name in DATE_FIELDS:
        return _set_date(state, DateField(name), value)
    if name not in TEXT_FIELDS and name != "full_fetch_sync":
        raise ValueError(f"Unknown form field: {name}")

    if name == "api_version" and api_versions is not None and value not in api_versions:
        return state.model_copy(update={"errors": state.errors + (MSG_UNSUPPORTED_VERSION.format(v=value),)})

    form = FormState.model_validate({**state.form.model_dump(), name: value})
    if name == "full_fetch_sync" and form.full_fetch_sync:
        # Full sync covers every date: flag and cleared dates land in one update
        form = form.model_copy(update={"created_at_min": None, "created_at_max": None})
    return state.model_copy(update={"form": form})


def reduce(
    state: PanelState,
    action: Action,
    *,
    api_versions: Optional[Sequence[str]] = None,
) -> PanelState:
    """Apply one action and return the next panel state."""
    if isinstance(action, SetField):
        return _set_field(state, action.name, action.value, api_versions)
    if isinstance(action, SetDate):
        return _set_date(state, action.which, action.value)
    if isinstance(action, ShowErrors):
        return state.model_copy(update={"errors": tuple(action.errors)})
    if isinstance(action, ClearErrors):
        return state.model_copy(update={"errors": ()})
    if isinstance(action, StartOperation):
        if state.busy:
            raise OperationInProgress(f"{state.status.value} is still running")
        return state.model_copy(update={"status": OperationStatus.in_flight(action.kind)})
    if isinstance(action, FinishOperation):
        return state.model_copy(update={"status": OperationStatus.IDLE})
    if isinstance(action, ShowNotification):
        notification = Notification(visible=True, message=action.message, shown_at=action.shown_at)
        return state.model_copy(update={"notification": notification})
    if isinstance(action, DismissNotification):
        return state.model_copy(update={"notification": Notification()})
    if isinstance(action, StartActivityLoad):
        return state.model_copy(update={"activity_loading": True})
    if isinstance(action, ActivityLoaded):
        return state.model_copy(update={"activity": tuple(action.records), "activity_loading": False})
    if isinstance(action, ActivityLoadFailed):
        return state.model_copy(update={"activity_loading": False})
    if isinstance(action, MarkMounted):
        return state.model_copy(update={"mounted": True})
    raise TypeError(f"Unhandled action: {type(action).__name__}")


# ----- Validation -----
def validate(
    form: FormState,
    for_fetch: bool,
    allowed_store_urls: Sequence[str],
    min_length: int = MIN_CREDENTIAL_LENGTH,
) -> List[str]:
    """
    Check the form before a submission. Every violated rule is reported, in a
    fixed order, so the user sees all problems at once. Empty list = valid.
    """
    errors: List[str] = []
    if not form.api_key or not form.password or not form.store_url:
        errors.append(MSG_REQUIRED)
    if len(form.api_key) < min_length:
        errors.append(MSG_API_KEY_LENGTH.format(n=min_length))
    if len(form.password) < min_length:
        errors.append(MSG_PASSWORD_LENGTH.format(n=min_length))
    if form.store_url not in allowed_store_urls:
        errors.append(MSG_INVALID_STORE)
    if for_fetch and not form.full_fetch_sync:
        if form.created_at_min is None or form.created_at_max is None:
            errors.append(MSG_DATES_REQUIRED)
    return errors


def filter_api_versions(versions: Sequence[str], query: str = "") -> List[str]:
    """Case-insensitive substring match, as the version picker does while typing."""
    if not query:
        return list(versions)
    needle = query.lower()
    return [v for v in versions if needle in v.lower()]


# ----- Payload -----
def to_iso(value: Optional[datetime]) -> Optional[str]:
    """UTC ISO-8601 with millisecond precision and a Z suffix (2025-01-01T00:00:00.000Z)."""
    if value is None:
        return None
    utc = value.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def build_payload(form: FormState) -> Dict[str, Union[str, bool, None]]:
    """Request body for /api/save/ and /api/sync/"""
    return {
        "api_key": form.api_key,
        "password": form.password,
        "store_url": form.store_url,
        "api_version": form.api_version,
        "created_at_min": to_iso(form.created_at_min),
        "created_at_max": to_iso(form.created_at_max),
        "full_fetch_sync": form.full_fetch_sync,
    }
