"""
Panel routes: every control of the credentials & sync form is one endpoint.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError

from import_panel.http.requests.schemas import (
    ApiVersionsResponse,
    ButtonView,
    DateUpdateRequest,
    FieldUpdateRequest,
    FormView,
    NotificationView,
    PanelResponse,
    SubmissionResponse,
)
from import_panel.models import DateField, OperationStatus, SubmissionOutcome
from import_panel.services.errors import OperationInProgress
from import_panel.services.form_state import to_iso
from import_panel.services.panel_controller import PanelController, get_panel_controller

logger = logging.getLogger(__name__)

router = APIRouter()


def _mask(secret: str) -> str:
    return "*" * len(secret)


def panel_view(panel: PanelController) -> PanelResponse:
    """Render the current state the way the page shows it (secrets masked, buttons derived)."""
    state = panel.expire_notification()
    form = state.form
    return PanelResponse(
        form=FormView(
            api_key=_mask(form.api_key),
            password=_mask(form.password),
            store_url=form.store_url,
            api_version=form.api_version,
            created_at_min=to_iso(form.created_at_min),
            created_at_max=to_iso(form.created_at_max),
            full_fetch_sync=form.full_fetch_sync,
        ),
        errors=state.error_list(),
        status=state.status,
        buttons=ButtonView(
            fetch_disabled=state.busy,
            sync_disabled=state.busy,
            refresh_disabled=state.activity_loading,
            fetch_label="Fetching..." if state.status == OperationStatus.FETCH_IN_FLIGHT else "Fetch Data",
            sync_label="Syncing..." if state.status == OperationStatus.SYNC_IN_FLIGHT else "Sync Data",
        ),
        notification=NotificationView(visible=state.notification.visible, message=state.notification.message),
        activity=list(state.activity),
        api_versions=panel.api_versions,
    )


@router.get("", response_model=PanelResponse)
async def show_panel(panel: PanelController = Depends(get_panel_controller)):
    """Current panel; the first call also loads the activity table"""
    await panel.mount()
    return panel_view(panel)


@router.patch("/form", response_model=PanelResponse)
async def update_field(request: FieldUpdateRequest, panel: PanelController = Depends(get_panel_controller)):
    """Set one form field"""
    try:
        panel.update_field(request.name, request.value)
    except ValidationError as e:
        # pydantic's ValidationError is a ValueError; keep this branch first
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return panel_view(panel)


@router.put("/form/dates/{which}", response_model=PanelResponse)
async def update_date(
    which: DateField,
    request: DateUpdateRequest,
    panel: PanelController = Depends(get_panel_controller),
):
    """Pick (or clear) the start or end date"""
    panel.update_date(which, request.value)
    return panel_view(panel)


async def _submit(panel: PanelController, submit) -> SubmissionResponse:
    try:
        outcome: SubmissionOutcome = await submit()
    except OperationInProgress as e:
        logger.info("Submission refused: %s", e)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return SubmissionResponse(outcome=outcome, panel=panel_view(panel))


@router.post("/fetch", response_model=SubmissionResponse)
async def submit_fetch(panel: PanelController = Depends(get_panel_controller)):
    """Validate and send the form to the backend fetch endpoint"""
    return await _submit(panel, panel.submit_fetch)


@router.post("/sync", response_model=SubmissionResponse)
async def submit_sync(panel: PanelController = Depends(get_panel_controller)):
    """Validate and send the form to the backend sync endpoint"""
    return await _submit(panel, panel.submit_sync)


@router.post("/activity/refresh", response_model=PanelResponse)
async def refresh_activity(panel: PanelController = Depends(get_panel_controller)):
    await panel.load_activity()
    return panel_view(panel)


@router.delete("/errors", response_model=PanelResponse)
async def dismiss_errors(panel: PanelController = Depends(get_panel_controller)):
    panel.dismiss_errors()
    return panel_view(panel)


@router.delete("/notification", response_model=PanelResponse)
async def dismiss_notification(panel: PanelController = Depends(get_panel_controller)):
    panel.dismiss_notification()
    return panel_view(panel)


@router.get("/api-versions", response_model=ApiVersionsResponse)
async def list_api_versions(
    query: str = Query("", description="Case-insensitive filter"),
    panel: PanelController = Depends(get_panel_controller),
):
    return ApiVersionsResponse(versions=panel.filter_api_versions(query))
