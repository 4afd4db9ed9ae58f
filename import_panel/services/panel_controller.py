"""
Credential & sync form controller.

Owns the single PanelState and the two submissions (fetch, sync) plus the
activity refresh. Only one submission may be in flight at a time: the
status moves IDLE -> FETCH_IN_FLIGHT/SYNC_IN_FLIGHT -> IDLE and a second
submit while busy raises OperationInProgress.
"""
import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Callable, List, Optional, Sequence

import httpx

from import_panel.config import settings
from import_panel.models import DateField, OperationKind, PanelState, SubmissionOutcome
from import_panel.services.activity import DEFAULT_DATE_FORMAT, build_activity
from import_panel.services.backend_client import ImportBackendClient
from import_panel.services.errors import OperationInProgress, PanelError, ServerRejection, TransportFailure
from import_panel.services.form_state import (
    MIN_CREDENTIAL_LENGTH,
    Action,
    ActivityLoaded,
    ActivityLoadFailed,
    ClearErrors,
    DismissNotification,
    FinishOperation,
    MarkMounted,
    SetDate,
    SetField,
    ShowErrors,
    ShowNotification,
    StartActivityLoad,
    StartOperation,
    build_payload,
    filter_api_versions,
    initial_state,
    reduce,
    validate,
)

logger = logging.getLogger(__name__)

SUCCESS_MESSAGES = {
    OperationKind.FETCH: "Data fetched successfully.",
    OperationKind.SYNC: "Data synced successfully.",
}
REJECTED_MESSAGES = {
    OperationKind.FETCH: "Failed to fetch data. Check your credentials.",
    OperationKind.SYNC: "Failed to sync data. Check your credentials.",
}
TRANSPORT_MESSAGES = {
    OperationKind.FETCH: "An error occurred while fetching data.",
    OperationKind.SYNC: "An error occurred while syncing data.",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PanelController:
    def __init__(
        self,
        client: ImportBackendClient,
        allowed_store_urls: Sequence[str],
        api_versions: Sequence[str],
        default_api_version: Optional[str] = None,
        min_credential_length: int = MIN_CREDENTIAL_LENGTH,
        notification_ttl: float = 0,
        date_format: str = DEFAULT_DATE_FORMAT,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.client = client
        self.allowed_store_urls = list(allowed_store_urls)
        self.api_versions = list(api_versions)
        self.min_credential_length = min_credential_length
        self.notification_ttl = notification_ttl
        self.date_format = date_format
        self.clock = clock
        self._state = initial_state(default_api_version or self.api_versions[0])

    @classmethod
    def from_settings(cls, transport: Optional[httpx.AsyncBaseTransport] = None) -> "PanelController":
        client = ImportBackendClient(
            settings.BACKEND_BASE_URL,
            timeout=settings.BACKEND_TIMEOUT,
            activity_max_retries=settings.ACTIVITY_MAX_RETRIES,
            transport=transport,
        )
        return cls(
            client,
            allowed_store_urls=settings.ALLOWED_STORE_URLS,
            api_versions=settings.API_VERSIONS,
            default_api_version=settings.DEFAULT_API_VERSION,
            min_credential_length=settings.MIN_CREDENTIAL_LENGTH,
            notification_ttl=settings.NOTIFICATION_TTL_SECONDS,
            date_format=settings.ACTIVITY_DATE_FORMAT,
        )

    @property
    def state(self) -> PanelState:
        return self._state

    def dispatch(self, action: Action) -> PanelState:
        self._state = reduce(self._state, action, api_versions=self.api_versions)
        return self._state

    # ----- Form -----
    def update_field(self, name: str, value: Any) -> PanelState:
        return self.dispatch(SetField(name=name, value=value))

    def update_date(self, which: DateField, value: Optional[datetime]) -> PanelState:
        return self.dispatch(SetDate(which=which, value=value))

    def validate(self, for_fetch: bool) -> List[str]:
        return validate(self._state.form, for_fetch, self.allowed_store_urls, self.min_credential_length)

    def filter_api_versions(self, query: str = "") -> List[str]:
        return filter_api_versions(self.api_versions, query)

    def dismiss_errors(self) -> PanelState:
        return self.dispatch(ClearErrors())

    def dismiss_notification(self) -> PanelState:
        return self.dispatch(DismissNotification())

    def expire_notification(self) -> PanelState:
        """Hide the notification once it has been visible longer than the TTL."""
        notification = self._state.notification
        if notification.visible and self.notification_ttl > 0 and notification.shown_at is not None:
            if self.clock() - notification.shown_at >= timedelta(seconds=self.notification_ttl):
                return self.dispatch(DismissNotification())
        return self._state

    # ----- Submissions -----
    async def submit_fetch(self) -> SubmissionOutcome:
        return await self._submit(OperationKind.FETCH)

    async def submit_sync(self) -> SubmissionOutcome:
        return await self._submit(OperationKind.SYNC)

    async def _submit(self, kind: OperationKind) -> SubmissionOutcome:
        if self._state.busy:
            raise OperationInProgress(f"Cannot start {kind.value}: {self._state.status.value}")

        errors = self.validate(for_fetch=kind == OperationKind.FETCH)
        if errors:
            logger.info("%s not sent: %s validation error(s)", kind.value, len(errors))
            self.dispatch(ShowErrors(errors=tuple(errors)))
            return SubmissionOutcome.INVALID

        self.dispatch(StartOperation(kind=kind))
        payload = build_payload(self._state.form)
        try:
            await self.client.submit(kind, payload)
        except ServerRejection as e:
            logger.warning("%s rejected by backend (HTTP %s): %s", kind.value, e.status_code, e.message)
            self.dispatch(ShowErrors(errors=(e.message or REJECTED_MESSAGES[kind],)))
            return SubmissionOutcome.REJECTED
        except TransportFailure as e:
            logger.error("%s failed: %s", kind.value, e, exc_info=True)
            self.dispatch(ShowErrors(errors=(TRANSPORT_MESSAGES[kind],)))
            return SubmissionOutcome.FAILED
        finally:
            self.dispatch(FinishOperation())

        logger.info("%s succeeded for store=%s", kind.value, payload["store_url"])
        self.dispatch(ClearErrors())
        self.dispatch(ShowNotification(message=SUCCESS_MESSAGES[kind], shown_at=self.clock()))
        return SubmissionOutcome.SUCCESS

    # ----- Activity -----
    async def mount(self) -> PanelState:
        """First view of the panel: load activity once."""
        if not self._state.mounted:
            self.dispatch(MarkMounted())
            await self.load_activity()
        return self._state

    async def load_activity(self) -> bool:
        """
        Refresh the activity table. Failures are logged only: the previous rows
        stay on screen and the error list is left alone.
        """
        if self._state.activity_loading:
            logger.debug("Activity refresh already in flight; ignoring")
            return False

        self.dispatch(StartActivityLoad())
        try:
            status = await self.client.get_status()
            records = build_activity(status, self.date_format)
            self.dispatch(ActivityLoaded(records=tuple(records)))
        except PanelError as e:
            logger.warning("Activity refresh failed: %s", e)
            return False
        finally:
            # Unexpected errors still propagate, but the refresh button comes back
            if self._state.activity_loading:
                self.dispatch(ActivityLoadFailed())

        logger.debug("Activity refreshed: %s store(s)", len(records))
        return True


@lru_cache
def get_panel_controller() -> PanelController:
    """Process-wide panel (FastAPI dependency)."""
    return PanelController.from_settings()
