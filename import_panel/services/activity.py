"""
Activity table: turns the backend status payload into numbered display rows.
"""
from datetime import datetime
from typing import List, Optional

from import_panel.http.requests.schemas import BackendStatusResponse
from import_panel.models import ActivityRecord

DEFAULT_DATE_FORMAT = "%d %b %Y %H:%M"
MISSING = "N/A"


def format_timestamp(value: Optional[str], date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Render a backend timestamp for people. Unparseable values are shown as-is."""
    if not value:
        return MISSING
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime(date_format)


def format_range(start: Optional[str], end: Optional[str], date_format: str = DEFAULT_DATE_FORMAT) -> str:
    return f"{format_timestamp(start, date_format)} - {format_timestamp(end, date_format)}"


def build_activity(status: BackendStatusResponse, date_format: str = DEFAULT_DATE_FORMAT) -> List[ActivityRecord]:
    """One row per store, numbered from 1; last sync bounds are global and repeat on every row."""
    last_sync = format_range(status.last_sync_min, status.last_sync_max, date_format)
    return [
        ActivityRecord(
            id=index,
            store_name=store.store_name,
            fetched_range=format_range(store.created_at_min_shopify, store.created_at_max_shopify, date_format),
            last_sync_summary=last_sync,
        )
        for index, store in enumerate(status.store_order_dates, start=1)
    ]
