"""
Mock import-backend responses for development and testing.
Enable with MOCK_BACKEND=true (or 1/yes). Used by import_panel/http/controllers/mock.py.
"""
from datetime import datetime, timedelta, timezone

# Fixed "now" for consistent mock data
_MOCK_NOW = datetime.now(timezone.utc).replace(microsecond=0)


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


MOCK_STORES = [
    "rdx-sports-store.myshopify.com",
]

# ---------------------------------------------------------------------------
# GET /  (activity table)
# ---------------------------------------------------------------------------
MOCK_BACKEND_STATUS = {
    "store_order_dates": [
        {
            "store_name": "rdx-sports-store",
            "created_at_min_shopify": _iso(_MOCK_NOW - timedelta(days=30)),
            "created_at_max_shopify": _iso(_MOCK_NOW - timedelta(days=1)),
            "updated_at": _iso(_MOCK_NOW - timedelta(hours=2)),
        },
        {
            "store_name": "rdx-sports-outlet",
            "created_at_min_shopify": _iso(_MOCK_NOW - timedelta(days=90)),
            "created_at_max_shopify": _iso(_MOCK_NOW - timedelta(days=60)),
            "updated_at": _iso(_MOCK_NOW - timedelta(days=59)),
        },
    ],
    "last_sync_min": _iso(_MOCK_NOW - timedelta(days=7)),
    "last_sync_max": _iso(_MOCK_NOW - timedelta(hours=2)),
}

# ---------------------------------------------------------------------------
# POST /api/save/, /api/sync/
# ---------------------------------------------------------------------------
MOCK_FETCH_RESPONSE = {"message": "Fetch started"}
MOCK_SYNC_RESPONSE = {"message": "Sync started"}
MOCK_UNKNOWN_STORE_MESSAGE = "invalid credentials"
