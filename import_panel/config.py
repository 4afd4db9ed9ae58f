"""
Panel configuration with automatic environment detection
"""
import os
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _split_csv(raw: str) -> List[str]:
    """Split a comma-separated env value, dropping blanks and duplicates (order kept)."""
    seen = set()
    values = []
    for item in raw.split(","):
        item = item.strip()
        if item and item not in seen:
            seen.add(item)
            values.append(item)
    return values


class Settings:
    """Panel settings read from the environment (and .env when present)"""

    # Environment detection
    ENV = os.getenv("ENV", "DEV").upper()
    IS_PRODUCTION = ENV == "PROD" or ENV == "PRODUCTION"
    IS_DEVELOPMENT = not IS_PRODUCTION

    # Server configuration
    HOST = os.getenv("HOST", "127.0.0.1")
    PORT = int(os.getenv("PORT", 8001))

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if IS_PRODUCTION else "DEBUG").upper()

    # Mock backend (fixture responses for /, /api/save/, /api/sync/; no import backend required)
    MOCK_BACKEND = os.getenv("MOCK_BACKEND", "").lower() in ("1", "true", "yes")
    MOCK_BACKEND_PREFIX = "/mock-backend"

    # Shopify credential rules
    MIN_CREDENTIAL_LENGTH = int(os.getenv("MIN_CREDENTIAL_LENGTH", 32))

    # Notifications disappear on their own after this many seconds (0 = only on dismiss)
    NOTIFICATION_TTL_SECONDS = float(os.getenv("NOTIFICATION_TTL_SECONDS", 5))

    # strftime format for the activity table
    ACTIVITY_DATE_FORMAT = os.getenv("ACTIVITY_DATE_FORMAT", "%d %b %Y %H:%M")

    # GET / is idempotent, so it may be retried; submissions never are
    ACTIVITY_MAX_RETRIES = int(os.getenv("ACTIVITY_MAX_RETRIES", 0))

    @property
    def BACKEND_BASE_URL(self) -> str:
        """Import backend base URL. Falls back to the mounted mock backend when MOCK_BACKEND is on."""
        url = os.getenv("BACKEND_BASE_URL", "").strip()
        if url:
            return url.rstrip("/")
        if self.MOCK_BACKEND:
            return f"http://{self.HOST}:{self.PORT}{self.MOCK_BACKEND_PREFIX}"
        return "http://127.0.0.1:8000"

    @property
    def BACKEND_TIMEOUT(self) -> Optional[float]:
        """Seconds before a backend call gives up. Unset means wait for the backend indefinitely."""
        raw = os.getenv("BACKEND_TIMEOUT", "").strip()
        return float(raw) if raw else None

    @property
    def ALLOWED_STORE_URLS(self) -> List[str]:
        """Store domains the panel accepts. Add new stores here (env) rather than in code."""
        return _split_csv(os.getenv("ALLOWED_STORE_URLS", "rdx-sports-store.myshopify.com"))

    @property
    def API_VERSIONS(self) -> List[str]:
        """Supported Shopify Admin API versions, newest first"""
        return _split_csv(os.getenv("API_VERSIONS", "2025-01,2024-10,2024-07,2024-04"))

    @property
    def DEFAULT_API_VERSION(self) -> str:
        return os.getenv("DEFAULT_API_VERSION", "").strip() or self.API_VERSIONS[0]

    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        """Get allowed CORS origins from the ALLOWED_ORIGINS environment variable"""
        origins = []

        # Local frontends in development
        if self.IS_DEVELOPMENT:
            origins.extend([
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ])

        origins.extend(_split_csv(os.getenv("ALLOWED_ORIGINS", "")))
        return _split_csv(",".join(origins))

    def __str__(self):
        return f"Settings(ENV={self.ENV}, IS_PRODUCTION={self.IS_PRODUCTION}, BACKEND={self.BACKEND_BASE_URL})"


# Global settings instance
settings = Settings()
