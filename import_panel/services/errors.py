"""
Panel error types. Services raise these; the panel controller turns them into
state (error list) and the HTTP layer into status codes.
"""
from typing import Optional


class PanelError(Exception):
    """Base class for every error the panel knows how to surface"""


class ServerRejection(PanelError):
    """Backend answered with a non-2xx status"""

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code
        self.message = message


class TransportFailure(PanelError):
    """No usable response: connection error, timeout or unreadable body"""


class OperationInProgress(PanelError):
    """A fetch or sync is already running"""
