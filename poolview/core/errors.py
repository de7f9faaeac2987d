"""
Error taxonomy for PoolView.

Every error a request can end with maps onto one HTTP status; the API layer
renders them as ``{"error": ..., "details": ...}``.
"""
from typing import Optional


class PoolViewError(Exception):
    status_code: int = 500

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(PoolViewError):
    status_code = 400


class NotFound(PoolViewError):
    status_code = 404


class MethodNotAllowed(PoolViewError):
    status_code = 405


class UpstreamError(PoolViewError):
    """The indexing service failed or returned data we cannot use."""
    status_code = 500


class InvalidEvent(ValueError):
    """A deposit/withdrawal record is missing a field or carries a malformed value."""

    def __init__(self, message: str, index: Optional[int] = None, kind: Optional[str] = None):
        super().__init__(message)
        self.index = index
        self.kind = kind


class ConfigError(RuntimeError):
    """Raised at startup when required settings are absent or invalid."""
