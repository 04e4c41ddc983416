"""Error types shared by the filter compiler, the dispatcher and the CLI."""

from typing import Any


class ClientError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class EncodingError(ClientError):
    """Filter, option or body data has no JSON representation."""


class RequestError(ClientError):
    """Transport-level failure, with whatever status and body were available."""

    def __init__(self, message: str, status: int = 0, body: Any = None, details: dict | None = None):
        super().__init__(message, details)
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.body is not None:
            result["body"] = self.body
        return result


class ConfigurationError(ClientError):
    """Missing credentials or invalid local input (not API errors)."""


class APIError(RequestError):
    """The API answered with a non-success status. Raised by the SDK's typed helpers only."""

    @classmethod
    def from_response(cls, response: Any, action: str) -> "APIError":
        """Build from a Response whose status is outside the 2xx range."""
        body = response.body
        message = response.error_message or f"{action} failed with status {response.status_code}"
        details = {"code": body["code"]} if isinstance(body, dict) and "code" in body else None
        return cls(message, status=response.status_code, body=body, details=details)
