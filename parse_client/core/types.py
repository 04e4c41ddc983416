"""
Core types for the Parse REST API.

These dataclasses provide type safety and IDE support for configuration,
raw responses and the records returned by the API.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_BASE_URL = "https://api.parse.com/1"

# Field name -> literal value or {"$operator": value} map
FilterMap = dict[str, Any]
# Option name ("order", "limit", "count", "include", ...) -> value
OptionsMap = dict[str, Any]

# Keys the API sets on every object
RESERVED_FIELDS = ("objectId", "createdAt", "updatedAt", "ACL")


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class Credentials:
    """Application id, REST API key and base URL for one Parse application."""

    application_id: str | None
    api_key: str | None
    base_url: str = DEFAULT_BASE_URL

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", (self.base_url or DEFAULT_BASE_URL).rstrip("/"))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Credentials":
        """
        Read credentials from the environment.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Credentials built from PARSE_APPLICATION_ID, PARSE_API_KEY and PARSE_URL

        """
        env = os.environ if environ is None else environ
        return cls(
            application_id=env.get("PARSE_APPLICATION_ID"),
            api_key=env.get("PARSE_API_KEY"),
            base_url=env.get("PARSE_URL") or DEFAULT_BASE_URL,
        )

    @property
    def is_complete(self) -> bool:
        """Check if both authentication values are set."""
        return bool(self.application_id and self.api_key)


# =============================================================================
# Responses
# =============================================================================


@dataclass
class Response:
    """A delivered HTTP response. The status code is never interpreted here."""

    status_code: int
    body: Any = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Check if the status is in the 2xx range."""
        return 200 <= self.status_code < 300

    @property
    def error_message(self) -> str | None:
        """Get the Parse error message from a failed response body, if any."""
        if isinstance(self.body, dict) and "error" in self.body:
            return str(self.body["error"])
        return None


# =============================================================================
# Object Types
# =============================================================================


@dataclass
class ParseObject:
    """A stored object (row) of a Parse class."""

    object_id: str
    class_name: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]

    def get(self, key: str, default: Any = None) -> Any:
        """Get a field value."""
        return self.fields.get(key, default)

    @classmethod
    def from_dict(cls, data: dict[str, Any], class_name: str | None = None) -> "ParseObject":
        """Create from API response dict."""
        return cls(
            object_id=data.get("objectId", ""),
            class_name=class_name or data.get("className"),
            created_at=data.get("createdAt"),
            # Creating an object only returns createdAt
            updated_at=data.get("updatedAt") or data.get("createdAt"),
            fields={k: v for k, v in data.items() if k not in RESERVED_FIELDS and k != "className"},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dict in the API's field naming."""
        result: dict[str, Any] = {"objectId": self.object_id}
        if self.created_at:
            result["createdAt"] = self.created_at
        if self.updated_at:
            result["updatedAt"] = self.updated_at
        result.update(self.fields)
        return result


@dataclass
class QueryResult:
    """Result of a class query."""

    results: list[ParseObject]
    count: int | None = None

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    @classmethod
    def from_dict(cls, data: dict[str, Any], class_name: str | None = None) -> "QueryResult":
        """Create from API response dict."""
        return cls(
            results=[ParseObject.from_dict(item, class_name) for item in data.get("results") or []],
            count=data.get("count"),
        )


# =============================================================================
# File Types
# =============================================================================


@dataclass
class ParseFile:
    """An uploaded file."""

    name: str
    url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParseFile":
        """Create from API response dict."""
        return cls(name=data.get("name", ""), url=data.get("url"))

    def to_pointer(self) -> dict[str, Any]:
        """Reference to attach the file to an object field."""
        return {"__type": "File", "name": self.name}
