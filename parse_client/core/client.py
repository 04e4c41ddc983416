"""
Core HTTP client for the Parse REST API.

Handles authentication headers, body encoding, query compilation and
transport failures. HTTP statuses are never interpreted here: every
delivered response comes back as a Response, whatever its status code.
"""

import http.client
import json
import logging
import urllib.error
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from parse_client.core.errors import ConfigurationError, RequestError
from parse_client.core.filters import compile_query, encode_json
from parse_client.core.types import Credentials, FilterMap, OptionsMap, Response

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_TIMEOUT = 60
APPLICATION_ID_HEADER = "X-Parse-Application-Id"
API_KEY_HEADER = "X-Parse-REST-API-Key"
SESSION_TOKEN_HEADER = "X-Parse-Session-Token"
JSON_CONTENT_TYPE = "application/json"

METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = ("POST", "PUT")


# =============================================================================
# Transport
# =============================================================================


@dataclass
class TransportResult:
    """What a transport hands back for a delivered response."""

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


Transport = Callable[[str, str, dict[str, str], bytes | None, dict[str, Any]], TransportResult]


def urllib_transport(
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None,
    options: dict[str, Any],
) -> TransportResult:
    """
    Send one request with urllib.

    Args:
        method: HTTP method
        url: Full URL including any query string
        headers: Outgoing headers
        body: Encoded payload, or None for no payload
        options: Transport options; "timeout" (seconds) is honoured

    Returns:
        TransportResult for any delivered response, including 4xx/5xx

    Raises:
        RequestError: On connection errors and timeouts

    """
    timeout = options.get("timeout", DEFAULT_TIMEOUT)
    req = urllib.request.Request(url, data=body, headers=headers, method=method)

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            return TransportResult(
                status=response.status,
                body=response.read(),
                headers=dict(response.headers.items()),
            )

    except urllib.error.HTTPError as e:
        # Delivered error statuses are responses, not failures
        error_headers = dict(e.headers.items()) if e.headers else {}
        try:
            error_body = e.read() or b""
        except (OSError, http.client.HTTPException) as read_error:
            raise RequestError(f"Malformed response: {read_error!r}", status=e.code) from read_error
        return TransportResult(status=e.code, body=error_body, headers=error_headers)

    except urllib.error.URLError as e:
        raise RequestError(f"Connection error: {e.reason}") from e

    except TimeoutError as e:
        raise RequestError(f"Request timed out after {timeout} seconds") from e

    except OSError as e:
        raise RequestError(f"Connection error: {e}") from e

    except http.client.HTTPException as e:
        raise RequestError(f"Malformed response: {e!r}") from e


# =============================================================================
# Dispatcher
# =============================================================================


class APIClient:
    """
    Low-level HTTP client for the Parse REST API.

    Handles:
    - Authentication via application id and REST API key headers
    - HTTP methods (GET, POST, PUT, DELETE)
    - JSON body encoding and response parsing
    - Compiling filters and options into the query string
    """

    def __init__(
        self,
        credentials: Credentials,
        transport: Transport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the API client.

        Args:
            credentials: Application id, REST API key and base URL
            transport: Callable performing the network call (defaults to urllib)
            timeout: Default request timeout in seconds, passed to the transport

        """
        self.credentials = credentials
        self.transport = transport or urllib_transport
        self.timeout = timeout

    def _ensure_credentials(self) -> Credentials:
        """Ensure both authentication values are configured."""
        if not self.credentials.application_id:
            raise ConfigurationError("PARSE_APPLICATION_ID environment variable not set")
        if not self.credentials.api_key:
            raise ConfigurationError("PARSE_API_KEY environment variable not set")
        return self.credentials

    def _build_url(self, path: str) -> str:
        """Build full URL from a path relative to the API base."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.credentials.base_url}/{path.lstrip('/')}"

    def _build_headers(self, method: str, extra: dict[str, str] | None) -> dict[str, str]:
        credentials = self._ensure_credentials()
        headers = {
            APPLICATION_ID_HEADER: credentials.application_id,
            API_KEY_HEADER: credentials.api_key,
        }
        if method in BODY_METHODS:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        for name, value in (extra or {}).items():
            # Header names are case-insensitive
            for existing in [k for k in headers if k.lower() == name.lower()]:
                del headers[existing]
            headers[name] = value
        return headers

    @staticmethod
    def _encode_body(method: str, body: Any) -> bytes | None:
        if method not in BODY_METHODS or body is None or body in ("", b""):
            return None
        if isinstance(body, (bytes, bytearray)):
            return bytes(body)
        return encode_json(body).encode("utf-8")

    @staticmethod
    def _decode_body(result: TransportResult) -> Any:
        if not result.body or not result.body.strip():
            return None
        try:
            return json.loads(result.body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            text = result.body.decode("utf-8", errors="replace")
            # Error pages from proxies are delivered responses; keep them raw
            if not 200 <= result.status < 300:
                return text
            raise RequestError(
                f"Invalid JSON response: {e}",
                status=result.status,
                body=text,
            ) from e

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """
        Make one HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path relative to the base URL (e.g., classes/GameScore)
            body: Request body for POST/PUT; bytes are sent raw, anything else as JSON
            headers: Extra headers, overriding the defaults on collision
            transport_options: Passed through to the transport (e.g., {"timeout": 5})

        Returns:
            Response with the status code and parsed JSON body (raw text for a
            non-2xx body that is not JSON), for any status

        Raises:
            ConfigurationError: If the application id or API key is missing
            EncodingError: If the body has no JSON representation
            RequestError: On transport failure or an undecodable 2xx response body

        """
        method = method.upper()
        if method not in METHODS:
            raise ConfigurationError(f"Unsupported HTTP method: {method}")

        url = self._build_url(path)
        outgoing_headers = self._build_headers(method, headers)
        payload = self._encode_body(method, body)
        options = {"timeout": self.timeout, **(transport_options or {})}

        # Query strings can carry credentials (login), keep them out of logs
        log_url = url.split("?", 1)[0]
        try:
            result = self.transport(method, url, outgoing_headers, payload, options)
        except RequestError as e:
            logger.warning("%s %s failed: %s", method, log_url, e.message)
            raise
        except OSError as e:
            logger.warning("%s %s failed: %s", method, log_url, e)
            raise RequestError(f"Connection error: {e}") from e
        except http.client.HTTPException as e:
            logger.warning("%s %s failed: %r", method, log_url, e)
            raise RequestError(f"Malformed response: {e!r}") from e

        logger.debug("%s %s -> %s", method, log_url, result.status)
        return Response(
            status_code=result.status,
            body=self._decode_body(result),
            headers=dict(result.headers),
        )

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(
        self,
        path: str,
        filters: FilterMap | None = None,
        options: OptionsMap | None = None,
        headers: dict[str, str] | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """Make a GET request, compiling filters and options into the query string."""
        query_string = compile_query(filters, options)
        if query_string:
            separator = "&" if "?" in path else "?"
            path = f"{path}{separator}{query_string}"
        return self.request("GET", path, headers=headers, transport_options=transport_options)

    def post(
        self,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """Make a POST request."""
        return self.request("POST", path, body, headers, transport_options)

    def put(
        self,
        path: str,
        body: Any = None,
        headers: dict[str, str] | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """Make a PUT request."""
        return self.request("PUT", path, body, headers, transport_options)

    def delete(
        self,
        path: str,
        headers: dict[str, str] | None = None,
        transport_options: dict[str, Any] | None = None,
    ) -> Response:
        """Make a DELETE request."""
        return self.request("DELETE", path, headers=headers, transport_options=transport_options)
