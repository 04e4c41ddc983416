"""
Core layer - Raw types, filter compiler and HTTP client.

This layer provides:
- Typed dataclasses for credentials, responses and API records
- The query filter compiler (where clause + options)
- Low-level HTTP client with auth headers and transport error handling
"""

from parse_client.core.client import APIClient, TransportResult, urllib_transport
from parse_client.core.errors import APIError, ClientError, ConfigurationError, EncodingError, RequestError
from parse_client.core.filters import KNOWN_OPERATORS, compile_query, unknown_operators
from parse_client.core.types import (
    Credentials,
    ParseFile,
    ParseObject,
    QueryResult,
    Response,
)

__all__ = [
    "APIClient",
    "APIError",
    "ClientError",
    "ConfigurationError",
    "Credentials",
    "EncodingError",
    "KNOWN_OPERATORS",
    "ParseFile",
    "ParseObject",
    "QueryResult",
    "RequestError",
    "Response",
    "TransportResult",
    "compile_query",
    "unknown_operators",
    "urllib_transport",
]
