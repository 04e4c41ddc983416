"""
Parse Client - Three-layer client for the Parse REST API.

Layers:
- core: Filter compiler, request dispatcher and raw types
- sdk: High-level ParseClient with nice ergonomics
- cli: Command-line interface
"""

from parse_client.core import (
    APIError,
    ClientError,
    ConfigurationError,
    Credentials,
    EncodingError,
    RequestError,
    Response,
    compile_query,
)
from parse_client.sdk import ParseClient

__version__ = "0.3.1"
__all__ = [
    "APIError",
    "ClientError",
    "ConfigurationError",
    "Credentials",
    "EncodingError",
    "ParseClient",
    "RequestError",
    "Response",
    "compile_query",
]
