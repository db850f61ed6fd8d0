"""ultradns -- token management and request signing for the UltraDNS REST API.

The package keeps a bearer-token session valid across many HTTP calls,
refreshing or re-authenticating only when necessary, and normalizes the
API's inconsistently-cased error payloads into a single exception type.

Typical usage::

    from ultradns import APIConnection, APIOptions

    with APIConnection(APIOptions(username="u", password="p")) as conn:
        conn.get("/status")

Modules:
    auth: Credential state and the session manager.
    response: Error classification for HTTP responses.
    client: Thin authenticated connections built on httpx.
    models: Pydantic models for options and wire formats.
    config: Option loading from the environment and credential sources.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command line entry point.
"""

__version__ = "0.1.0"

from ultradns.auth import Credential, SessionManager, TokenState
from ultradns.client import APIConnection, AsyncAPIConnection
from ultradns.exceptions import (
    APIError,
    ConfigError,
    DecodeError,
    ErrorDecodeError,
    ResponseError,
    TokenDecodeError,
    UltraDNSError,
)
from ultradns.models import APIOptions
from ultradns.response import aget_error, araise_for_error, get_error, raise_for_error

__all__ = [
    "APIConnection",
    "APIError",
    "APIOptions",
    "AsyncAPIConnection",
    "ConfigError",
    "Credential",
    "DecodeError",
    "ErrorDecodeError",
    "ResponseError",
    "SessionManager",
    "TokenDecodeError",
    "TokenState",
    "UltraDNSError",
    "aget_error",
    "araise_for_error",
    "get_error",
    "raise_for_error",
]
