"""Exception hierarchy for ultradns.

All exceptions inherit from :class:`UltraDNSError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ultradns.exit_codes`.
The CLI entry point in :func:`ultradns.app.main` catches ``UltraDNSError``
and exits with the appropriate code.

Network failures are deliberately absent from this hierarchy: errors raised
by the ``httpx`` transport propagate to the caller unchanged.

Subclass hierarchy::

    UltraDNSError (exit 1)
    +-- ConfigError          (exit 1)
    +-- ResponseError        (exit 5)
    |   +-- APIError         (exit 3)
    +-- DecodeError          (exit 7)
        +-- ErrorDecodeError
        +-- TokenDecodeError
"""

from __future__ import annotations

from ultradns.exit_codes import (
    EXIT_API_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SERVER_ERROR,
)

UNRECOGNIZED_ERROR_PAYLOAD = "unrecognized error payload"
"""Rendered message for an error payload with no description, message or type."""


class UltraDNSError(Exception):
    """Base exception for all ultradns errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(UltraDNSError):
    """Raised for configuration problems (missing credentials, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE


class ResponseError(UltraDNSError):
    """Raised when the API returns HTTP >= 400 and the body cannot be read.

    Args:
        message: Human-readable error description.
        status_code: The HTTP status code of the failed response.
    """

    exit_code = EXIT_SERVER_ERROR

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class APIError(ResponseError):
    """A structured error decoded from an UltraDNS error payload.

    The UltraDNS API mixes snake_case and camelCase field names in its error
    bodies; by the time an ``APIError`` exists both spellings have been
    collapsed into the single set of attributes below.

    Attributes:
        status_code: HTTP status code of the failed response.
        code: Numeric UltraDNS error code. ``0`` means absent.
        message: Human-readable error message, possibly empty.
        error_type: Short machine-readable tag such as ``"invalid_grant"``,
            possibly empty.
        description: The description supplied by the server, or
            ``"<code>: <message>"`` when only a message was supplied.

    Example::

        err = APIError(400, code=60004, message="Authorization Header required")
        assert str(err) == "60004: Authorization Header required"
    """

    exit_code = EXIT_API_ERROR

    def __init__(
        self,
        status_code: int,
        code: int = 0,
        message: str = "",
        error_type: str = "",
        description: str = "",
    ):
        self.code = code
        self.message = message
        self.error_type = error_type
        if not description and message:
            description = f"{code}: {message}"
        self.description = description
        super().__init__(self._render(), status_code)

    def _render(self) -> str:
        if self.description:
            return self.description
        if self.error_type:
            return self.error_type
        return UNRECOGNIZED_ERROR_PAYLOAD

    def __repr__(self) -> str:
        return (
            f"APIError(status_code={self.status_code}, code={self.code}, "
            f"message={self.message!r}, error_type={self.error_type!r}, "
            f"description={self.description!r})"
        )


class DecodeError(UltraDNSError):
    """Raised when the API sent a body that does not have the expected shape.

    Kept separate from :class:`APIError` so callers can tell "the server
    rejected us" apart from "the server sent garbage".

    Args:
        message: Human-readable error description.
        status_code: HTTP status code of the response, if known.
        body: The raw body text, kept for diagnosis.
    """

    exit_code = EXIT_DECODE_ERROR

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ErrorDecodeError(DecodeError):
    """An HTTP error response whose body is not the UltraDNS error JSON."""


class TokenDecodeError(DecodeError):
    """A token endpoint response that could not be turned into a token."""
