"""Pydantic models shared across ultradns modules.

**Configuration model** -- :class:`APIOptions`, the settings needed to open an
authenticated connection.

**Wire models** -- :class:`TokenResponse` and :class:`ErrorPayload`, the two
JSON shapes this package reads from the UltraDNS API. The API is inconsistent
about field naming and may send ``errorCode`` in one response and
``error_code`` in the next, so both wire models declare every spelling as a
separate aliased field and expose one resolved value per logical field, the
camelCase spelling winning whenever it is non-empty.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

DEFAULT_BASE_URL = "https://api.ultradns.com"
DEFAULT_TIMEOUT = 5.0

_DECIMAL_INTEGER = re.compile(r"[+-]?[0-9]+")


# --- Configuration ---


class APIOptions(BaseModel):
    """Options for :class:`~ultradns.client.connection.APIConnection`.

    ``refresh_token`` may be supplied in lieu of a username and password; the
    first token exchange then uses the refresh grant.

    Example::

        APIOptions(username="api-user", password="s3cret", timeout=10)
    """

    username: str = ""
    password: str = Field(default="", repr=False)
    refresh_token: str = Field(default="", repr=False)
    base_url: str = Field(default=DEFAULT_BASE_URL, description="API root URL")
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="HTTP timeout in seconds, also used as the token expiry margin",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        return value or DEFAULT_BASE_URL


# --- Wire models ---


class TokenResponse(BaseModel):
    """Body of a successful ``POST /authorization/token``.

    ``expiresIn`` arrives as a string-encoded integer; it is kept raw here and
    converted by :meth:`expires_in_seconds` so that a non-numeric value can be
    reported as a decode failure of its own.
    """

    model_config = ConfigDict(extra="ignore")

    access_token_cc: Optional[str] = Field(default=None, alias="accessToken")
    access_token_sc: Optional[str] = Field(default=None, alias="access_token")
    refresh_token_cc: Optional[str] = Field(default=None, alias="refreshToken")
    refresh_token_sc: Optional[str] = Field(default=None, alias="refresh_token")
    expires_in_cc: Optional[Union[int, str]] = Field(default=None, alias="expiresIn")
    expires_in_sc: Optional[Union[int, str]] = Field(default=None, alias="expires_in")

    @property
    def access_token(self) -> str:
        return self.access_token_cc or self.access_token_sc or ""

    @property
    def refresh_token(self) -> str:
        return self.refresh_token_cc or self.refresh_token_sc or ""

    def expires_in_seconds(self) -> int:
        """Return the token lifetime in whole seconds.

        Raises:
            ValueError: If ``expiresIn`` is missing or not a plain base-10
                integer. Underscores, surrounding whitespace and non-ASCII
                digits are rejected even though :func:`int` accepts them.
        """
        raw = self.expires_in_cc if self.expires_in_cc not in (None, "") else self.expires_in_sc
        if raw is None or isinstance(raw, bool):
            raise ValueError("token response has no expiresIn value")
        if isinstance(raw, str) and not _DECIMAL_INTEGER.fullmatch(raw):
            raise ValueError(f"expiresIn is not an integer: {raw!r}")
        return int(raw)


class ErrorPayload(BaseModel):
    """An UltraDNS error body in either naming convention.

    Example bodies that decode to the same resolved values::

        {"errorCode": 60001, "errorMessage": "invalid_grant"}
        {"error_code": 60001, "error_message": "invalid_grant"}
    """

    model_config = ConfigDict(extra="ignore")

    # Numerical code
    error_code_cc: Optional[StrictInt] = Field(default=None, alias="errorCode")
    error_code_sc: Optional[StrictInt] = Field(default=None, alias="error_code")
    # Human-readable message
    error_message_cc: Optional[str] = Field(default=None, alias="errorMessage")
    error_message_sc: Optional[str] = Field(default=None, alias="error_message")
    # Short tag, e.g. 'unsupported_grant_type'
    error: Optional[str] = None
    # Usually "<code>: <message>"
    error_description_cc: Optional[str] = Field(default=None, alias="errorDescription")
    error_description_sc: Optional[str] = Field(default=None, alias="error_description")

    @property
    def error_code(self) -> int:
        if self.error_code_cc and self.error_code_cc > 0:
            return self.error_code_cc
        return self.error_code_sc or 0

    @property
    def error_message(self) -> str:
        return self.error_message_cc or self.error_message_sc or ""

    @property
    def error_type(self) -> str:
        return self.error or ""

    @property
    def error_description(self) -> str:
        return self.error_description_cc or self.error_description_sc or ""
