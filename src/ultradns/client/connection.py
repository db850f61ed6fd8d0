"""Synchronous, authenticated connection to the UltraDNS API.

:class:`APIConnection` is the thin caller the session layer is built for.
Every request goes through the same three steps:

1. :meth:`~ultradns.auth.session.SessionManager.ensure_authorized`
2. attach ``Authorization: Bearer <token>``
3. :func:`~ultradns.response.raise_for_error` on the response

There is no retry: a failed exchange or request surfaces immediately.

See Also:
    :class:`~ultradns.client.async_connection.AsyncAPIConnection` for the
    non-blocking equivalent.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ultradns.auth.credential import Credential
from ultradns.auth.session import SessionManager
from ultradns.models import APIOptions
from ultradns.response import raise_for_error

logger = logging.getLogger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


def session_from_options(options: APIOptions) -> SessionManager:
    """Create a :class:`SessionManager` for the credential described by *options*."""
    credential = Credential(
        options.username,
        options.password,
        base_url=options.base_url,
        refresh_token=options.refresh_token,
    )
    return SessionManager(credential)


class APIConnection:
    """Blocking UltraDNS connection with transparent token management.

    Must be used as a context manager so that the underlying
    :class:`httpx.Client` is opened and closed.

    Args:
        options: Connection settings. ``timeout`` is both the HTTP timeout
            and the token expiry margin.
        session: Session to authorize requests with. Defaults to a new
            session for the credential in *options*; pass an existing one to
            share tokens between connections.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        with APIConnection(APIOptions(username="u", password="p")) as conn:
            print(conn.get("/status").json())
    """

    def __init__(
        self,
        options: Optional[APIOptions] = None,
        session: Optional[SessionManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._options = options or APIOptions()
        self._session = session or session_from_options(self._options)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    @property
    def session(self) -> SessionManager:
        return self._session

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> APIConnection:
        self._client = httpx.Client(
            base_url=self._options.base_url,
            timeout=self._options.timeout,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def authorize(self) -> None:
        """Make sure the session holds a valid access token."""
        assert self._client is not None, "Connection not open -- use as context manager"
        self._session.ensure_authorized(self._client, self._options.timeout)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        content: Optional[bytes | str] = None,
    ) -> httpx.Response:
        """Send an authorized request and raise on error responses.

        Args:
            method: HTTP method.
            path: URL path appended to the base URL.
            params: Query parameters.
            headers: Extra headers; they override the defaults.
            json_body: JSON-serialisable body.
            content: Raw body.

        Returns:
            The successful :class:`httpx.Response`.

        Raises:
            httpx.HTTPError: On transport failure.
            UltraDNSError: On a failed token exchange or an error response.
        """
        self.authorize()
        assert self._client is not None
        merged_headers = {
            "Accept": "application/json",
            **self._session.credential.authorization_header(),
            **(headers or {}),
        }
        logger.debug("%s %s", method.upper(), path)
        response = self._client.request(
            method,
            path,
            params=params,
            headers=merged_headers,
            json=json_body,
            content=content,
        )
        raise_for_error(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    def json_patch(self, path: str, operations: list[dict[str, Any]]) -> httpx.Response:
        """Send an RFC 6902 JSON Patch document.

        Args:
            path: URL path appended to the base URL.
            operations: Patch operations, e.g.
                ``[{"op": "add", "path": "/rdata/0", "value": "10.0.0.1"}]``.
        """
        return self.request(
            "PATCH",
            path,
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
            content=encode_json_patch(operations),
        )


def encode_json_patch(operations: list[dict[str, Any]]) -> bytes:
    """Serialise JSON Patch *operations* to a request body."""
    return json.dumps(operations).encode("utf-8")
