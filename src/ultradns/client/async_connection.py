"""Asynchronous connection -- mirrors :class:`~ultradns.client.connection.APIConnection`.

:class:`AsyncAPIConnection` wraps :class:`httpx.AsyncClient` and authorizes
through :meth:`~ultradns.auth.session.SessionManager.ensure_authorized_async`,
so many coroutines can share one session and trigger at most one token
exchange between them.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ultradns.auth.session import SessionManager
from ultradns.client.connection import (
    JSON_PATCH_CONTENT_TYPE,
    encode_json_patch,
    session_from_options,
)
from ultradns.models import APIOptions
from ultradns.response import araise_for_error

logger = logging.getLogger(__name__)


class AsyncAPIConnection:
    """Non-blocking UltraDNS connection. Must be used as an async context manager.

    Args:
        options: Connection settings.
        session: Session to authorize requests with; defaults to a new one
            built from *options*.
        transport: Optional async httpx transport.

    Example::

        async with AsyncAPIConnection(options) as conn:
            response = await conn.get("/status")
    """

    def __init__(
        self,
        options: Optional[APIOptions] = None,
        session: Optional[SessionManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._options = options or APIOptions()
        self._session = session or session_from_options(self._options)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def session(self) -> SessionManager:
        return self._session

    async def __aenter__(self) -> AsyncAPIConnection:
        self._client = httpx.AsyncClient(
            base_url=self._options.base_url,
            timeout=self._options.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def authorize(self) -> None:
        assert self._client is not None, "Connection not open -- use as async context manager"
        await self._session.ensure_authorized_async(self._client, self._options.timeout)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        content: Optional[bytes | str] = None,
    ) -> httpx.Response:
        """Send an authorized request and raise on error responses.

        Behaves like :meth:`~ultradns.client.connection.APIConnection.request`
        but is non-blocking.
        """
        await self.authorize()
        assert self._client is not None
        merged_headers = {
            "Accept": "application/json",
            **self._session.credential.authorization_header(),
            **(headers or {}),
        }
        logger.debug("%s %s", method.upper(), path)
        response = await self._client.request(
            method,
            path,
            params=params,
            headers=merged_headers,
            json=json_body,
            content=content,
        )
        await araise_for_error(response)
        return response

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def json_patch(self, path: str, operations: list[dict[str, Any]]) -> httpx.Response:
        return await self.request(
            "PATCH",
            path,
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
            content=encode_json_patch(operations),
        )
