"""Error classification for UltraDNS HTTP responses.

Every response coming back from the API -- the token endpoint included --
is passed through :func:`get_error` (or :func:`raise_for_error`) before it
is treated as a success; streamed async responses go through
:func:`aget_error` / :func:`araise_for_error` instead. Responses below 400
are left untouched; error responses are decoded into an
:class:`~ultradns.exceptions.APIError` regardless of which field-naming
convention the server used.

See Also:
    :class:`~ultradns.models.ErrorPayload` -- the dual-spelling wire model.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ultradns.exceptions import APIError, ErrorDecodeError, ResponseError, UltraDNSError
from ultradns.models import ErrorPayload

logger = logging.getLogger(__name__)


def get_error(response: httpx.Response) -> Optional[UltraDNSError]:
    """Classify *response*, returning the error it represents or ``None``.

    For status codes below 400 the body is not read, so a streamed success
    response is still available to the caller. For error responses the body
    is read in full; httpx caches it, so ``response.content`` stays usable
    afterwards. A streamed response from :class:`httpx.AsyncClient` cannot
    be read here; use :func:`aget_error` for those.

    Args:
        response: The response to inspect.

    Returns:
        ``None`` when the status code is below 400. Otherwise one of:

        - :class:`~ultradns.exceptions.ResponseError` if the body could not
          be read;
        - :class:`~ultradns.exceptions.ErrorDecodeError` if the body is not
          an UltraDNS error object;
        - :class:`~ultradns.exceptions.APIError` with the normalized fields.
    """
    status = response.status_code
    if status < 400:
        return None

    try:
        body = response.content
    except httpx.ResponseNotRead:
        if not isinstance(response.stream, httpx.SyncByteStream):
            logger.debug("HTTP %d response has an unread async body", status)
            return _unreadable(status)
        try:
            body = response.read()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.debug("Could not read body of HTTP %d response: %s", status, exc)
            return _unreadable(status)

    return _classify(status, body)


async def aget_error(response: httpx.Response) -> Optional[UltraDNSError]:
    """Async counterpart of :func:`get_error` that reads with ``aread()``."""
    status = response.status_code
    if status < 400:
        return None

    try:
        body = response.content
    except httpx.ResponseNotRead:
        if not isinstance(response.stream, httpx.AsyncByteStream):
            return get_error(response)
        try:
            body = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            logger.debug("Could not read body of HTTP %d response: %s", status, exc)
            return _unreadable(status)

    return _classify(status, body)


def _unreadable(status: int) -> ResponseError:
    return ResponseError(
        f"API call returned HTTP status code {status}. Unable to read body of response",
        status_code=status,
    )


def _classify(status: int, body: bytes) -> UltraDNSError:
    try:
        payload = ErrorPayload.model_validate_json(body)
    except ValidationError:
        text = body.decode("utf-8", errors="replace")
        return ErrorDecodeError(
            f"API call returned HTTP status code {status}. "
            f"JSON parsing failed for body '{text}'",
            status_code=status,
            body=text,
        )

    error = APIError(
        status,
        code=payload.error_code,
        message=payload.error_message,
        error_type=payload.error_type,
        description=payload.error_description,
    )
    logger.debug("HTTP %d classified as API error: %s", status, error)
    return error


def raise_for_error(response: httpx.Response) -> None:
    """Raise the error :func:`get_error` finds in *response*, if any.

    Raises:
        ResponseError: If the status is >= 400 (``APIError`` when the body
            decoded).
        ErrorDecodeError: If the status is >= 400 and the body is malformed.
    """
    error = get_error(response)
    if error is not None:
        raise error


async def araise_for_error(response: httpx.Response) -> None:
    """Raise the error :func:`aget_error` finds in *response*, if any."""
    error = await aget_error(response)
    if error is not None:
        raise error
