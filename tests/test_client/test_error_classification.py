"""Tests for ultradns.response -- classifying HTTP responses into errors."""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator, Iterator

import httpx
import pytest

from ultradns.exceptions import (
    UNRECOGNIZED_ERROR_PAYLOAD,
    APIError,
    ErrorDecodeError,
    ResponseError,
)
from ultradns.exit_codes import EXIT_API_ERROR, EXIT_DECODE_ERROR, EXIT_SERVER_ERROR
from ultradns.response import aget_error, araise_for_error, get_error, raise_for_error


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _response(status_code: int, body: Any) -> httpx.Response:
    content = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return httpx.Response(
        status_code,
        content=content,
        request=httpx.Request("GET", "https://api.ultradns.test/foo"),
    )


class _BrokenStream(httpx.SyncByteStream):
    def __iter__(self) -> Iterator[bytes]:
        raise httpx.ReadError("connection reset")


class _AsyncStream(httpx.AsyncByteStream):
    def __init__(self, body: bytes) -> None:
        self._body = body

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield self._body


class _BrokenAsyncStream(httpx.AsyncByteStream):
    async def __aiter__(self) -> AsyncIterator[bytes]:
        raise httpx.ReadError("connection reset")
        yield b""


# ---------------------------------------------------------------------------
# Success responses
# ---------------------------------------------------------------------------


class TestSuccessResponses:
    @pytest.mark.parametrize("status", [200, 201, 204, 302, 399])
    def test_below_400_is_not_an_error(self, status: int) -> None:
        assert get_error(_response(status, b"definitely not json")) is None

    def test_success_body_is_not_read(self) -> None:
        response = httpx.Response(200, stream=httpx.ByteStream(b'{"ok": true}'))
        assert get_error(response) is None
        with pytest.raises(httpx.ResponseNotRead):
            _ = response.content

    def test_raise_for_error_is_silent_on_success(self) -> None:
        raise_for_error(_response(200, {"errorCode": 1}))


# ---------------------------------------------------------------------------
# Error payload decoding
# ---------------------------------------------------------------------------


class TestErrorPayloads:
    def test_camel_case_code_and_message(self) -> None:
        err = get_error(_response(400, {"errorCode": 60004, "errorMessage": "Authorization Header required"}))

        assert isinstance(err, APIError)
        assert str(err) == "60004: Authorization Header required"
        assert err.status_code == 400
        assert err.code == 60004
        assert err.message == "Authorization Header required"
        assert err.description == "60004: Authorization Header required"
        assert err.error_type == ""
        assert err.exit_code == EXIT_API_ERROR

    def test_snake_case_code_and_message(self) -> None:
        err = get_error(_response(401, {"error_code": 60001, "error_message": "bad login"}))

        assert isinstance(err, APIError)
        assert err.code == 60001
        assert err.message == "bad login"
        assert str(err) == "60001: bad login"

    def test_camel_case_wins_when_both_present(self) -> None:
        err = get_error(
            _response(
                400,
                {
                    "errorCode": 1,
                    "error_code": 2,
                    "errorMessage": "camel",
                    "error_message": "snake",
                    "errorDescription": "camel description",
                    "error_description": "snake description",
                },
            )
        )

        assert isinstance(err, APIError)
        assert err.code == 1
        assert err.message == "camel"
        assert err.description == "camel description"

    def test_zero_camel_code_falls_back_to_snake(self) -> None:
        err = get_error(_response(400, {"errorCode": 0, "error_code": 70002, "errorMessage": "m"}))

        assert isinstance(err, APIError)
        assert err.code == 70002

    def test_empty_camel_strings_fall_back_to_snake(self) -> None:
        err = get_error(
            _response(400, {"errorMessage": "", "error_message": "snake", "error_code": 5})
        )

        assert isinstance(err, APIError)
        assert err.message == "snake"
        assert str(err) == "5: snake"

    def test_description_preferred_over_code_and_message(self) -> None:
        err = get_error(
            _response(
                400,
                {
                    "errorCode": 60001,
                    "errorMessage": "invalid_grant:Invalid username & password combination.",
                    "error": "invalid_grant",
                    "error_description": "60001: invalid_grant:Invalid username & password combination.",
                },
            )
        )

        assert isinstance(err, APIError)
        assert err.error_type == "invalid_grant"
        assert str(err) == "60001: invalid_grant:Invalid username & password combination."

    def test_type_only_payload_renders_type(self) -> None:
        err = get_error(_response(400, {"error": "wrong URL", "url": "https://x/y"}))

        assert isinstance(err, APIError)
        assert err.error_type == "wrong URL"
        assert err.code == 0
        assert err.description == ""
        assert str(err) == "wrong URL"

    def test_empty_payload_renders_sentinel_instead_of_crashing(self) -> None:
        err = get_error(_response(500, {}))

        assert isinstance(err, APIError)
        assert str(err) == UNRECOGNIZED_ERROR_PAYLOAD
        assert err.status_code == 500

    def test_null_fields_are_treated_as_absent(self) -> None:
        err = get_error(_response(400, {"errorCode": None, "error_code": 9, "errorMessage": None, "error_message": "x"}))

        assert isinstance(err, APIError)
        assert str(err) == "9: x"

    def test_error_body_stays_readable(self) -> None:
        body = {"errorCode": 1, "errorMessage": "m"}
        response = _response(400, body)
        get_error(response)
        assert response.json() == body


# ---------------------------------------------------------------------------
# Undecodable error responses
# ---------------------------------------------------------------------------


class TestUndecodableErrors:
    @pytest.mark.parametrize(
        "body",
        [b"<html>Bad Gateway</html>", b"", b"[1, 2, 3]", b'{"errorCode": "not-a-number"}', b'{"errorCode": "60004"}', b'{"error_code": 1.5}'],
        ids=["html", "empty", "array", "wrong-type", "string-code", "float-code"],
    )
    def test_non_error_json_is_a_decode_error(self, body: bytes) -> None:
        err = get_error(_response(502, body))

        assert isinstance(err, ErrorDecodeError)
        assert not isinstance(err, APIError)
        assert err.status_code == 502
        assert err.body == body.decode("utf-8")
        assert err.exit_code == EXIT_DECODE_ERROR
        assert "502" in str(err)

    def test_unreadable_body_carries_only_status(self) -> None:
        response = httpx.Response(503, stream=_BrokenStream())
        err = get_error(response)

        assert isinstance(err, ResponseError)
        assert not isinstance(err, APIError)
        assert err.status_code == 503
        assert err.exit_code == EXIT_SERVER_ERROR
        assert "503" in str(err)

    def test_raise_for_error_raises_classified_error(self) -> None:
        with pytest.raises(APIError, match="60004: Authorization Header required"):
            raise_for_error(
                _response(400, {"errorCode": 60004, "errorMessage": "Authorization Header required"})
            )


# ---------------------------------------------------------------------------
# Responses streamed by httpx.AsyncClient
# ---------------------------------------------------------------------------


class TestAsyncStreamedResponses:
    BODY = b'{"errorCode": 60004, "errorMessage": "Authorization Header required"}'

    def test_sync_classifier_reports_unread_async_body(self) -> None:
        response = httpx.Response(400, stream=_AsyncStream(self.BODY))
        err = get_error(response)

        assert isinstance(err, ResponseError)
        assert not isinstance(err, APIError)
        assert err.status_code == 400

    def test_async_classifier_reads_body(self) -> None:
        response = httpx.Response(400, stream=_AsyncStream(self.BODY))
        err = asyncio.run(aget_error(response))

        assert isinstance(err, APIError)
        assert str(err) == "60004: Authorization Header required"
        assert response.json()["errorCode"] == 60004

    def test_async_classifier_skips_success_body(self) -> None:
        response = httpx.Response(200, stream=_AsyncStream(b"garbage"))
        assert asyncio.run(aget_error(response)) is None
        with pytest.raises(httpx.ResponseNotRead):
            _ = response.content

    def test_async_classifier_accepts_already_read_body(self) -> None:
        err = asyncio.run(aget_error(_response(401, {"error": "invalid_grant"})))

        assert isinstance(err, APIError)
        assert str(err) == "invalid_grant"

    def test_async_read_failure_carries_only_status(self) -> None:
        err = asyncio.run(aget_error(httpx.Response(503, stream=_BrokenAsyncStream())))

        assert isinstance(err, ResponseError)
        assert not isinstance(err, APIError)
        assert err.status_code == 503

    def test_araise_for_error(self) -> None:
        response = httpx.Response(400, stream=_AsyncStream(self.BODY))
        with pytest.raises(APIError, match="60004"):
            asyncio.run(araise_for_error(response))
