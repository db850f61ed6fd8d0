"""Shared test fixtures for ultradns.

Provides a fake UltraDNS server that plugs into :class:`httpx.MockTransport`,
a controllable clock, and ready-made credentials, sessions and HTTP clients.
These fixtures are automatically discovered by pytest and available to all
test modules without explicit imports.
"""

from __future__ import annotations

import secrets
import threading
from typing import Any
from urllib.parse import parse_qsl

import httpx
import pytest

from ultradns.auth import Credential, SessionManager
from ultradns.output import reset_output

BASE_URL = "https://api.ultradns.test"
VALID_USERNAME = "good_user"
VALID_PASSWORD = "password123!"

BAD_LOGIN_ERROR = {
    "errorCode": 60001,
    "errorMessage": "invalid_grant:Invalid username & password combination.",
    "error": "invalid_grant",
    "error_description": "60001: invalid_grant:Invalid username & password combination.",
}
BAD_REFRESH_ERROR = {
    "errorCode": 60001,
    "errorMessage": "invalid_grant:token not found, expired or invalid",
    "error": "invalid_grant",
    "error_description": "60001: invalid_grant:token not found, expired or invalid",
}
MISSING_AUTH_ERROR = {"errorCode": 60004, "errorMessage": "Authorization Header required"}


class FakeUltraDNS:
    """In-memory stand-in for the UltraDNS API.

    Issues random access/refresh token pairs, treats refresh tokens as
    single-use, and rejects API calls that do not carry an issued access
    token. Safe to call from several threads at once.
    """

    def __init__(self, expires_in: Any = "3600") -> None:
        self.expires_in = expires_in
        self.token_requests: list[dict[str, str]] = []
        self.api_requests: list[httpx.Request] = []
        self.issued: dict[str, str] = {}
        self._live_refresh_tokens: set[str] = set()
        self._lock = threading.Lock()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/authorization/token":
            return self._token(request)
        return self._api(request)

    @property
    def exchange_count(self) -> int:
        with self._lock:
            return len(self.token_requests)

    def _token(self, request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.headers["content-type"] == "application/x-www-form-urlencoded"
        form = dict(parse_qsl(request.content.decode("utf-8")))
        with self._lock:
            self.token_requests.append(form)
            grant = form.get("grant_type")
            if grant == "password":
                if form.get("username") == VALID_USERNAME and form.get("password") == VALID_PASSWORD:
                    return self._issue()
                return httpx.Response(400, json=BAD_LOGIN_ERROR)
            if grant == "refresh_token":
                refresh_token = form.get("refresh_token", "")
                if refresh_token in self._live_refresh_tokens:
                    self._live_refresh_tokens.discard(refresh_token)
                    return self._issue()
                return httpx.Response(400, json=BAD_REFRESH_ERROR)
        return httpx.Response(400, json={"error": "unsupported_grant_type"})

    def _issue(self) -> httpx.Response:
        access_token = secrets.token_hex(8)
        refresh_token = secrets.token_hex(8)
        self.issued[access_token] = refresh_token
        self._live_refresh_tokens.add(refresh_token)
        return httpx.Response(
            200,
            json={
                "tokenType": "Bearer",
                "refreshToken": refresh_token,
                "accessToken": access_token,
                "expiresIn": self.expires_in,
                "username": VALID_USERNAME,
                "refresh_token": refresh_token,
                "access_token": access_token,
                "expires_in": self.expires_in,
                "token_type": "Bearer",
            },
        )

    def _api(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.api_requests.append(request)
            issued = set(self.issued)
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer ") or auth[len("Bearer "):] not in issued:
            return httpx.Response(400, json=MISSING_AUTH_ERROR)

        path = request.url.path
        if path == "/status" and request.method == "GET":
            return httpx.Response(200, json={"message": "Good"})
        if path == "/foo" and request.method == "GET":
            return httpx.Response(200, json={"fooBar": "isFooBar"})
        if path == "/post/endpoint" and request.method == "POST":
            return httpx.Response(200, json={"yep": request.content == b'{"probing":"enable"}'})
        if path.startswith("/zones/") and request.method == "PATCH":
            return httpx.Response(
                200,
                json={
                    "contentType": request.headers.get("content-type"),
                    "body": request.content.decode("utf-8"),
                },
            )
        return httpx.Response(400, json={"error": "wrong URL", "url": str(request.url)})


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time, which go stale once CliRunner restores the real streams.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Server, clock, and session fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_server() -> FakeUltraDNS:
    return FakeUltraDNS()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def credential() -> Credential:
    return Credential(VALID_USERNAME, VALID_PASSWORD, base_url=BASE_URL)


@pytest.fixture
def session(credential: Credential, clock: FakeClock) -> SessionManager:
    return SessionManager(credential, clock=clock)


@pytest.fixture
def http_client(fake_server: FakeUltraDNS) -> httpx.Client:
    """A blocking client wired to the fake server with a 1 second timeout."""
    client = httpx.Client(
        base_url=BASE_URL,
        transport=httpx.MockTransport(fake_server),
        timeout=1.0,
    )
    yield client
    client.close()
