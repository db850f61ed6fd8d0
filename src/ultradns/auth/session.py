"""Session manager -- keeps a :class:`~ultradns.auth.credential.Credential` authorized.

:class:`SessionManager` exposes one operation in a blocking and an ``async``
flavour: make sure the credential holds an access token that will outlive the
next request, exchanging tokens with ``POST /authorization/token`` only when
it does not.

Grant selection::

    refresh token held  ->  grant_type=refresh_token
    otherwise           ->  grant_type=password

Token expiry is padded by a timeout margin (by default the HTTP client's own
timeout) so a token is never attached to a request that could outlive it.

Thread safety: the validity check and the state swap each take the
credential's lock, and never across network I/O. Exchanges are additionally
serialized per session, and a caller that waited for another caller's
exchange re-checks validity before starting its own. UltraDNS refresh tokens
are single-use, so two concurrent refresh grants would otherwise present the
same token twice and the second would be rejected.

Example::

    session = SessionManager(Credential("api-user", "s3cret"))
    with httpx.Client(timeout=5) as client:
        session.ensure_authorized(client)
        client.get(url, headers=session.credential.authorization_header())
"""

from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from typing import Callable, Optional, Union

import httpx
from pydantic import ValidationError

from ultradns.auth.credential import Credential, TokenState
from ultradns.exceptions import TokenDecodeError
from ultradns.models import TokenResponse
from ultradns.response import araise_for_error, raise_for_error

logger = logging.getLogger(__name__)


def client_timeout_margin(client: Union[httpx.Client, httpx.AsyncClient]) -> float:
    """Return the longest timeout configured on *client*, in seconds (0 if none)."""
    timeout = client.timeout
    values = [
        value
        for value in (timeout.connect, timeout.read, timeout.write, timeout.pool)
        if value is not None
    ]
    return max(values, default=0.0)


class SessionManager:
    """Owns a credential and keeps it authorized.

    Drive one session from either blocking or async callers, not both at
    once. The two paths coalesce exchanges separately, so a concurrent
    blocking and async exchange can present the same single-use refresh
    token twice, and the second one fails with ``invalid_grant``.

    Args:
        credential: The credential to manage. The session becomes its only
            writer.
        clock: Returns the current time in epoch seconds. Defaults to
            :func:`time.time`; tests inject a fake clock.
    """

    def __init__(
        self,
        credential: Credential,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._credential = credential
        self._clock = clock
        self._exchange_lock = threading.Lock()
        self._async_exchange_lock = asyncio.Lock()

    @property
    def credential(self) -> Credential:
        return self._credential

    def is_authorized(self) -> bool:
        """Return ``True`` if the current access token is still valid."""
        return self._credential.is_valid(self._clock())

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def ensure_authorized(
        self,
        client: httpx.Client,
        timeout_margin: Optional[float] = None,
    ) -> None:
        """Exchange tokens if the current access token is missing or expired.

        Does nothing, and makes no network call, while the access token is
        valid. Callers read :attr:`Credential.access_token` afterwards.

        Args:
            client: Transport used for the token exchange. Its timeout bounds
                the whole call.
            timeout_margin: Seconds subtracted from the server-reported token
                lifetime. Defaults to :func:`client_timeout_margin`.

        Raises:
            httpx.HTTPError: Transport failure, propagated unchanged.
            APIError: The token endpoint rejected the exchange.
            ResponseError: The token endpoint failed without a readable body.
            DecodeError: The token endpoint sent a malformed body.
        """
        if self.is_authorized():
            return
        with self._exchange_lock:
            state = self._credential.snapshot()
            if state.is_valid(self._clock()):
                return
            logger.debug(
                "Requesting %s grant from %s",
                _grant_type(state),
                self._credential.token_url,
            )
            response = client.post(
                self._credential.token_url,
                data=self._token_form(state),
                headers={"Accept": "application/json"},
            )
            raise_for_error(response)
            self._store_token(response, _margin(client, timeout_margin))

    async def ensure_authorized_async(
        self,
        client: httpx.AsyncClient,
        timeout_margin: Optional[float] = None,
    ) -> None:
        """Async counterpart of :meth:`ensure_authorized`.

        Exchanges started through this method are coalesced with each other
        but not with blocking :meth:`ensure_authorized` calls.
        """
        if self.is_authorized():
            return
        async with self._async_exchange_lock:
            state = self._credential.snapshot()
            if state.is_valid(self._clock()):
                return
            logger.debug(
                "Requesting %s grant from %s",
                _grant_type(state),
                self._credential.token_url,
            )
            response = await client.post(
                self._credential.token_url,
                data=self._token_form(state),
                headers={"Accept": "application/json"},
            )
            await araise_for_error(response)
            self._store_token(response, _margin(client, timeout_margin))

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _token_form(self, state: TokenState) -> dict[str, str]:
        if state.refresh_token:
            return {"grant_type": "refresh_token", "refresh_token": state.refresh_token}
        return {
            "grant_type": "password",
            "username": self._credential.username,
            "password": self._credential.password,
        }

    def _store_token(self, response: httpx.Response, margin: float) -> None:
        state = self._decode_token(response, margin)
        self._credential.store(state)
        logger.debug(
            "Token for %s valid until %d",
            self._credential.username,
            state.expires_at,
        )

    def _decode_token(self, response: httpx.Response, margin: float) -> TokenState:
        body = response.content
        try:
            token = TokenResponse.model_validate_json(body)
            expires_in = token.expires_in_seconds()
        except (ValidationError, ValueError) as exc:
            raise TokenDecodeError(
                f"Could not decode token response: {exc}",
                status_code=response.status_code,
                body=body.decode("utf-8", errors="replace"),
            ) from exc
        if not token.access_token:
            raise TokenDecodeError(
                "Token response did not contain an access token",
                status_code=response.status_code,
                body=body.decode("utf-8", errors="replace"),
            )
        now = int(self._clock())
        return TokenState(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_at=now + expires_in - math.ceil(margin),
        )


def _grant_type(state: TokenState) -> str:
    return "refresh_token" if state.refresh_token else "password"


def _margin(
    client: Union[httpx.Client, httpx.AsyncClient],
    timeout_margin: Optional[float],
) -> float:
    if timeout_margin is None:
        return client_timeout_margin(client)
    return timeout_margin
