"""The UltraDNS credential and its token state.

A :class:`Credential` holds the immutable login (username, password, base
URL) and a :class:`TokenState` snapshot of the mutable part: access token,
refresh token and expiry. The snapshot is a frozen value that is replaced as
a whole under a lock, so a reader always sees the three token fields from the
same exchange.

See Also:
    :class:`~ultradns.auth.session.SessionManager` -- the only writer of new
    token state.
"""

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass

from ultradns.models import DEFAULT_BASE_URL


@dataclass(frozen=True)
class TokenState:
    """One consistent set of token fields.

    Attributes:
        access_token: Bearer token; ``""`` means unauthenticated.
        refresh_token: Single-use refresh token; ``""`` means the next
            exchange must use the password grant.
        expires_at: Epoch seconds after which ``access_token`` is treated as
            expired. Meaningless while ``access_token`` is empty.
    """

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0

    def is_valid(self, now: float) -> bool:
        """Return ``True`` if the access token is set and not yet expired at *now*."""
        if not self.access_token:
            return False
        return now < self.expires_at


class Credential:
    """Login details plus the current token state for one API user.

    Args:
        username: API username.
        password: API password. Never included in ``str()`` or ``repr()``.
        base_url: API root, e.g. ``https://api.ultradns.com``.
        refresh_token: Optional refresh token to start from, so that the
            first exchange uses the refresh grant instead of the password.

    Example::

        cred = Credential("api-user", "s3cret")
        assert cred.access_token == ""
    """

    def __init__(
        self,
        username: str,
        password: str,
        base_url: str = DEFAULT_BASE_URL,
        refresh_token: str = "",
    ) -> None:
        self._username = username
        self._password = password
        self._base_url = base_url.rstrip("/")
        self._lock = threading.Lock()
        self._state = TokenState(refresh_token=refresh_token)

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> str:
        return self._password

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def token_url(self) -> str:
        """The token exchange endpoint for this credential."""
        return f"{self._base_url}/authorization/token"

    def snapshot(self) -> TokenState:
        """Return the current token state."""
        with self._lock:
            return self._state

    @property
    def access_token(self) -> str:
        return self.snapshot().access_token

    @property
    def refresh_token(self) -> str:
        return self.snapshot().refresh_token

    @property
    def token_expires_at(self) -> int:
        return self.snapshot().expires_at

    def is_valid(self, now: float) -> bool:
        return self.snapshot().is_valid(now)

    def store(self, state: TokenState) -> None:
        """Replace the token state with *state* in one step.

        Called by :class:`~ultradns.auth.session.SessionManager` after a
        successful token exchange.
        """
        with self._lock:
            self._state = state

    def expire(self) -> None:
        """Mark the current access token as expired, keeping the refresh token.

        The next :meth:`~ultradns.auth.session.SessionManager.ensure_authorized`
        call performs an exchange, using the refresh grant if one is held.
        """
        with self._lock:
            self._state = dataclasses.replace(self._state, expires_at=0)

    def clear_refresh_token(self) -> None:
        """Drop the refresh token so the next exchange uses the password grant.

        A refresh token the server has rejected is never cleared
        automatically; callers that want to fall back to the password call
        this after catching the :class:`~ultradns.exceptions.APIError`.
        The access token is left as is.
        """
        with self._lock:
            self._state = dataclasses.replace(self._state, refresh_token="")

    def authorization_header(self) -> dict[str, str]:
        """Return the ``Authorization`` header for the current access token."""
        return {"Authorization": f"Bearer {self.access_token}"}

    def __repr__(self) -> str:
        state = self.snapshot()
        return (
            f"Credential(username={self._username!r}, password='********', "
            f"access_token={state.access_token!r}, refresh_token={state.refresh_token!r}, "
            f"token_expires_at={state.expires_at})"
        )

    def __str__(self) -> str:
        state = self.snapshot()
        return (
            "Credential{\n"
            f"  Username: '{self._username}'\n"
            "  Password: '********'\n"
            f"  AccessToken: '{state.access_token}'\n"
            f"  RefreshToken: '{state.refresh_token}'\n"
            f"  TokenExpires: {state.expires_at}\n"
            "}"
        )
