"""Credential and session management for the UltraDNS API.

- :class:`Credential` -- login details plus the current token state.
- :class:`TokenState` -- one immutable access/refresh/expiry triple.
- :class:`SessionManager` -- keeps a credential authorized, exchanging
  tokens with ``POST /authorization/token`` only when needed.

Typical usage::

    from ultradns.auth import Credential, SessionManager

    session = SessionManager(Credential("api-user", "s3cret"))
    session.ensure_authorized(http_client)
    headers = session.credential.authorization_header()
"""

from ultradns.auth.credential import Credential, TokenState
from ultradns.auth.session import SessionManager, client_timeout_margin

__all__ = [
    "Credential",
    "SessionManager",
    "TokenState",
    "client_timeout_margin",
]
