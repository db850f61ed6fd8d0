"""Authenticated HTTP connections to the UltraDNS API.

Classes:
    :class:`APIConnection` -- blocking connection backed by :class:`httpx.Client`.
    :class:`AsyncAPIConnection` -- non-blocking connection backed by
    :class:`httpx.AsyncClient`.

Example::

    from ultradns.client import APIConnection

    with APIConnection(options) as conn:
        resp = conn.get("/status")
"""

from ultradns.client.async_connection import AsyncAPIConnection
from ultradns.client.connection import APIConnection

__all__ = ["APIConnection", "AsyncAPIConnection"]
