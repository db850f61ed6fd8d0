"""Numeric process exit codes used by the ``ultradns`` command line tool.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ultradns.exceptions.UltraDNSError` subclass.
Shell scripts wrapping the CLI can inspect the exit code to tell a rejected
login apart from an unreachable server without parsing stderr.

Example::

    $ ultradns auth
    $ echo $?
    3   # EXIT_API_ERROR -- the token endpoint rejected the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing settings."""

EXIT_API_ERROR = 3
"""The API answered with a structured error payload."""

EXIT_SERVER_ERROR = 5
"""The API answered with an HTTP error whose body could not be read."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DECODE_ERROR = 7
"""The API answered with a body that could not be decoded."""
