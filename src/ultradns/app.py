"""Typer application and CLI entry point for ultradns.

The CLI is mostly for verifying credentials and poking at the API by hand::

    ultradns --user api-user --password-source env:UDNS_PASS auth
    ultradns get /status

Connection settings come from the global options, falling back to the
``ULTRADNS_*`` environment variables read by :func:`ultradns.config.load_options`.
:class:`~ultradns.exceptions.UltraDNSError` exits with the error's
``exit_code``; transport failures exit with
:data:`~ultradns.exit_codes.EXIT_CONNECTION_ERROR`.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import httpx
import typer

from ultradns import __version__
from ultradns.client.connection import APIConnection
from ultradns.config import load_options, resolve_credential
from ultradns.exceptions import ConfigError, UltraDNSError
from ultradns.exit_codes import EXIT_CONNECTION_ERROR, EXIT_INVALID_USAGE
from ultradns.models import APIOptions
from ultradns.output import error, get_output, info, success

app = typer.Typer(
    name="ultradns",
    help="Authenticate against and query the UltraDNS REST API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ultradns {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="API username (default: $ULTRADNS_USERNAME)."
    ),
    password_source: Optional[str] = typer.Option(
        None,
        "--password-source",
        help="Where to read the password: env:VAR, file:/path, or prompt "
        "(default: $ULTRADNS_PASSWORD).",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="API base URL (default: https://api.ultradns.com)."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="HTTP timeout in seconds (default: 5)."
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Initialise output and logging, and stash connection settings in ``ctx.obj``."""
    from ultradns.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
            stream=sys.stderr,
        )

    ctx.ensure_object(dict)
    ctx.obj["username"] = user
    ctx.obj["password_source"] = password_source
    ctx.obj["base_url"] = base_url
    ctx.obj["timeout"] = timeout


def _options_from_context(ctx: typer.Context) -> APIOptions:
    """Resolve :class:`APIOptions` from the global CLI flags and environment."""
    obj: dict[str, Any] = ctx.obj or {}
    password = None
    if obj.get("password_source"):
        password = resolve_credential(obj["password_source"])
    options = load_options(
        username=obj.get("username"),
        password=password,
        base_url=obj.get("base_url"),
        timeout=obj.get("timeout"),
    )
    if not options.refresh_token and not (options.username and options.password):
        raise ConfigError(
            "No credentials given. Pass --user and --password-source, or set "
            "ULTRADNS_USERNAME and ULTRADNS_PASSWORD (or ULTRADNS_REFRESH_TOKEN).",
            exit_code=EXIT_INVALID_USAGE,
        )
    return options


def _open_connection(options: APIOptions) -> APIConnection:
    return APIConnection(options)


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Map library errors onto CLI exit codes."""
    try:
        yield
    except UltraDNSError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except httpx.HTTPError as exc:
        error(f"Connection failed: {exc}")
        raise typer.Exit(code=EXIT_CONNECTION_ERROR) from None


@app.command("auth")
def auth_command(ctx: typer.Context) -> None:
    """Authenticate and print the resulting credential (password masked)."""
    with _handle_errors():
        options = _options_from_context(ctx)
        with _open_connection(options) as conn:
            conn.authorize()
        success("Successfully authenticated:")
        get_output().print_data(str(conn.session.credential))


@app.command("get")
def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="API path, e.g. /status."),
) -> None:
    """Send an authenticated GET request and print the response body."""
    if not path.startswith("/"):
        path = "/" + path
    with _handle_errors():
        options = _options_from_context(ctx)
        with _open_connection(options) as conn:
            response = conn.get(path)
        info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
        try:
            data: Any = response.json()
        except ValueError:
            data = response.text
        get_output().format_response(data)


def main() -> None:
    """Console-script entry point."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
