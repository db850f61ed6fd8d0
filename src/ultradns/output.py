"""Terminal output for the ``ultradns`` CLI.

Response bodies go to stdout and nothing else does, so
``ultradns get /status --json | jq .`` always sees clean JSON. Status lines,
errors and debug chatter go to stderr.

Rendering depends on where stdout points: a colour terminal gets Rich syntax
highlighting, a pipe gets plain text. ``NO_COLOR`` (any value),
``TERM=dumb`` and ``--no-color`` all turn colour off.

The CLI callback installs one :class:`OutputManager` with :func:`set_output`;
commands reach it through :func:`get_output` or the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """How response bodies are rendered."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Writes response bodies and diagnostics for one CLI invocation.

    Args:
        format: Body format. ``AUTO`` becomes ``RICH`` on a colour TTY and
            ``PLAIN`` otherwise.
        no_color: Never emit colour or markup.
        quiet: Drop info and success lines. Errors are always shown.
        verbose: Show debug lines.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._format = _resolve_format(format, self._no_color)
        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, stderr=True, no_color=self._no_color)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Render a decoded response body (dict, list or text) to stdout."""
        if self._format == OutputFormat.JSON:
            self.print_data(_to_json(data, indent=2))
            return
        if self._format == OutputFormat.RICH:
            if isinstance(data, (dict, list)):
                syntax = Syntax(_to_json(data, indent=2), "json", theme="monokai", word_wrap=True)
                self._stdout.print(syntax)
            else:
                self._stdout.print(str(data), markup=False)
            return
        for line in _plain_lines(data):
            self.print_data(line)

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # --- stderr ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def error(self, message: str) -> None:
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)


def _resolve_format(format: OutputFormat, no_color: bool) -> OutputFormat:
    if format != OutputFormat.AUTO:
        return format
    if _is_tty() and not no_color:
        return OutputFormat.RICH
    return OutputFormat.PLAIN


def _to_json(data: Any, indent: Optional[int] = None) -> str:
    return json.dumps(data, indent=indent, ensure_ascii=False, default=str)


def _plain_lines(data: Any) -> list[str]:
    """Flatten a body for piping: ``key<TAB>value`` rows, one item per line."""
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [_to_json(item) if isinstance(item, dict) else str(item) for item in data]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a new one."""
    global _output
    _output = None


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
