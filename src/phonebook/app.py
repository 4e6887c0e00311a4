"""Typer application and CLI entry point for phonebook.

Two commands operate on a book definition file (see :mod:`phonebook.loader`):

* ``phonebook routes BOOK`` -- list every node and custom route with its
  method and URL template.
* ``phonebook call BOOK ROUTE`` -- perform a request. ``ROUTE`` is a dotted
  path ending in a custom route name (``users.search``) or a verb helper
  (``users.posts.get``).

:func:`main` is the console-script entry point declared in
``pyproject.toml``. Known :class:`~phonebook.exceptions.PhonebookError`
failures exit with their own code; anything else writes a crash log under
the data directory.
"""

from __future__ import annotations

import json
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from phonebook import __version__
from phonebook.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="phonebook",
    help="Inspect and call HTTP request trees declared in book files.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"phonebook {__version__}")
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
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global output manager from the formatting flags."""
    from phonebook.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@app.command("routes")
def routes_command(
    book_source: str = typer.Argument(..., metavar="BOOK", help="Book file, URL, or '-' for stdin."),
) -> None:
    """List the chapters and routes of a book."""
    from phonebook.loader import load_book
    from phonebook.output import print_table

    book = load_book(book_source)
    rows = [[info.path or "(root)", info.method, info.url] for info in book.iter_routes()]
    print_table(["Route", "Method", "URL"], rows, title="Routes")


@app.command("call")
def call_command(
    book_source: str = typer.Argument(..., metavar="BOOK", help="Book file, URL, or '-' for stdin."),
    route: str = typer.Argument(..., help="Dotted route, e.g. users.search or users.posts.get."),
    url_fragment: str = typer.Option("", "--url", "-u", help="Extra URL fragment for verb helpers."),
    data: Optional[list[str]] = typer.Option(
        None, "--data", "-d", help="Request data as key=value (values parsed as JSON when possible)."
    ),
    body: Optional[str] = typer.Option(None, "--body", help="Request data as a JSON object."),
    header: Optional[list[str]] = typer.Option(None, "--header", "-H", help="Extra header as key=value."),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Scheme and host for requests."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the request instead of sending it."),
) -> None:
    """Perform a request through a route of a book."""
    from phonebook.config import resolve_transport_config
    from phonebook.exceptions import InvalidUsageError
    from phonebook.loader import load_book
    from phonebook.transport import DryRunTransport, HttpxTransport
    from phonebook.transport.response import format_api_response, raise_for_api_status

    request_data = _parse_body(body)
    request_data.update(_parse_pairs(data or [], "--data", parse_values=True))
    headers = _parse_pairs(header or [], "--header")

    config = resolve_transport_config(
        cli_base_url=base_url, cli_timeout=timeout, cli_headers=headers
    )

    if dry_run:
        transport: Any = DryRunTransport(base_url=config.base_url or "")
    else:
        if not config.base_url:
            raise InvalidUsageError(
                "No base URL configured. Pass --base-url, set PHONEBOOK_BASE_URL, "
                "or add transport.base_url to phonebook.json."
            )
        transport = HttpxTransport.from_config(config)

    try:
        book = load_book(book_source, transport=transport)
        response = _invoke(book, route, url_fragment, request_data)
        format_api_response(response)
        raise_for_api_status(response)
    finally:
        close = getattr(transport, "close", None)
        if callable(close):
            close()


def _invoke(book: Any, route: str, url_fragment: str, data: dict[str, Any]) -> Any:
    """Resolve a dotted *route* against *book* and perform it."""
    from phonebook.book import VERB_METHODS
    from phonebook.exceptions import InvalidUsageError
    from phonebook.output import suggest, warning

    *chapter_names, action = route.split(".")
    node = book
    for name in chapter_names:
        child = node.chapters.get(name)
        if child is None:
            suggest("Run 'phonebook routes BOOK' to list available routes.")
            raise InvalidUsageError(f"No chapter '{name}' in route '{route}'")
        node = child

    if action in node.routes:
        if url_fragment:
            warning("--url is ignored for custom routes")
        return node.dispatch(action, data)
    if action in VERB_METHODS:
        return node.request(VERB_METHODS[action], url_fragment, data)
    if action in node.chapters:
        raise InvalidUsageError(
            f"'{route}' is a chapter; append a verb such as '{route}.get'"
        )
    suggest("Run 'phonebook routes BOOK' to list available routes.")
    raise InvalidUsageError(f"No route '{action}' in '{route}'")


def _parse_body(body: Optional[str]) -> dict[str, Any]:
    from phonebook.exceptions import InvalidUsageError

    if body is None:
        return {}
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--body is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise InvalidUsageError("--body must be a JSON object")
    return parsed


def _parse_pairs(pairs: list[str], flag: str, parse_values: bool = False) -> dict[str, Any]:
    """Split ``key=value`` strings; with *parse_values*, decode JSON scalars."""
    from phonebook.exceptions import InvalidUsageError

    result: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"{flag} expects key=value, got {pair!r}")
        if parse_values:
            try:
                result[key] = json.loads(value)
            except json.JSONDecodeError:
                result[key] = value
        else:
            result[key] = value
    return result


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from phonebook.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``phonebook`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from phonebook.exceptions import PhonebookError
        from phonebook.output import error

        if isinstance(exc, PhonebookError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
