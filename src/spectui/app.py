"""Typer application and CLI entry point for spectui.

This module wires together the top-level Typer application: the ``browse``
command that starts the interactive session, and the ``config`` and
``inspect`` sub-command groups.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~spectui.exceptions.SpectuiError` instances exit with their
``exit_code``; anything else is written to a crash log under the data
directory.

See Also:
    :mod:`spectui.config`: Configuration resolution.
    :mod:`spectui.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from spectui import __version__
from spectui.commands.config import config_app
from spectui.commands.inspect import inspect_app
from spectui.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="spectui",
    help="Browse OpenAPI 3.0/3.1 documents and call their APIs from the terminal.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.add_typer(config_app, name="config", help="Configuration management.")
app.add_typer(inspect_app, name="inspect", help="Inspect document details.")

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"spectui {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route library logging away from the terminal.

    With ``--verbose`` records go to ``<data_dir>/spectui.log``; otherwise
    they are dropped so nothing is written over the interactive screen.
    """
    logger = logging.getLogger("spectui")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    if not verbose:
        logger.addHandler(logging.NullHandler())
        return

    from spectui.config import get_data_dir

    handler = logging.FileHandler(get_data_dir() / "spectui.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


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
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Write debug logs to the data directory."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~spectui.output.OutputManager` and the
    logging handlers from CLI flags.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Log debug records to ``<data_dir>/spectui.log``.
    """
    from spectui.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@app.command("browse")
def browse(
    source: str = typer.Argument(help="Document path or URL ('-' for stdin)."),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Send calls to this server instead of the document's."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Browse a document interactively and call its operations.

    Example::

        spectui browse petstore.yaml
        spectui browse https://petstore3.swagger.io/api/v3/openapi.json --timeout 5
    """
    from spectui.client import Executor
    from spectui.config import resolve_config
    from spectui.exceptions import SpectuiError
    from spectui.navigation import Session
    from spectui.output import error, get_output, info
    from spectui.parser import load_document, load_spec, validate_openapi_version
    from spectui.tui import run

    try:
        config = resolve_config(cli_base_url=base_url, cli_timeout=timeout)
        raw = load_spec(source)
        version = validate_openapi_version(raw)
        document, store = load_document(raw, version, source=source)
    except SpectuiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    with Executor(config.request) as executor:
        try:
            session = Session(document, store, executor, config=config)
        except SpectuiError as exc:
            error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None
        run(session, get_output().console)

    info(f"{len(session.history)} call(s) made.")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from spectui.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``spectui`` console script.

    Unhandled :class:`~spectui.exceptions.SpectuiError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from spectui.exceptions import SpectuiError
        from spectui.output import error

        if isinstance(exc, SpectuiError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
