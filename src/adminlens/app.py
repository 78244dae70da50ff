"""Typer application factory and CLI entry point for adminlens.

This module wires together the top-level Typer application and registers
the built-in commands:

* ``discover`` / ``operations`` / ``endpoints`` -- run discovery on an
  OpenAPI description (see :mod:`adminlens.commands.discover`).
* ``classify`` -- classify a JSON payload (see
  :mod:`adminlens.commands.classify`).
* ``products`` -- manage saved product profiles (see
  :mod:`adminlens.commands.products`).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.

See Also:
    :mod:`adminlens.config`: Product and global configuration resolution.
    :mod:`adminlens.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any

import typer

from adminlens import __version__
from adminlens.commands.classify import classify_command
from adminlens.commands.discover import (
    discover_command,
    endpoints_command,
    operations_command,
)
from adminlens.commands.products import products_app
from adminlens.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="adminlens",
    help="Discover admin resources in OpenAPI descriptions and classify API responses.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("discover")(discover_command)
app.command("operations")(operations_command)
app.command("endpoints")(endpoints_command)
app.command("classify")(classify_command)
app.add_typer(products_app, name="products", help="Manage saved product profiles.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"adminlens {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
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
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~adminlens.output.OutputManager` from
    CLI flags and routes log records to stderr.
    """
    from adminlens.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    output.configure_logging()
    set_output(output)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``adminlens`` console script.

    Unhandled :class:`~adminlens.exceptions.AdminlensError` instances
    cause a clean exit with the error's ``exit_code``; anything else exits
    with :data:`~adminlens.exit_codes.EXIT_GENERIC_FAILURE`.

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
        from adminlens.exceptions import AdminlensError
        from adminlens.output import error

        if isinstance(exc, AdminlensError):
            error(str(exc))
            sys.exit(exc.exit_code)
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)


if __name__ == "__main__":
    main()
