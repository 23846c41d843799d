"""CLI for the ``fc_statements`` package.

Usage::

    fc-statements [PATHS]... [--summary] [--csv] [--name=NAMES] [--log-level=LEVEL]

``PATHS`` are statement files or directories holding statement files. At
least one statement and at least one of ``--summary``/``--csv`` are required.
Unrecognised options and paths that are neither files nor directories are
reported but do not stop the run.

Environment variables are loaded from a local ``.env`` using
``python-dotenv`` before the command runs:

- ``FC_STATEMENTS_NAMES``: default for ``--name``.
- ``FC_STATEMENTS_LOG_LEVEL``: default log level.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from .logging_setup import configure_logging, get_logger

logger = get_logger("fc_statements.cli")

_NO_FILES_MESSAGE = (
    "ERROR: No statement files found in the command line arguments:\n"
    "At least one command line argument of either/both:\n"
    "  a) one or more csv files, or\n"
    "  b) one or more folders containing csv files\n"
    "is required."
)
_NO_FORMAT_MESSAGE = (
    "An output format specifier of either:\n"
    "  --summary : for a pretty summary of transactions\n"
    "  --csv     : for a csv table of transactions\n"
    "is required as a command line argument, but none has been found, exiting...."
)


def split_names(value: str | None) -> list[str]:
    """Split the comma-separated ``--name`` value into trimmed names."""

    if not value:
        return []
    return [n.strip() for n in value.split(",") if n.strip()]


def run(
    arguments: list[str],
    *,
    summary: bool,
    csv_output: bool,
    names: list[str],
    console: Console,
) -> int:
    """Discover, parse and render; returns the process exit code."""

    # Deferred imports keep ``--help`` fast
    from .api import parse_statements
    from .discovery import discover
    from .errors import MalformedLineError
    from .registry import build_registry
    from .render import render_csv, render_summary

    files = discover(arguments)

    usage_errors = 0
    if not files:
        usage_errors += 1
        typer.echo(_NO_FILES_MESSAGE, err=True)
    if not (summary or csv_output):
        usage_errors += 1
        typer.echo(_NO_FORMAT_MESSAGE, err=True)
    if usage_errors:
        return 1

    registry = build_registry(names)
    try:
        records = parse_statements(files, registry=registry)
    except MalformedLineError as e:
        typer.echo(f"Error: {e}", err=True)
        return 1
    except OSError as e:
        typer.echo(f"Error: failed to read statement: {e}", err=True)
        return 1

    if summary:
        console.out(render_summary(records, registry), end="", highlight=False)
    if csv_output:
        console.out(render_csv(records, registry), end="", highlight=False)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    add_completion=False,
    help=(
        "Summarise Funding Circle monthly statement CSV files by transaction "
        "category. Loads defaults from a local .env before running."
    ),
)


@app.command(context_settings={"ignore_unknown_options": True, "allow_extra_args": True})
def main(
    paths: Annotated[
        list[str] | None,
        typer.Argument(help="Statement csv files and/or directories containing them."),
    ] = None,
    summary: Annotated[
        bool, typer.Option("--summary", help="Print a pretty summary of transactions.")
    ] = False,
    csv_output: Annotated[
        bool, typer.Option("--csv", help="Print a csv table of transactions.")
    ] = False,
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            envvar="FC_STATEMENTS_NAMES",
            help=(
                "Comma-separated payment references to count as Deposits in "
                "addition to TRANSFERIN."
            ),
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (falls back to FC_STATEMENTS_LOG_LEVEL)."),
    ] = None,
) -> None:
    """Classify and total the transactions of one or more statements."""

    # Load environment from .env in CWD (override=False to keep existing env)
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)

    # Typer resolved envvar defaults before .env was loaded
    if name is None:
        name = os.getenv("FC_STATEMENTS_NAMES")

    console = Console(soft_wrap=True, highlight=False, markup=False, emoji=False)
    code = run(
        list(paths or []),
        summary=summary,
        csv_output=csv_output,
        names=split_names(name),
        console=console,
    )
    if code:
        raise typer.Exit(code)


if __name__ == "__main__":  # pragma: no cover - exercised via the console script
    # Running as a module: `python -m fc_statements.cli`
    app()
