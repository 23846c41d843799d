"""Locate statement files from command-line arguments.

Statement exports are named::

    statement_<YYYY>-<MM>_<YYYY>-<MM>-<DD>_<HH>-<MM>-<SS>.csv

where the first date is the month covered and the second is the moment the
file was downloaded. Directories are scanned (non-recursively) for files with
that name; a file named explicitly on the command line is accepted whatever
its name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime
from pathlib import Path

from .logging_setup import get_logger

logger = get_logger("fc_statements.discovery")

STATEMENT_FILENAME_RE = re.compile(
    r"^statement_(?P<period>\d{4}-\d{2})_(?P<downloaded>\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2})\.csv$"
)


def parse_statement_filename(filename: str) -> tuple[date, datetime] | None:
    """Return ``(period, downloaded_at)`` parsed from a statement filename.

    ``period`` is the first day of the covered month. Returns ``None`` when the
    name does not follow the export convention or holds an impossible date.
    """

    m = STATEMENT_FILENAME_RE.match(filename)
    if m is None:
        return None
    try:
        period = datetime.strptime(m.group("period"), "%Y-%m").date()
        downloaded = datetime.strptime(m.group("downloaded"), "%Y-%m-%d_%H-%M-%S")
    except ValueError:
        return None
    return period, downloaded


def _scan_directory(directory: Path) -> list[Path]:
    return [
        p
        for p in directory.iterdir()
        if p.is_file() and parse_statement_filename(p.name) is not None
    ]


def discover(arguments: Iterable[str]) -> list[Path]:
    """Return the statement files named by ``arguments``.

    Files are made absolute, de-duplicated and sorted by path, which for
    exported statements is chronological within a directory. Arguments that
    look like options (``--...``) and arguments that are neither a file nor a
    directory are logged as errors and skipped.
    """

    found: set[Path] = set()
    for arg in arguments:
        path = Path(arg)
        if path.is_file():
            found.add(path.absolute())
        elif path.is_dir():
            found.update(p.absolute() for p in _scan_directory(path))
        elif arg.startswith("--"):
            logger.error("Unrecognised command line argument '%s'", arg)
        else:
            logger.error(
                "Invalid command line argument. '%s' is neither a file nor a directory "
                "nor an output format specifier",
                arg,
            )
    return sorted(found, key=str)


__all__ = ["STATEMENT_FILENAME_RE", "discover", "parse_statement_filename"]
