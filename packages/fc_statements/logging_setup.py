"""Logging for ``fc_statements``.

Everything the package reports (unclassifiable lines, rejected command-line
arguments, partial statements, the unverified loan-sale rule) goes through
loggers below ``"fc_statements"``. Modules obtain them with
``get_logger("fc_statements.<module>")``; only the CLI decides where records
end up, by calling ``configure_logging`` once.

Before that call the package logger carries a ``NullHandler``, so importing
the package as a library prints nothing.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "fc_statements"
_LEVEL_ENV = "FC_STATEMENTS_LOG_LEVEL"
_DEFAULT_FORMAT = "%(levelname)s: %(message)s"
_CONFIGURED = False


def _parse_level(level: int | str | None) -> int:
    """Resolve ``level`` to a number; unknown names fall through to the env var."""

    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelNamesMapping().get(name)
        if numeric is not None:
            return numeric
    env_val = os.getenv(_LEVEL_ENV)
    if env_val and env_val != level:
        return _parse_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Send ``fc_statements`` log records to ``stream`` (stderr by default).

    Report output goes to stdout, so diagnostics never mix into a CSV table
    redirected to a file. Calls after the first are ignored.

    Parameters
    ----------
    level:
        ``--log-level`` value, as a number or a name such as ``"debug"``.
        ``None`` means ``FC_STATEMENTS_LOG_LEVEL``, then ``INFO``.
    fmt:
        Format string; defaults to ``"LEVEL: message"``, matching the
        ``ERROR: ...`` lines the tool prints for usage problems.
    stream:
        Destination; looked up on ``sys`` at call time so a redirected stderr
        is honoured.
    """

    global _CONFIGURED
    if _CONFIGURED:
        return

    numeric = _parse_level(level)
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(numeric)
    # Records stop here; the root logger would print them a second time.
    pkg_logger.propagate = False

    _CONFIGURED = True


def reset_logging() -> None:
    """Return the package logger to its unconfigured state.

    Each CLI invocation in the test-suite captures stderr afresh, so the
    handler from a previous run must not linger.
    """

    global _CONFIGURED
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True
    _CONFIGURED = False


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, silenced by a ``NullHandler`` until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
