"""Pytest configuration and shared fixtures.

Logging is configured once per process by the CLI (``configure_logging`` is
idempotent and disables propagation). CLI tests would otherwise leave the
package logger detached from ``caplog`` for every later test, so logging
state is reset around each test.

``write_statement`` creates statement files named the way the platform exports
them, inside the test's own temporary directory.
"""

from __future__ import annotations

import sys
import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `fc_statements` is importable
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR)] if p not in sys.path]

from fc_statements.logging_setup import reset_logging  # noqa: E402

HEADER = "Date,Description,Paid In,Paid Out"

StatementWriter: TypeAlias = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolate_logging(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("FC_STATEMENTS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("FC_STATEMENTS_NAMES", raising=False)
    reset_logging()
    yield
    reset_logging()


def dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n").rstrip()


@pytest.fixture
def write_statement(tmp_path: Path) -> StatementWriter:
    """Return ``write(period, body, *, downloaded=..., directory=None, name=None)``.

    ``body`` holds the transaction lines (dedented); the header row is added.
    ``downloaded`` defaults to just after the end of ``period``'s month.
    """

    def write(
        period: str,
        body: str,
        *,
        downloaded: str | None = None,
        directory: Path | None = None,
        name: str | None = None,
    ) -> Path:
        year, month = (int(x) for x in period.split("-"))
        if downloaded is None:
            ny, nm = (year + 1, 1) if month == 12 else (year, month + 1)
            downloaded = f"{ny:04d}-{nm:02d}-01_09-30-00"
        folder = directory or tmp_path
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / (name or f"statement_{period}_{downloaded}.csv")
        path.write_text(HEADER + "\n" + dedent(body) + "\n", encoding="utf-8")
        return path

    return write
