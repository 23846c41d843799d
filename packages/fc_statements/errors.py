"""Exception types raised by the statement pipeline.

Only two failures are hard faults: an inconsistent category registry
(programming error at construction time) and a post-cutover loan-part line
that cannot be apportioned. Any other line that cannot be parsed or
classified is logged and counted by the aggregator, which carries on.
"""

from __future__ import annotations

from pathlib import Path


class StatementError(Exception):
    """Base class for all errors raised by ``fc_statements``."""


class RegistryError(StatementError, ValueError):
    """The category registry violates a uniqueness constraint."""


class MalformedLineError(StatementError, ValueError):
    """A post-cutover loan-part line cannot be apportioned.

    Raised when its ``Interest`` or ``Transfer payment`` sub-field is missing.
    The aggregator re-raises with ``path`` and ``line_number`` filled in.
    """

    def __init__(
        self,
        message: str,
        *,
        line: str | None = None,
        path: Path | None = None,
        line_number: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.path = path
        self.line_number = line_number

    def __str__(self) -> str:
        where = ""
        if self.path is not None:
            where = f"{self.path.name}"
            if self.line_number is not None:
                where += f":{self.line_number}"
            where += ": "
        text = f"{where}{self.message}"
        if self.line is not None:
            text += f" (line: {self.line!r})"
        return text


class UnparseableLineError(StatementError, ValueError):
    """A transaction line is not ``date,description,number,number``.

    Not fatal: the aggregator counts the line as unclassified.
    """

    def __init__(self, message: str, *, line: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


__all__ = [
    "MalformedLineError",
    "RegistryError",
    "StatementError",
    "UnparseableLineError",
]
