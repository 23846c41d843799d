"""Statement aggregator: one pass over a statement file into a record.

Per file the order of work is fixed:

1. every transaction line is normalized, matched and added to its category;
   lines that cannot be read or matched are logged and counted as
   unclassified;
2. :func:`apply_derived` fills the derived categories from the positive,
   not-yet-negated sums of their contributors;
3. :func:`apply_sign_flip` negates every non-zero debit-column sum, once;
4. :func:`coverage_warnings` checks that the statement spans its month.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, time
from decimal import Decimal
from os import PathLike
from pathlib import Path

from .discovery import parse_statement_filename
from .errors import MalformedLineError, UnparseableLineError
from .logging_setup import get_logger
from .matcher import CategoryMatcher
from .models import ZERO, CategoryMatch, Column, StatementRecord, to_money
from .normalize import is_transaction_line, normalize_line
from .registry import CategoryRegistry

logger = get_logger("fc_statements.aggregate")

HEADER_PREFIX = "Date"


def apply_derived(record: StatementRecord, registry: CategoryRegistry) -> None:
    """Overwrite derived categories with the signed sum of their group.

    Credit-column contributors are added and debit-column contributors
    subtracted. Must run before :func:`apply_sign_flip`.
    """

    sums: dict[int, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[int, int] = defaultdict(int)
    for d in registry:
        if d.derived_group <= 0:
            continue
        result = record.results[d.display_name]
        if d.column is Column.CREDIT:
            sums[d.derived_group] += result.sum_total
        else:
            sums[d.derived_group] -= result.sum_total
        counts[d.derived_group] += result.transaction_count

    for d in registry.derived():
        result = record.results[d.display_name]
        result.sum_total = to_money(sums[-d.derived_group])
        result.transaction_count = counts[-d.derived_group]


def apply_sign_flip(record: StatementRecord, registry: CategoryRegistry) -> None:
    """Negate the non-zero sums of debit-column categories."""

    for d in registry:
        result = record.results[d.display_name]
        if d.column is Column.DEBIT and result.sum_total != 0:
            result.sum_total = -result.sum_total


def coverage_warnings(record: StatementRecord) -> list[str]:
    """Warn when a statement may not cover its whole calendar month.

    Statements without a parseable period (files named by hand) are not
    checked.
    """

    if record.period is None or record.downloaded_at is None:
        return []

    warnings: list[str] = []
    period = record.period
    first_instant = datetime(period.year, period.month, 1)
    last_day = calendar.monthrange(period.year, period.month)[1]
    last_instant = datetime(period.year, period.month, last_day, 23, 59, 59)

    if not record.has_transactions:
        warnings.append(
            "Statement may not contain all transactions for the whole calendar month\n"
            "Statement contains no recognised transactions"
        )
    elif datetime.combine(record.earliest, time()) > first_instant:
        warnings.append(
            "Statement may not contain all transactions for the whole calendar month\n"
            f"Statement contains transactions from {record.earliest:%d %B %Y} "
            f"to {record.latest:%d %B %Y}"
        )

    if record.downloaded_at < last_instant:
        last_seen = (
            f"{record.latest:%d %B %Y}" if record.has_transactions else "the start of the month"
        )
        warnings.append(
            "Statement may not contain all transactions for the whole calendar month\n"
            f"Statement was downloaded at {record.downloaded_at:%H:%M:%S} on "
            f"{record.downloaded_at:%d %B %Y} and\n"
            f"contains no recorded transactions after {last_seen}."
        )
    return warnings


class StatementAggregator:
    """Drive normalization and matching over one statement at a time."""

    def __init__(
        self, registry: CategoryRegistry, *, matcher: CategoryMatcher | None = None
    ) -> None:
        self.registry = registry
        self.matcher = matcher or CategoryMatcher(registry)

    def new_record(self, path: str | PathLike[str] | None = None) -> StatementRecord:
        record = StatementRecord(results=self.registry.new_results())
        if path is None:
            return record
        p = Path(path).absolute()
        record.path = p
        record.volume = p.drive
        record.directory = str(p.parent)
        record.filename = p.name
        parsed = parse_statement_filename(p.name)
        if parsed is not None:
            record.period, record.downloaded_at = parsed
        else:
            logger.debug("%s does not follow the statement naming convention", p.name)
        return record

    def aggregate(self, path: str | PathLike[str]) -> StatementRecord:
        """Read, classify and finalize the statement at ``path``."""

        record = self.new_record(path)
        # utf-8-sig drops the byte order mark some exports start with.
        with Path(path).open(encoding="utf-8-sig", newline="") as fh:
            self.consume(record, fh)
        self.finalize(record)
        return record

    def aggregate_lines(
        self, lines: Iterable[str], *, path: str | PathLike[str] | None = None
    ) -> StatementRecord:
        """Like :meth:`aggregate` for lines already in memory."""

        record = self.new_record(path)
        self.consume(record, lines)
        self.finalize(record)
        return record

    def consume(self, record: StatementRecord, lines: Iterable[str]) -> None:
        for number, raw in enumerate(lines, start=1):
            raw = raw.rstrip("\r\n")
            if not raw.strip() or raw.startswith(HEADER_PREFIX):
                continue
            if not is_transaction_line(raw):
                continue
            try:
                self.add_line(record, raw)
            except MalformedLineError as err:
                raise MalformedLineError(
                    err.message, line=raw, path=record.path, line_number=number
                ) from err

    def add_line(self, record: StatementRecord, raw: str) -> tuple[CategoryMatch, ...]:
        """Classify one transaction line and add it to ``record``."""

        record.total_lines += 1
        try:
            line = normalize_line(raw)
        except UnparseableLineError as err:
            self._unclassified(record, raw)
            logger.error("The line could not be read: %s", err.message)
            return ()
        if line.composite:
            record.composite_lines += 1

        matches = self.matcher.match(line)
        if not matches:
            self._unclassified(record, raw)
            return matches
        if line.composite and len(matches) == 1:
            logger.warning(
                "Only the %s half of a composite line was recognised in %s: %s",
                matches[0].definition.column.value,
                record.filename or "<memory>",
                raw,
            )

        for match in matches:
            record.results[match.definition.display_name].add(match.value)
        record.observe(line.date)
        return matches

    def _unclassified(self, record: StatementRecord, raw: str) -> None:
        record.unclassified_lines += 1
        logger.error(
            "Parsed a line containing an unexpected transaction category in the file: %s",
            record.filename or "<memory>",
        )
        logger.error("The unexpected line is: %s", raw)
        logger.error("Please report the line so the category can be supported.")

    def finalize(self, record: StatementRecord) -> None:
        apply_derived(record, self.registry)
        apply_sign_flip(record, self.registry)
        record.warnings = coverage_warnings(record)
        for w in record.warnings:
            logger.debug("%s: %s", record.filename, w.replace("\n", " "))


__all__ = [
    "HEADER_PREFIX",
    "StatementAggregator",
    "apply_derived",
    "apply_sign_flip",
    "coverage_warnings",
]
