"""Data models for statement classification and aggregation.

The models are plain ``dataclass`` records:

- :class:`CategoryDefinition` and :class:`LinePattern` are frozen and owned by
  the category registry.
- :class:`StatementLine` is the frozen, parsed form of one normalized
  transaction line.
- :class:`CategoryResult` and :class:`StatementRecord` are mutable while a
  statement is being aggregated and treated as read-only afterwards.

Monetary values are ``Decimal`` quantized to two places; the platform never
reports fractions of a penny.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import TypeAlias

PENNY = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Decimal | str | int) -> Decimal:
    """Return ``value`` as a ``Decimal`` with exactly two decimal places."""

    return Decimal(value).quantize(PENNY)


class Column(Enum):
    """The two value columns of a statement line."""

    CREDIT = "Paid In"
    DEBIT = "Paid Out"


@dataclass(frozen=True, slots=True)
class StatementLine:
    """One normalized transaction line split into typed columns.

    ``side`` records which value column held a figure in the raw line before
    empty columns were zero-filled: ``Column.CREDIT`` when only "Paid In" was
    populated, ``Column.DEBIT`` when only "Paid Out" was, ``None`` otherwise.
    Loan-part categories use it to tell a credited ``0.00`` from a debited one.
    """

    date: date
    description: str
    credit: Decimal
    debit: Decimal
    text: str
    composite: bool = False
    side: Column | None = None

    def value(self, column: Column) -> Decimal:
        return self.credit if column is Column.CREDIT else self.debit


# Post-condition evaluated after a successful regex search. Receives the named
# groups of the match converted to ``Decimal`` and the parsed line.
Relation: TypeAlias = Callable[[Mapping[str, Decimal], StatementLine], bool]


@dataclass(frozen=True, slots=True)
class LinePattern:
    """A regular expression over the whole normalized line plus a relation.

    Named groups are captured as decimals so that relations can compare a
    figure quoted in the description with the figure in a value column, e.g.
    ``Principal 20.00`` against a "Paid In" of ``20.00``.
    """

    regex: re.Pattern[str]
    relation: Relation | None = None

    @classmethod
    def compile(cls, pattern: str, relation: Relation | None = None) -> LinePattern:
        return cls(re.compile(pattern), relation)

    def matches(self, line: StatementLine) -> bool:
        m = self.regex.search(line.text)
        if m is None:
            return False
        if self.relation is None:
            return True
        values = {k: Decimal(v) for k, v in m.groupdict().items() if v is not None}
        return self.relation(values, line)


@dataclass(frozen=True, slots=True)
class CategoryDefinition:
    """Static definition of a transaction category.

    ``derived_group`` is ``0`` for ordinary categories, ``+N`` for categories
    contributing to derived group ``N`` and ``-N`` for the derived category
    itself, which has no ``pattern`` and is filled by the derived pass only.
    """

    display_name: str
    pattern: LinePattern | None
    column: Column
    display_order: int
    visible: bool = True
    derived_group: int = 0

    @property
    def is_derived(self) -> bool:
        return self.derived_group < 0


@dataclass(slots=True)
class CategoryResult:
    sum_total: Decimal = ZERO
    transaction_count: int = 0

    def add(self, value: Decimal, count: int = 1) -> None:
        self.sum_total = to_money(self.sum_total + value)
        self.transaction_count += count


@dataclass(frozen=True, slots=True)
class CategoryMatch:
    """A definition matched against a line and the value it contributes."""

    definition: CategoryDefinition
    value: Decimal


@dataclass(slots=True)
class StatementRecord:
    """Aggregated results for one statement file, or the grand total."""

    path: Path | None = None
    volume: str = ""
    directory: str = ""
    filename: str = ""
    period: date | None = None
    downloaded_at: datetime | None = None
    earliest: date = date.max
    latest: date = date.min
    total_lines: int = 0
    composite_lines: int = 0
    unclassified_lines: int = 0
    results: dict[str, CategoryResult] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    is_total: bool = False

    @property
    def has_transactions(self) -> bool:
        return self.earliest <= self.latest

    @property
    def title(self) -> str:
        if self.is_total:
            return "Totals"
        if self.period is not None:
            return self.period.strftime("%B %Y Statement")
        return self.filename

    @property
    def table_name(self) -> str:
        if self.is_total:
            return "Totals"
        if self.period is not None:
            return self.period.strftime("%Y-%m")
        return Path(self.filename).stem

    def observe(self, when: date) -> None:
        """Narrow the observed transaction date range to include ``when``."""

        if when < self.earliest:
            self.earliest = when
        if when > self.latest:
            self.latest = when


__all__ = [
    "CategoryDefinition",
    "CategoryMatch",
    "CategoryResult",
    "Column",
    "LinePattern",
    "PENNY",
    "Relation",
    "StatementLine",
    "StatementRecord",
    "ZERO",
    "to_money",
]
