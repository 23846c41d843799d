"""Category registry: the ordered table of transaction categories.

Order is significant. The matcher tries definitions in registry order and, for
ordinary lines, the first match wins, so a more specific pattern must precede
any more general pattern that could match the same line.

Definitions with ``display_order`` at or above
:data:`COMPOSITE_ORDER_THRESHOLD` describe the two halves of a post-cutover
secondary-market line. They are only consulted by the matcher's dual pass.

Known limitation
----------------
A pre-cutover loan-part line debiting ``0.00`` whose ``Delta`` and ``Fee``
sub-values are both ``0.00`` satisfies both "Historical delta" and
"Historical fees". Nothing in the statement tells them apart, so the one
listed first ("Historical delta") absorbs every such line. The outcome is
deterministic for a given registry but is not known to be correct.
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from .errors import RegistryError
from .logging_setup import get_logger
from .models import (
    CategoryDefinition,
    CategoryResult,
    Column,
    LinePattern,
    StatementLine,
)

logger = get_logger("fc_statements.registry")

COMPOSITE_ORDER_THRESHOLD = 20

# Generic marker the platform prints for an incoming bank transfer.
DEPOSIT_MARKER = "TRANSFERIN"

_QUALIFIER_RE = re.compile(r"\s*\([^)]*\)")


def strip_qualifiers(display_name: str) -> str:
    """Drop parenthetical qualifiers: ``"Net interest (derived)"`` -> ``"Net interest"``."""

    return _QUALIFIER_RE.sub("", display_name).strip()


# ---------------------------------------------------------------------------
# Relations between figures quoted in a description and the value columns
# ---------------------------------------------------------------------------


def _credited(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.side is Column.CREDIT and line.credit == values["described"]


def _debited(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.side is Column.DEBIT and line.debit == values["described"]


def _purchase_credit(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.credit == values["transfer"] - values["interest"]


def _purchase_debit(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.debit == values["interest"]


def _sale_credit(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.credit == values["interest"]


def _sale_debit(values: Mapping[str, Decimal], line: StatementLine) -> bool:
    return line.debit == values["transfer"] - values["interest"]


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_AMOUNT = r"\d+\.\d{2}"

# Pre-cutover loan-part lines: "Loan_Part_ID 123:Principal 20.00:Interest
# 0.05:Delta 0.00:Fee 0.00" followed by the two value columns.
_PRINCIPAL = rf"Loan_Part_ID \d+:Principal (?P<described>{_AMOUNT})(?::|,)"
_INTEREST = rf"Loan_Part_ID \d+.+:Interest (?P<described>{_AMOUNT})(?::|,)"
_DELTA = rf"Loan_Part_ID \d+.+:Delta (?P<described>{_AMOUNT})(?::|,)"
_FEE = rf"Loan_Part_ID \d+.+:Fee (?P<described>{_AMOUNT}),"

# Post-cutover loan-part lines quote every figure with a currency marker.
_LOAN_CAPITAL = (
    rf"Loan_Part_ID \d+:Principal £(?P<described>{_AMOUNT})"
    r"(?=.*:Interest £0\.00)(?=.*:Transfer payment -?£0\.00)"
)
_COMPOSITE_PURCHASE = (
    rf"Loan_Part_ID \d+(?=.*:Interest £(?P<interest>{_AMOUNT}))"
    rf"(?=.*:Transfer payment -£(?P<transfer>{_AMOUNT}))"
)
_COMPOSITE_SALE = (
    rf"Loan_Part_ID \d+(?=.*:Interest £(?P<interest>{_AMOUNT}))"
    rf"(?=.*:Transfer payment £(?P<transfer>{_AMOUNT}))"
)


def _deposit_pattern(deposit_names: Sequence[str]) -> str:
    alternatives = [DEPOSIT_MARKER]
    alternatives.extend(re.escape(n.strip()) for n in deposit_names if n.strip())
    return "|".join(alternatives)


def _definitions(deposit_names: Sequence[str]) -> tuple[CategoryDefinition, ...]:
    C, D = Column.CREDIT, Column.DEBIT
    p = LinePattern.compile
    return (
        CategoryDefinition("Interest repayment", p("Interest repayment"), C, 0, derived_group=1),
        CategoryDefinition(
            "Early interest repayment", p("Early interest repayment"), C, 1, derived_group=1
        ),
        CategoryDefinition("Principal repayment", p("Principal repayment"), C, 2),
        CategoryDefinition("Early principal repayment", p("Early principal repayment"), C, 3),
        CategoryDefinition(
            "Principal recovery repayment", p("Principal recovery repayment"), C, 4
        ),
        CategoryDefinition("New loans made", p("Loan offer"), D, 5),
        CategoryDefinition("Fees", p("Servicing fee"), D, 6),
        CategoryDefinition("Deposits", p(_deposit_pattern(deposit_names)), C, 7, derived_group=2),
        CategoryDefinition("Withdrawals", p("Withdrawal"), D, 8, derived_group=2),
        # Secondary market, pre-cutover: one line per sub-value, the value
        # column repeats whichever sub-value the line is about.
        CategoryDefinition("Principal credit", p(_PRINCIPAL, _credited), C, 9),
        CategoryDefinition("Interest credit", p(_INTEREST, _credited), C, 10, derived_group=1),
        CategoryDefinition("Principal debit", p(_PRINCIPAL, _debited), D, 11),
        CategoryDefinition("Interest debit", p(_INTEREST, _debited), D, 12, derived_group=1),
        # Promotional adjustments no longer issued; kept so old statements
        # still reconcile.
        CategoryDefinition("Historical delta", p(_DELTA, _debited), D, 13, visible=False),
        CategoryDefinition("Historical fees", p(_FEE, _debited), D, 14, visible=False),
        # Secondary market, post-cutover, loan capital only.
        CategoryDefinition(
            "Loan part sale (post-cutover)", p(_LOAN_CAPITAL, _credited), C, 15
        ),
        CategoryDefinition(
            "Loan part purchase (post-cutover)", p(_LOAN_CAPITAL, _debited), D, 16
        ),
        # Secondary market, post-cutover, composite lines: one credit half and
        # one debit half per line.
        CategoryDefinition(
            "Transfer payment credit (post-cutover)",
            p(_COMPOSITE_PURCHASE, _purchase_credit),
            C,
            20,
        ),
        CategoryDefinition(
            "Accrued interest debit (post-cutover)",
            p(_COMPOSITE_PURCHASE, _purchase_debit),
            D,
            21,
            derived_group=1,
        ),
        # Sale halves follow an unverified apportioning rule, see normalize.py.
        CategoryDefinition(
            "Accrued interest credit (post-cutover)",
            p(_COMPOSITE_SALE, _sale_credit),
            C,
            22,
            derived_group=1,
        ),
        CategoryDefinition(
            "Transfer payment debit (post-cutover)", p(_COMPOSITE_SALE, _sale_debit), D, 23
        ),
        # Net interest as the platform's summary page reports it.
        CategoryDefinition("Net interest (derived)", None, C, 30, derived_group=-1),
        CategoryDefinition("Net deposits (derived)", None, C, 31, derived_group=-2),
    )


@dataclass(frozen=True, slots=True)
class CategoryRegistry:
    """Immutable, ordered collection of :class:`CategoryDefinition`."""

    definitions: tuple[CategoryDefinition, ...]

    def __post_init__(self) -> None:
        names: set[str] = set()
        orders: set[int] = set()
        stripped: dict[str, str] = {}
        for d in self.definitions:
            if d.display_name in names:
                raise RegistryError(f"duplicate category name: {d.display_name!r}")
            if d.display_order < 0 or d.display_order in orders:
                raise RegistryError(
                    f"display order {d.display_order} of {d.display_name!r} is not unique"
                )
            if d.pattern is None and not d.is_derived:
                raise RegistryError(f"category {d.display_name!r} has no pattern")
            names.add(d.display_name)
            orders.add(d.display_order)
            base = strip_qualifiers(d.display_name)
            if base in stripped:
                # Totals join on the stripped name; both would be summed together.
                logger.warning(
                    "Categories %r and %r share the base name %r; totals will merge them",
                    stripped[base],
                    d.display_name,
                    base,
                )
            stripped.setdefault(base, d.display_name)

        groups = {d.derived_group for d in self.definitions if d.derived_group > 0}
        for d in self.derived():
            if -d.derived_group not in groups:
                raise RegistryError(
                    f"derived category {d.display_name!r} has no contributing categories"
                )

    def __iter__(self) -> Iterator[CategoryDefinition]:
        return iter(self.definitions)

    def __len__(self) -> int:
        return len(self.definitions)

    def get(self, display_name: str) -> CategoryDefinition:
        for d in self.definitions:
            if d.display_name == display_name:
                return d
        raise KeyError(display_name)

    def simple(self) -> tuple[CategoryDefinition, ...]:
        """Matchable definitions for ordinary, single-category lines."""

        return tuple(
            d
            for d in self.definitions
            if d.pattern is not None and d.display_order < COMPOSITE_ORDER_THRESHOLD
        )

    def composite(self) -> tuple[CategoryDefinition, ...]:
        """Matchable definitions for the halves of composite lines."""

        return tuple(
            d
            for d in self.definitions
            if d.pattern is not None and d.display_order >= COMPOSITE_ORDER_THRESHOLD
        )

    def derived(self) -> tuple[CategoryDefinition, ...]:
        return tuple(d for d in self.definitions if d.is_derived)

    def visible(self) -> list[CategoryDefinition]:
        return sorted((d for d in self.definitions if d.visible), key=lambda d: d.display_order)

    def new_results(self) -> dict[str, CategoryResult]:
        return {d.display_name: CategoryResult() for d in self.definitions}


def build_registry(deposit_names: Sequence[str] = ()) -> CategoryRegistry:
    """Return the default registry.

    ``deposit_names`` are extra literal strings recognised as "Deposits", for
    statements that show a personal payment reference instead of
    ``TRANSFERIN``.
    """

    return CategoryRegistry(_definitions(deposit_names))


__all__ = [
    "COMPOSITE_ORDER_THRESHOLD",
    "CategoryRegistry",
    "DEPOSIT_MARKER",
    "build_registry",
    "strip_qualifiers",
]
