"""Report renderers for aggregated statements.

Both renderers return plain strings so the output is deterministic; the CLI
prints them through a Rich console. Only visible categories are shown, in
display order.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import StatementRecord
from .normalize import CURRENCY
from .registry import CategoryRegistry

TITLE_WIDTH = 80
TITLE_FILL = "~"
WARNING_PREFIX = "WARNING: "


def title_block(title: str) -> list[str]:
    """Three-line banner of ``TITLE_FILL`` centering ``title``."""

    inner = f" {title} "
    left = max(0, (TITLE_WIDTH - len(inner)) // 2)
    right = max(0, TITLE_WIDTH - len(inner) - left)
    rule = TITLE_FILL * TITLE_WIDTH
    return [rule, f"{TITLE_FILL * left}{inner}{TITLE_FILL * right}", rule]


def date_range_line(record: StatementRecord) -> str:
    if not record.has_transactions:
        return "No recognised transactions"
    if record.earliest.year == record.latest.year:
        return (
            "Summary of all transaction types from "
            f"{record.earliest:%A %d %B} to {record.latest:%A %d %B}"
        )
    return (
        "Totals of all transaction types from "
        f"{record.earliest:%d %B %Y} to {record.latest:%d %B %Y}"
    )


def _warning_lines(message: str) -> list[str]:
    first, *rest = message.split("\n")
    indent = " " * len(WARNING_PREFIX)
    return [WARNING_PREFIX + first, *(indent + line for line in rest), ""]


def render_summary(records: Sequence[StatementRecord], registry: CategoryRegistry) -> str:
    """Human-readable summary: one titled block per record."""

    visible = registry.visible()
    out: list[str] = []
    for record in records:
        out.extend(title_block(record.title))
        out.append(date_range_line(record))
        out.append("")
        if not record.is_total:
            for w in record.warnings:
                out.extend(_warning_lines(w))

        results = [(d.display_name, record.results[d.display_name]) for d in visible]
        name_width = max((len(name) for name, _ in results), default=0)
        pounds_width = max(
            (len(f"{r.sum_total:.2f}".split(".")[0]) for _, r in results if r.transaction_count),
            default=0,
        )
        count_width = max((len(str(r.transaction_count)) for _, r in results), default=1)
        for name, r in results:
            out.append(
                f"\t{name:<{name_width}}  {CURRENCY}{r.sum_total:>{pounds_width + 4}.2f}"
                f" from {r.transaction_count:>{count_width}d} transactions"
            )
        out.extend(["", ""])
    return "\n".join(out) + "\n" if out else ""


def render_csv(records: Sequence[StatementRecord], registry: CategoryRegistry) -> str:
    """CSV table: a ``Date`` column plus one column per visible category.

    Every cell is right-aligned to one more than the widest cell of its column.
    """

    visible = registry.visible()
    header = ["Date", *(d.display_name for d in visible)]
    rows = [
        [record.table_name, *(f"{record.results[d.display_name].sum_total:.2f}" for d in visible)]
        for record in records
    ]
    widths = [len(h) + 1 for h in header]
    for row in rows:
        for i, cell in enumerate(row):
            if len(cell) >= widths[i]:
                widths[i] = len(cell) + 1

    lines = [
        ",".join(cell.rjust(widths[i]) for i, cell in enumerate(row)) for row in [header, *rows]
    ]
    return "\n".join(lines) + "\n\n"


__all__ = ["render_csv", "render_summary", "title_block"]
