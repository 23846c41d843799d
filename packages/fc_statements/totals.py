"""Cross-statement totals.

The grand total is a synthetic :class:`StatementRecord` whose category results
are the sums of the already-finalized per-statement results, derived
categories included; the derived pass is not re-run on the total.

Results are joined on the display name with parenthetical qualifiers removed
(see :func:`fc_statements.registry.strip_qualifiers`). This is a fuzzy join:
two distinct categories sharing a base name would each be added into both
totals. The registry logs a warning when it is built with such names.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import StatementRecord
from .registry import CategoryRegistry, strip_qualifiers


def build_totals(
    records: Sequence[StatementRecord], registry: CategoryRegistry
) -> StatementRecord | None:
    """Return the grand-total record, or ``None`` for fewer than two records."""

    if len(records) < 2:
        return None

    totals = StatementRecord(results=registry.new_results(), is_total=True)
    by_base: dict[str, list[str]] = {}
    for name in totals.results:
        by_base.setdefault(strip_qualifiers(name), []).append(name)

    for record in records:
        if record.has_transactions:
            totals.observe(record.earliest)
            totals.observe(record.latest)
        totals.total_lines += record.total_lines
        totals.composite_lines += record.composite_lines
        totals.unclassified_lines += record.unclassified_lines
        for name, result in record.results.items():
            for total_name in by_base.get(strip_qualifiers(name), ()):
                totals.results[total_name].add(result.sum_total, result.transaction_count)
    return totals


__all__ = ["build_totals"]
