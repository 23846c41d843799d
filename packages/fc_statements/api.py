"""Pipeline entry point.

``parse_statements`` ties the components together: it builds the registry
(threading the extra deposit names through as configuration), aggregates each
statement in order, and appends the grand total when there is more than one
statement.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from os import PathLike

from .aggregate import StatementAggregator
from .logging_setup import get_logger
from .models import StatementRecord
from .registry import CategoryRegistry, build_registry
from .totals import build_totals

logger = get_logger("fc_statements.api")


def parse_statements(
    paths: Iterable[str | PathLike[str]],
    *,
    deposit_names: Sequence[str] = (),
    registry: CategoryRegistry | None = None,
) -> list[StatementRecord]:
    """Aggregate every statement in ``paths`` and append the grand total.

    Parameters
    ----------
    paths:
        Statement files, processed sequentially in the given order.
    deposit_names:
        Extra literal strings recognised as "Deposits". Ignored when
        ``registry`` is given.
    registry:
        Optional pre-built registry.

    Raises
    ------
    MalformedLineError
        A post-cutover loan-part line cannot be apportioned.
    OSError
        A statement cannot be read.
    """

    registry = registry or build_registry(deposit_names)
    aggregator = StatementAggregator(registry)

    records: list[StatementRecord] = []
    for path in paths:
        logger.debug("Parsing %s", path)
        records.append(aggregator.aggregate(path))

    totals = build_totals(records, registry)
    if totals is not None:
        records.append(totals)
    return records


__all__ = ["parse_statements"]
