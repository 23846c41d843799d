"""Category matcher: assigns a normalized line to its category or categories.

Two passes, chosen by the line's shape:

- single pass: ordinary lines are tested against the registry's simple
  definitions in order; the first match wins.
- dual pass: composite lines are tested against the composite definitions;
  the first matching credit definition and the first matching debit
  definition are resolved independently, and both contribute.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import CategoryDefinition, CategoryMatch, Column, StatementLine
from .registry import CategoryRegistry


def _first(
    definitions: Iterable[CategoryDefinition], line: StatementLine
) -> CategoryDefinition | None:
    for d in definitions:
        if d.pattern is not None and d.pattern.matches(line):
            return d
    return None


class CategoryMatcher:
    def __init__(self, registry: CategoryRegistry) -> None:
        self._simple = registry.simple()
        self._composite_credit = tuple(
            d for d in registry.composite() if d.column is Column.CREDIT
        )
        self._composite_debit = tuple(d for d in registry.composite() if d.column is Column.DEBIT)

    def match(self, line: StatementLine) -> tuple[CategoryMatch, ...]:
        """Return the matches for ``line``; empty when no category applies."""

        if line.composite:
            return self.match_composite(line)
        return self.match_single(line)

    def match_single(self, line: StatementLine) -> tuple[CategoryMatch, ...]:
        d = _first(self._simple, line)
        if d is None:
            return ()
        return (CategoryMatch(d, line.value(d.column)),)

    def match_composite(self, line: StatementLine) -> tuple[CategoryMatch, ...]:
        matches = []
        for candidates in (self._composite_credit, self._composite_debit):
            d = _first(candidates, line)
            if d is not None:
                matches.append(CategoryMatch(d, line.value(d.column)))
        return tuple(matches)


__all__ = ["CategoryMatcher"]
