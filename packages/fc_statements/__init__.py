"""Public interface for the ``fc_statements`` package.

This module exposes the package's API functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .aggregate import StatementAggregator, apply_derived, apply_sign_flip, coverage_warnings
from .api import parse_statements
from .discovery import discover, parse_statement_filename
from .errors import MalformedLineError, RegistryError, StatementError, UnparseableLineError
from .matcher import CategoryMatcher
from .models import (
    CategoryDefinition,
    CategoryMatch,
    CategoryResult,
    Column,
    LinePattern,
    StatementLine,
    StatementRecord,
)
from .normalize import is_transaction_line, normalize_line
from .registry import (
    COMPOSITE_ORDER_THRESHOLD,
    CategoryRegistry,
    build_registry,
    strip_qualifiers,
)
from .render import render_csv, render_summary
from .totals import build_totals

__all__ = [
    # API
    "parse_statements",
    "build_registry",
    "build_totals",
    "discover",
    "normalize_line",
    "is_transaction_line",
    "parse_statement_filename",
    "render_csv",
    "render_summary",
    "apply_derived",
    "apply_sign_flip",
    "coverage_warnings",
    "strip_qualifiers",
    # Components
    "CategoryMatcher",
    "CategoryRegistry",
    "StatementAggregator",
    "COMPOSITE_ORDER_THRESHOLD",
    # Models / types
    "CategoryDefinition",
    "CategoryMatch",
    "CategoryResult",
    "Column",
    "LinePattern",
    "StatementLine",
    "StatementRecord",
    # Errors
    "MalformedLineError",
    "RegistryError",
    "StatementError",
    "UnparseableLineError",
]
