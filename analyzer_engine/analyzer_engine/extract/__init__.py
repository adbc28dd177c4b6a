"""AST-to-Query extraction.

Turns sqlglot statement trees into flat :class:`~analyzer_engine.models.Query`
records: tables, per-clause column sets, window functions, limits and
flags.
"""

from analyzer_engine.extract.classifier import classify_statement
from analyzer_engine.extract.context import ExtractionContext, OrderedSet
from analyzer_engine.extract.expressions import (
    contains_subquery,
    extract_columns,
    extract_window_functions,
)
from analyzer_engine.extract.set_expr import walk_set_expression

__all__ = [
    "ExtractionContext",
    "OrderedSet",
    "classify_statement",
    "contains_subquery",
    "extract_columns",
    "extract_window_functions",
    "walk_set_expression",
]
