"""Schema-aware rules (SCHEMA001-SCHEMA003).

These rules cross-reference the query's clause columns with a parsed
:class:`~analyzer_engine.models.Schema`.  Column matching is
case-insensitive and global: a column is "known" or "indexed" if any
table in the schema has it.  Primary keys do not count as indexes.
"""

from __future__ import annotations

from analyzer_engine.models.query import Query, QueryType
from analyzer_engine.models.report import RuleCategory, RuleInfo, Severity, Violation
from analyzer_engine.models.schema import Schema
from analyzer_engine.rules.base import Rule


class SchemaRule(Rule):
    """A rule bound to a read-only schema."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema


class MissingIndexOnFilterColumn(SchemaRule):
    info = RuleInfo(
        id="SCHEMA001",
        name="Missing index on filter column",
        severity=Severity.WARNING,
        category=RuleCategory.PERFORMANCE,
    )

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT:
            return []

        violations: list[Violation] = []
        for clause, columns in (("WHERE", query.where_cols), ("JOIN", query.join_cols)):
            for col in columns:
                if not self.schema.is_indexed(col):
                    violations.append(
                        self.violation(
                            query_index,
                            f"Column '{col}' in {clause} clause has no index",
                            f"Consider adding index on '{col}'",
                        )
                    )
        return violations


class ColumnNotInSchema(SchemaRule):
    info = RuleInfo(
        id="SCHEMA002",
        name="Column not in schema",
        severity=Severity.WARNING,
        category=RuleCategory.STYLE,
    )

    def check(self, query: Query, query_index: int) -> list[Violation]:
        violations: list[Violation] = []
        for col in [*query.where_cols, *query.join_cols, *query.order_cols, *query.group_cols]:
            # Numeric tokens are literals, not columns.
            if all(c.isdigit() or c == "." for c in col):
                continue
            if not self.schema.has_column(col):
                violations.append(
                    self.violation(
                        query_index,
                        f"Column '{col}' not found in schema",
                        "Check column name spelling or table reference",
                    )
                )
        return violations


class SuggestIndex(SchemaRule):
    info = RuleInfo(
        id="SCHEMA003",
        name="Index suggestion",
        severity=Severity.INFO,
        category=RuleCategory.PERFORMANCE,
    )

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT:
            return []
        for col in query.order_cols:
            if not self.schema.is_indexed(col):
                return [
                    self.violation(
                        query_index,
                        f"ORDER BY column '{col}' could benefit from index",
                        f"CREATE INDEX idx_{col.lower()} ON table({col})",
                    )
                ]
        return []
