"""Style rules (STYLE001-STYLE002)."""

from __future__ import annotations

from analyzer_engine.models.query import Query, QueryType
from analyzer_engine.models.report import RuleCategory, RuleInfo, Severity, Violation
from analyzer_engine.rules.base import Rule
from analyzer_engine.rules.performance import has_select_star


class SelectStar(Rule):
    info = RuleInfo(id="STYLE001", name="SELECT * usage", severity=Severity.INFO, category=RuleCategory.STYLE)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT or not has_select_star(query):
            return []
        return [
            self.violation(
                query_index,
                "Query uses SELECT * instead of explicit column list",
                "Specify explicit columns to improve clarity and performance",
            )
        ]


class MissingTableAlias(Rule):
    info = RuleInfo(
        id="STYLE002",
        name="Missing table aliases",
        severity=Severity.INFO,
        category=RuleCategory.STYLE,
    )

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT or len(query.tables) <= 1:
            return []
        # Derived-table markers contain a space and count as aliased.
        has_aliases = " AS " in query.raw.upper() or any(" " in t for t in query.tables)
        if has_aliases or not query.join_cols:
            return []
        return [
            self.violation(
                query_index,
                "Multi-table query without table aliases",
                "Add short aliases (e.g., users u, orders o) for readability",
            )
        ]
