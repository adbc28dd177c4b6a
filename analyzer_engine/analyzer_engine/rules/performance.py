"""Performance rules (PERF001-PERF011).

Several rules are textual heuristics over the upper-cased rendered SQL
(:attr:`Query.raw`); the rest inspect the extracted clause columns and
flags.  None of them estimate cost.
"""

from __future__ import annotations

import re

from analyzer_engine.models.query import Query, QueryType
from analyzer_engine.models.report import RuleCategory, RuleInfo, Severity, Violation
from analyzer_engine.rules.base import Rule

_OFFSET_THRESHOLD = 1000
_OR_THRESHOLD = 3

_WHERE_FUNCTION_PATTERNS = (
    "WHERE YEAR(",
    "WHERE MONTH(",
    "WHERE DAY(",
    "WHERE DATE(",
    "WHERE UPPER(",
    "WHERE LOWER(",
    "WHERE TRIM(",
    "WHERE SUBSTRING(",
    "WHERE CAST(",
    "WHERE CONVERT(",
    "WHERE COALESCE(",
)

# Matches ``x NOT IN (SELECT`` and the rendered ``NOT <operand> IN (SELECT``,
# where the operand may be a call or a row constructor.
_NOT_IN_SUBQUERY_RE = re.compile(r"\bNOT\s+(?:.+?\s+)?IN\s*\(\s*SELECT\b")


def has_select_star(query: Query) -> bool:
    """True when the rendered SQL contains ``SELECT *``."""
    upper = query.raw.upper()
    return "SELECT *" in upper or "SELECT  *" in upper


def _perf(rule_id: str, name: str, severity: Severity) -> RuleInfo:
    return RuleInfo(id=rule_id, name=name, severity=severity, category=RuleCategory.PERFORMANCE)


class SelectStarWithoutLimit(Rule):
    info = _perf("PERF001", "SELECT * without LIMIT", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT:
            return []
        if has_select_star(query) and query.limit is None:
            return [
                self.violation(
                    query_index,
                    "Query uses SELECT * without LIMIT clause",
                    "Add LIMIT clause or specify explicit columns",
                )
            ]
        return []


class LeadingWildcard(Rule):
    info = _perf("PERF002", "Leading wildcard in LIKE", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        upper = query.raw.upper()
        if "LIKE '%" in upper or 'LIKE "%' in upper:
            return [
                self.violation(
                    query_index,
                    "LIKE pattern starts with wildcard, preventing index usage",
                    "Consider full-text search or restructure query",
                )
            ]
        return []


class OrInsteadOfIn(Rule):
    info = _perf("PERF003", "OR instead of IN", Severity.INFO)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        or_count = query.raw.upper().count(" OR ")
        if or_count >= _OR_THRESHOLD:
            return [
                self.violation(
                    query_index,
                    f"Query has {or_count} OR conditions, consider using IN clause",
                    "Replace multiple OR conditions with IN (val1, val2, ...)",
                )
            ]
        return []


class LargeOffset(Rule):
    info = _perf("PERF004", "Large OFFSET value", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.offset is not None and query.offset > _OFFSET_THRESHOLD:
            return [
                self.violation(
                    query_index,
                    f"OFFSET {query.offset} is large, causing performance degradation",
                    "Use keyset pagination (WHERE id > last_id) instead",
                )
            ]
        return []


class MissingJoinCondition(Rule):
    info = _perf("PERF005", "Potential Cartesian product", Severity.ERROR)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT:
            return []
        table_count = len(query.tables)
        if table_count > 1 and not query.join_cols and not query.where_cols:
            return [
                self.violation(
                    query_index,
                    f"Query references {table_count} tables without apparent JOIN conditions",
                    "Add JOIN conditions or WHERE clause to prevent Cartesian product",
                )
            ]
        return []


class DistinctWithOrderBy(Rule):
    info = _perf("PERF006", "DISTINCT with ORDER BY", Severity.INFO)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.has_distinct and query.order_cols:
            return [
                self.violation(
                    query_index,
                    "Query uses DISTINCT with ORDER BY",
                    "Consider if both are necessary, or use GROUP BY instead",
                )
            ]
        return []


class ScalarSubqueryInSelect(Rule):
    info = _perf("PERF007", "Scalar subquery in SELECT", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT or not query.has_subquery:
            return []
        upper = query.raw.upper()
        from_pos = upper.find(" FROM ")
        if from_pos < 0:
            return []
        select_part = upper[:from_pos]
        if "SELECT" in select_part and "(" in select_part:
            return [
                self.violation(
                    query_index,
                    "Scalar subquery in SELECT causes N+1 query pattern",
                    "Use JOIN or window function instead",
                )
            ]
        return []


class FunctionOnColumn(Rule):
    info = _perf("PERF008", "Function on indexed column", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        upper = query.raw.upper()
        if any(pattern in upper for pattern in _WHERE_FUNCTION_PATTERNS):
            return [
                self.violation(
                    query_index,
                    "Function call on column in WHERE prevents index usage",
                    "Use computed column, functional index, or rewrite condition",
                )
            ]
        return []


class NotInWithSubquery(Rule):
    info = _perf("PERF009", "NOT IN with subquery", Severity.WARNING)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if _NOT_IN_SUBQUERY_RE.search(query.raw.upper()):
            return [
                self.violation(
                    query_index,
                    "NOT IN with subquery can return unexpected results with NULL",
                    "Use NOT EXISTS or LEFT JOIN with IS NULL instead",
                )
            ]
        return []


class UnionWithoutAll(Rule):
    info = _perf("PERF010", "UNION without ALL", Severity.INFO)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if not query.has_union:
            return []
        upper = query.raw.upper()
        if " UNION " in upper and " UNION ALL " not in upper:
            return [
                self.violation(
                    query_index,
                    "UNION removes duplicates which requires sorting",
                    "Use UNION ALL if duplicates are acceptable",
                )
            ]
        return []


class SelectWithoutWhere(Rule):
    info = _perf("PERF011", "SELECT without WHERE", Severity.INFO)

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.SELECT:
            return []
        if not query.where_cols and query.limit is None and query.tables:
            return [
                self.violation(
                    query_index,
                    "SELECT without WHERE or LIMIT scans entire table",
                    "Add WHERE clause or LIMIT to restrict results",
                )
            ]
        return []
