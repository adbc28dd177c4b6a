"""Security rules (SEC001-SEC004): destructive statements.

Every rule here defaults to ``Severity.ERROR``.
"""

from __future__ import annotations

from analyzer_engine.models.query import Query, QueryType
from analyzer_engine.models.report import RuleCategory, RuleInfo, Severity, Violation
from analyzer_engine.rules.base import Rule


def _sec(rule_id: str, name: str) -> RuleInfo:
    return RuleInfo(id=rule_id, name=name, severity=Severity.ERROR, category=RuleCategory.SECURITY)


class MissingWhereInUpdate(Rule):
    info = _sec("SEC001", "UPDATE without WHERE")

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.UPDATE or query.where_cols:
            return []
        return [
            self.violation(
                query_index,
                "UPDATE statement without WHERE clause will affect all rows",
                "Add WHERE clause to limit affected rows",
            )
        ]


class MissingWhereInDelete(Rule):
    info = _sec("SEC002", "DELETE without WHERE")

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.DELETE or query.where_cols:
            return []
        return [
            self.violation(
                query_index,
                "DELETE statement without WHERE clause will remove all rows",
                "Add WHERE clause to limit deleted rows",
            )
        ]


class TruncateDetected(Rule):
    info = _sec("SEC003", "TRUNCATE statement detected")

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.TRUNCATE:
            return []
        names = ", ".join(query.tables)
        return [
            self.violation(
                query_index,
                f"TRUNCATE removes all rows from table(s) '{names}' without logging individual deletions",
                "Use DELETE with WHERE for safer data removal, or ensure backups exist",
            )
        ]


class DropDetected(Rule):
    info = _sec("SEC004", "DROP statement detected")

    def check(self, query: Query, query_index: int) -> list[Violation]:
        if query.query_type != QueryType.DROP:
            return []
        kind = query.object_kind or "object"
        names = ", ".join(query.tables)
        return [
            self.violation(
                query_index,
                f"DROP {kind} '{names}' permanently destroys data and schema",
                "Ensure this is intentional and backups exist before dropping",
            )
        ]
