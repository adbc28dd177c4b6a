"""Unit tests for the schema-aware rules and the rule catalogue."""

from __future__ import annotations

import pytest
from analyzer_engine.models import Query, QueryType, RuleCategory, Severity
from analyzer_engine.parser import parse_queries
from analyzer_engine.rules import builtin_rules, list_rule_infos, schema_rules
from analyzer_engine.rules.schema_aware import ColumnNotInSchema, MissingIndexOnFilterColumn, SuggestIndex
from analyzer_engine.schema import parse_schema

SCHEMA_DDL = """
CREATE TABLE users (id INT PRIMARY KEY, email VARCHAR(255), name TEXT, created_at TIMESTAMP);
CREATE TABLE orders (id INT PRIMARY KEY, user_id INT, total DECIMAL(10, 2));
CREATE INDEX idx_users_email ON users (email);
CREATE INDEX idx_orders_user ON orders (user_id);
"""


@pytest.fixture()
def schema():
    return parse_schema(SCHEMA_DDL)


def _query(sql: str) -> Query:
    (query,) = parse_queries(sql)
    return query


# ---------------------------------------------------------------------------
# SCHEMA001
# ---------------------------------------------------------------------------


class TestMissingIndexOnFilterColumn:
    def test_unindexed_where_column(self, schema):
        rule = MissingIndexOnFilterColumn(schema)
        violations = rule.check(_query("SELECT id FROM users WHERE email = 'x' AND name = 'y'"), 0)
        assert [v.message for v in violations] == ["Column 'name' in WHERE clause has no index"]
        assert violations[0].suggestion == "Consider adding index on 'name'"
        assert violations[0].severity == Severity.WARNING
        assert violations[0].category == RuleCategory.PERFORMANCE

    def test_where_before_join(self, schema):
        rule = MissingIndexOnFilterColumn(schema)
        sql = "SELECT u.id FROM users u JOIN orders o ON u.id = o.user_id WHERE o.total > 10"
        messages = [v.message for v in rule.check(_query(sql), 0)]
        assert messages == [
            "Column 'total' in WHERE clause has no index",
            "Column 'id' in JOIN clause has no index",
        ]

    def test_primary_key_is_not_an_index(self, schema):
        rule = MissingIndexOnFilterColumn(schema)
        assert rule.check(_query("SELECT name FROM users WHERE id = 1"), 0)

    def test_case_insensitive_match(self, schema):
        rule = MissingIndexOnFilterColumn(schema)
        assert rule.check(_query("SELECT id FROM users WHERE EMAIL = 'x'"), 0) == []

    def test_only_select(self, schema):
        rule = MissingIndexOnFilterColumn(schema)
        assert rule.check(_query("UPDATE users SET name = 'x' WHERE name = 'y'"), 0) == []


# ---------------------------------------------------------------------------
# SCHEMA002
# ---------------------------------------------------------------------------


class TestColumnNotInSchema:
    def test_unknown_column(self, schema):
        rule = ColumnNotInSchema(schema)
        (v,) = rule.check(_query("SELECT id FROM users WHERE phone = '555'"), 2)
        assert v.message == "Column 'phone' not found in schema"
        assert v.suggestion == "Check column name spelling or table reference"
        assert v.category == RuleCategory.STYLE
        assert v.query_index == 2

    def test_checks_every_clause(self, schema):
        rule = ColumnNotInSchema(schema)
        sql = (
            "SELECT COUNT(*) FROM users u JOIN orders o ON u.id = o.buyer_id "
            "WHERE u.nickname = 'x' GROUP BY u.region ORDER BY u.score"
        )
        messages = [v.message for v in rule.check(_query(sql), 0)]
        assert messages == [
            "Column 'nickname' not found in schema",
            "Column 'buyer_id' not found in schema",
            "Column 'score' not found in schema",
            "Column 'region' not found in schema",
        ]

    def test_applies_to_dml(self, schema):
        rule = ColumnNotInSchema(schema)
        assert rule.check(_query("DELETE FROM users WHERE phone = '1'"), 0)

    def test_numeric_tokens_skipped(self, schema):
        rule = ColumnNotInSchema(schema)
        query = Query(raw="...", query_type=QueryType.SELECT, where_cols=["1", "2.5", "email"])
        assert rule.check(query, 0) == []


# ---------------------------------------------------------------------------
# SCHEMA003
# ---------------------------------------------------------------------------


class TestSuggestIndex:
    def test_first_unindexed_order_column_only(self, schema):
        rule = SuggestIndex(schema)
        violations = rule.check(_query("SELECT id FROM users ORDER BY email, name, created_at LIMIT 5"), 0)
        assert len(violations) == 1
        assert violations[0].message == "ORDER BY column 'name' could benefit from index"
        assert violations[0].suggestion == "CREATE INDEX idx_name ON table(name)"
        assert violations[0].severity == Severity.INFO

    def test_suggestion_lowercases_index_name(self, schema):
        rule = SuggestIndex(schema)
        query = Query(raw="...", query_type=QueryType.SELECT, order_cols=["CreatedAt"])
        (v,) = rule.check(query, 0)
        assert v.suggestion == "CREATE INDEX idx_createdat ON table(CreatedAt)"

    def test_indexed_order_column(self, schema):
        rule = SuggestIndex(schema)
        assert rule.check(_query("SELECT id FROM users ORDER BY email"), 0) == []


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class TestRuleCatalogue:
    def test_builtin_rule_ids(self):
        assert [r.rule_id for r in builtin_rules()] == [
            "PERF001",
            "PERF002",
            "PERF003",
            "PERF004",
            "PERF005",
            "PERF006",
            "PERF007",
            "PERF008",
            "PERF009",
            "PERF010",
            "PERF011",
            "STYLE001",
            "STYLE002",
            "SEC001",
            "SEC002",
            "SEC003",
            "SEC004",
        ]

    def test_schema_rules_bound_to_schema(self, schema):
        rules = schema_rules(schema)
        assert [r.rule_id for r in rules] == ["SCHEMA001", "SCHEMA002", "SCHEMA003"]
        assert all(r.schema is schema for r in rules)

    def test_list_rule_infos(self):
        infos = list_rule_infos()
        assert len(infos) == 20
        assert len({i.id for i in infos}) == 20
        assert len(list_rule_infos(include_schema=False)) == 17

    @pytest.mark.parametrize(
        ("rule_id", "severity"),
        [
            ("PERF001", Severity.WARNING),
            ("PERF005", Severity.ERROR),
            ("PERF011", Severity.INFO),
            ("STYLE002", Severity.INFO),
            ("SEC003", Severity.ERROR),
            ("SCHEMA001", Severity.WARNING),
            ("SCHEMA003", Severity.INFO),
        ],
    )
    def test_default_severities(self, rule_id: str, severity: Severity):
        infos = {i.id: i for i in list_rule_infos()}
        assert infos[rule_id].severity == severity
