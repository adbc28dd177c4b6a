"""Unit tests for the ClickHouse DDL preprocessor."""

from __future__ import annotations

from analyzer_engine.models.schema import ClickHouseMetadata
from analyzer_engine.parser import SqlDialect, preprocess, preprocess_clickhouse


class TestPreprocessDispatch:
    def test_other_dialects_pass_through(self):
        sql = "CREATE TABLE t (a Int32 CODEC(ZSTD))"
        for dialect in (SqlDialect.GENERIC, SqlDialect.MYSQL, SqlDialect.POSTGRESQL, SqlDialect.SQLITE):
            result = preprocess(sql, dialect)
            assert result.sql == sql
            assert result.metadata == ClickHouseMetadata()
            assert result.metadata.is_empty

    def test_clickhouse_is_rewritten(self):
        result = preprocess("CREATE TABLE t (a Int32 CODEC(ZSTD))", SqlDialect.CLICKHOUSE)
        assert "CODEC" not in result.sql
        assert result.metadata.codecs == {"a": "ZSTD"}


class TestPreprocessClickHouse:
    def test_nested_codec_arguments(self):
        result = preprocess_clickhouse("CREATE TABLE t (ts DateTime CODEC(Delta, ZSTD(3)), id UInt64)")
        assert result.metadata.codecs == {"ts": "Delta, ZSTD(3)"}
        assert result.sql == "CREATE TABLE t (ts DateTime, id UInt64)"

    def test_ttl_before_settings(self):
        result = preprocess_clickhouse(
            "CREATE TABLE t (d Date) ENGINE = MergeTree() ORDER BY d "
            "TTL d + INTERVAL 1 MONTH SETTINGS index_granularity = 8192"
        )
        assert result.metadata.ttl_expressions == ("d + INTERVAL 1 MONTH",)
        assert result.metadata.settings == {"index_granularity": "8192"}
        assert "TTL" not in result.sql
        assert "SETTINGS" not in result.sql

    def test_ttl_keeps_statement_terminator(self):
        result = preprocess_clickhouse(
            "CREATE TABLE a (d Date) ENGINE = MergeTree() ORDER BY d TTL d + INTERVAL 1 DAY; "
            "CREATE TABLE b (id UInt64) ENGINE = MergeTree() ORDER BY id"
        )
        assert result.metadata.ttl_expressions == ("d + INTERVAL 1 DAY",)
        assert "; CREATE TABLE b" in result.sql

    def test_multiple_settings(self):
        result = preprocess_clickhouse(
            "CREATE TABLE t (id UInt64) ENGINE = MergeTree() ORDER BY id "
            "SETTINGS index_granularity = 8192, storage_policy = 'hot_cold'"
        )
        assert result.metadata.settings == {"index_granularity": "8192", "storage_policy": "hot_cold"}

    def test_partition_by(self):
        result = preprocess_clickhouse(
            "CREATE TABLE t (ts DateTime) ENGINE = MergeTree() PARTITION BY toYYYYMM(ts) ORDER BY ts"
        )
        assert result.metadata.partition_by == ("toYYYYMM(ts)",)
        assert result.sql == "CREATE TABLE t (ts DateTime) ENGINE = MergeTree() ORDER BY ts"

    def test_whitespace_collapsed(self):
        result = preprocess_clickhouse("CREATE   TABLE\n\tt (\n  id UInt64\n)")
        assert result.sql == "CREATE TABLE t ( id UInt64 )"

    def test_case_insensitive_keywords(self):
        result = preprocess_clickhouse("create table t (v Float64 codec(Gorilla)) settings max_parts = 10")
        assert result.metadata.codecs == {"v": "Gorilla"}
        assert result.metadata.settings == {"max_parts": "10"}

    def test_plain_ddl_has_empty_metadata(self):
        result = preprocess_clickhouse("CREATE TABLE t (id UInt64)")
        assert result.metadata.is_empty
