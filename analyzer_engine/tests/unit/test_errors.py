"""Unit tests for the typed error hierarchy."""

from __future__ import annotations

import pytest
from analyzer_engine.errors import AnalyzerError, ConfigError, QueryParseError, SchemaParseError
from analyzer_engine.parser import parse_queries


class TestParseErrors:
    def test_message_with_position(self):
        err = QueryParseError("Expecting )", line=3, column=14)
        assert str(err) == "Query parse error at line 3, column 14:\n  Expecting )"

    def test_message_without_position(self):
        err = SchemaParseError("Unsupported statement")
        assert str(err) == "Schema parse error:\n  Unsupported statement"
        assert err.line is None

    def test_hierarchy(self):
        assert issubclass(QueryParseError, AnalyzerError)
        assert issubclass(SchemaParseError, AnalyzerError)
        assert issubclass(ConfigError, AnalyzerError)

    def test_from_parser_keeps_position(self):
        with pytest.raises(QueryParseError) as exc_info:
            parse_queries("SELECT id\nFROM users WHERE (id = 1")
        err = exc_info.value
        assert err.line is not None
        assert err.column is not None
        assert str(err).startswith(f"Query parse error at line {err.line}")
        assert isinstance(err.__cause__, Exception)


class TestConfigError:
    def test_message(self):
        err = ConfigError("conf/.sql-analyzer.toml", "rules.disabled: Input should be a valid list")
        assert str(err) == (
            "Invalid configuration in conf/.sql-analyzer.toml: rules.disabled: Input should be a valid list"
        )
        assert err.reason.startswith("rules.disabled")
