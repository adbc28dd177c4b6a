"""Static analysis of SQL queries against performance, style, security and schema rules."""

__version__ = "0.1.0"

from analyzer_engine.cache import QueryCache, parse_queries_cached
from analyzer_engine.config import (
    AnalyzerConfig,
    LlmConfig,
    LlmProvider,
    RetryConfig,
    RulesConfig,
    Settings,
    load_config,
    load_settings,
)
from analyzer_engine.errors import AnalyzerError, ConfigError, LlmError, QueryParseError, SchemaParseError
from analyzer_engine.models import AnalysisReport, Query, Schema, Severity, Violation
from analyzer_engine.parser import SqlDialect, parse_queries
from analyzer_engine.rules import RuleRunner
from analyzer_engine.schema import parse_schema

__all__ = [
    "AnalysisReport",
    "AnalyzerConfig",
    "AnalyzerError",
    "ConfigError",
    "LlmConfig",
    "LlmError",
    "LlmProvider",
    "Query",
    "QueryCache",
    "QueryParseError",
    "RetryConfig",
    "RuleRunner",
    "RulesConfig",
    "Schema",
    "SchemaParseError",
    "Settings",
    "Severity",
    "SqlDialect",
    "Violation",
    "__version__",
    "load_config",
    "load_settings",
    "parse_queries",
    "parse_queries_cached",
    "parse_schema",
]
