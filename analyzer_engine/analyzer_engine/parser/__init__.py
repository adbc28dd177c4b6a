"""SQL parsing front-end: dialects, DDL preprocessing and query parsing."""

from analyzer_engine.parser.clickhouse import PreprocessResult, preprocess, preprocess_clickhouse
from analyzer_engine.parser.dialect import SqlDialect
from analyzer_engine.parser.queries import parse_queries

__all__ = [
    "PreprocessResult",
    "SqlDialect",
    "parse_queries",
    "preprocess",
    "preprocess_clickhouse",
]
