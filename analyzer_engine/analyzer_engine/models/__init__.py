"""Data models shared by the extractor, the rule engine and the formatters."""

from analyzer_engine.models.query import (
    ComplexityLevel,
    Query,
    QueryComplexity,
    QueryType,
    WindowFunction,
)
from analyzer_engine.models.report import (
    AnalysisReport,
    RuleCategory,
    RuleInfo,
    Severity,
    Violation,
)
from analyzer_engine.models.schema import (
    ClickHouseMetadata,
    ColumnInfo,
    IndexInfo,
    Schema,
    TableInfo,
)

__all__ = [
    "AnalysisReport",
    "ClickHouseMetadata",
    "ColumnInfo",
    "ComplexityLevel",
    "IndexInfo",
    "Query",
    "QueryComplexity",
    "QueryType",
    "RuleCategory",
    "RuleInfo",
    "Schema",
    "Severity",
    "TableInfo",
    "Violation",
]
