"""JSON and YAML report documents.

Both formats share one document shape::

    {
        "queries": [...],      # extracted Query records
        "violations": [...],   # sorted, as in the report
        "summary": {...},      # counts
        "analysis": "..."      # LLM review text, only when one ran
    }
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import yaml

from analyzer_engine.models.query import Query
from analyzer_engine.models.report import AnalysisReport


def _query_dict(query: Query, verbose: bool) -> dict[str, Any]:
    data = query.model_dump(mode="json")
    if verbose:
        complexity = query.complexity
        data["complexity"] = {
            "level": complexity.level.value,
            **complexity.model_dump(mode="json"),
        }
    return data


def report_document(
    report: AnalysisReport,
    queries: Sequence[Query] = (),
    verbose: bool = False,
    analysis: str | None = None,
) -> dict[str, Any]:
    """Build the plain-data document shared by the JSON and YAML formats."""
    document: dict[str, Any] = {
        "queries": [_query_dict(q, verbose) for q in queries],
        "violations": [v.model_dump(mode="json") for v in report.violations],
        "summary": {
            "queries_count": report.queries_count,
            "rules_count": report.rules_count,
            "errors": report.error_count,
            "warnings": report.warning_count,
            "infos": report.info_count,
        },
    }
    if analysis is not None:
        document["analysis"] = analysis
    return document


def format_json_report(
    report: AnalysisReport,
    queries: Sequence[Query] = (),
    verbose: bool = False,
    analysis: str | None = None,
) -> str:
    return json.dumps(report_document(report, queries, verbose, analysis), indent=2, ensure_ascii=False)


def format_yaml_report(
    report: AnalysisReport,
    queries: Sequence[Query] = (),
    verbose: bool = False,
    analysis: str | None = None,
) -> str:
    return yaml.safe_dump(
        report_document(report, queries, verbose, analysis),
        sort_keys=False,
        allow_unicode=True,
    )
