"""Report formatters: text, JSON, YAML and SARIF."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum

from analyzer_engine.models.query import Query
from analyzer_engine.models.report import AnalysisReport
from analyzer_engine.output.exit_codes import ExitCode, calculate_exit_code
from analyzer_engine.output.sarif import format_sarif_report, sarif_document
from analyzer_engine.output.structured import format_json_report, format_yaml_report, report_document
from analyzer_engine.output.text import format_queries_summary, format_text_report


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"
    SARIF = "sarif"


def format_report(
    report: AnalysisReport,
    queries: Sequence[Query] = (),
    fmt: OutputFormat = OutputFormat.TEXT,
    colored: bool = True,
    verbose: bool = False,
    artifact_uri: str | None = None,
    information_uri: str | None = None,
    analysis: str | None = None,
) -> str:
    """Render *report* in the requested format.

    *colored* only affects the text format.  *artifact_uri* and
    *information_uri* only affect SARIF, where they name the analysed file
    and the tool's home page.  *analysis* is the optional LLM review text,
    carried by every format.
    """
    if fmt == OutputFormat.JSON:
        return format_json_report(report, queries, verbose, analysis)
    if fmt == OutputFormat.YAML:
        return format_yaml_report(report, queries, verbose, analysis)
    if fmt == OutputFormat.SARIF:
        return format_sarif_report(report, artifact_uri, information_uri, analysis)
    return format_text_report(report, queries, colored, verbose, analysis)


__all__ = [
    "ExitCode",
    "OutputFormat",
    "calculate_exit_code",
    "format_json_report",
    "format_queries_summary",
    "format_report",
    "format_sarif_report",
    "format_text_report",
    "format_yaml_report",
    "report_document",
    "sarif_document",
]
