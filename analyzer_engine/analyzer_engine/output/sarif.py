"""SARIF 2.1.0 export for code-scanning integrations.

Each violation becomes one ``result``.  Queries have no file position of
their own after parsing, so the region's ``startLine`` is the 1-based
query number rather than a physical line.
"""

from __future__ import annotations

import json
from typing import Any

from analyzer_engine.models.report import AnalysisReport, RuleInfo, Severity, Violation
from analyzer_engine.rules.registry import list_rule_infos

SARIF_SCHEMA = "https://json.schemastore.org/sarif-2.1.0.json"
SARIF_VERSION = "2.1.0"
TOOL_NAME = "sql-analyzer"
DEFAULT_ARTIFACT_URI = "queries.sql"

_SARIF_LEVELS: dict[Severity, str] = {
    Severity.ERROR: "error",
    Severity.WARNING: "warning",
    Severity.INFO: "note",
}


def _rule_descriptor(info: RuleInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "name": info.name,
        "shortDescription": {"text": info.name},
        "defaultConfiguration": {"level": _SARIF_LEVELS[info.severity]},
        "properties": {"category": info.category.value},
    }


def _result(violation: Violation, artifact_uri: str) -> dict[str, Any]:
    text = violation.message
    if violation.suggestion:
        text = f"{text}. Suggestion: {violation.suggestion}"
    return {
        "ruleId": violation.rule_id,
        "level": _SARIF_LEVELS[violation.severity],
        "message": {"text": text},
        "locations": [
            {
                "physicalLocation": {
                    "artifactLocation": {"uri": artifact_uri},
                    "region": {"startLine": violation.query_index + 1},
                }
            }
        ],
    }


def sarif_document(
    report: AnalysisReport,
    artifact_uri: str | None = None,
    information_uri: str | None = None,
    analysis: str | None = None,
) -> dict[str, Any]:
    """Build a SARIF log with a single run.

    Parameters
    ----------
    report:
        The analysis report to export.
    artifact_uri:
        Path of the analysed queries file.  Defaults to ``queries.sql``
        (used for stdin input).
    information_uri:
        Optional project URL placed on ``tool.driver.informationUri``.
    analysis:
        LLM review text, stored in the run's ``properties`` bag.
    """
    from analyzer_engine import __version__

    driver: dict[str, Any] = {
        "name": TOOL_NAME,
        "version": __version__,
        "rules": [_rule_descriptor(info) for info in list_rule_infos()],
    }
    if information_uri:
        driver["informationUri"] = information_uri

    uri = artifact_uri or DEFAULT_ARTIFACT_URI
    run: dict[str, Any] = {
        "tool": {"driver": driver},
        "results": [_result(v, uri) for v in report.violations],
    }
    if analysis is not None:
        run["properties"] = {"analysis": analysis}
    return {
        "$schema": SARIF_SCHEMA,
        "version": SARIF_VERSION,
        "runs": [run],
    }


def format_sarif_report(
    report: AnalysisReport,
    artifact_uri: str | None = None,
    information_uri: str | None = None,
    analysis: str | None = None,
) -> str:
    return json.dumps(sarif_document(report, artifact_uri, information_uri, analysis), indent=2)
