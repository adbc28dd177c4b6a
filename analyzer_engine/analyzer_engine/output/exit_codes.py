"""Process exit codes derived from an analysis report."""

from __future__ import annotations

from enum import IntEnum

from analyzer_engine.models.report import AnalysisReport, Severity


class ExitCode(IntEnum):
    OK = 0
    WARNINGS = 1
    ERRORS = 2
    FAILURE = 3  # input could not be read or parsed


def calculate_exit_code(report: AnalysisReport) -> int:
    """2 if any violation is an error, else 1 if any is a warning, else 0."""
    highest = report.highest_severity
    if highest == Severity.ERROR:
        return ExitCode.ERRORS
    if highest == Severity.WARNING:
        return ExitCode.WARNINGS
    return ExitCode.OK
