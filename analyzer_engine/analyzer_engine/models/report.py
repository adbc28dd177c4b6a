"""Rule metadata, violations, and the aggregated analysis report."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """How serious a violation is.  Ordered ``INFO < WARNING < ERROR``."""

    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    @classmethod
    def parse(cls, text: str) -> Severity | None:
        """Parse a configuration string; unknown values return ``None``."""
        return _SEVERITY_ALIASES.get(text.strip().lower())

    def __str__(self) -> str:
        return self.value


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.ERROR: 2,
}

_SEVERITY_ALIASES: dict[str, Severity] = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
    "info": Severity.INFO,
}


class RuleCategory(str, Enum):
    """Area a rule belongs to."""

    PERFORMANCE = "Performance"
    STYLE = "Style"
    SECURITY = "Security"

    def __str__(self) -> str:
        return self.value


class RuleInfo(BaseModel):
    """Static metadata describing a rule."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable short code, e.g. PERF001.")
    name: str = Field(..., description="Human-readable rule name.")
    severity: Severity = Field(..., description="Default severity of emitted violations.")
    category: RuleCategory = Field(..., description="Rule category.")


class Violation(BaseModel):
    """A single finding emitted by a rule for one query."""

    rule_id: str = Field(..., description="Identifier of the rule that fired.")
    rule_name: str = Field(..., description="Human-readable rule name.")
    message: str = Field(..., description="What was detected.")
    severity: Severity = Field(..., description="Effective severity after overrides.")
    category: RuleCategory = Field(..., description="Rule category.")
    suggestion: str | None = Field(default=None, description="How to fix the problem, if known.")
    query_index: int = Field(..., ge=0, description="Zero-based position of the query in the input.")


class AnalysisReport(BaseModel):
    """Sorted violations for a batch of queries.

    Counts are derived from :attr:`violations`; they are not stored.
    """

    violations: list[Violation] = Field(default_factory=list, description="Violations, most severe first.")
    queries_count: int = Field(default=0, description="Number of analysed queries.")
    rules_count: int = Field(default=0, description="Number of active rules.")

    def count(self, severity: Severity) -> int:
        return sum(1 for v in self.violations if v.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(Severity.INFO)

    @property
    def highest_severity(self) -> Severity | None:
        """The most severe violation's severity, or ``None`` for a clean report."""
        return max((v.severity for v in self.violations), key=lambda s: s.rank, default=None)
