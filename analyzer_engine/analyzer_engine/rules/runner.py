"""Rule runner: executes every active rule against every query.

The runner is built once per analysis.  The disabled list and the
severity overrides are resolved at construction time; afterwards the
runner holds no mutable state and ``analyze`` can be called repeatedly.

Work is fanned out as one flat list of ``(query_index, rule)`` tasks on a
single :class:`~concurrent.futures.ThreadPoolExecutor`.  Results are
collected in submission order, so the report never depends on which
thread finished first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor

from analyzer_engine.config import AnalyzerConfig
from analyzer_engine.models.query import Query
from analyzer_engine.models.report import AnalysisReport, Severity, Violation
from analyzer_engine.models.schema import Schema
from analyzer_engine.rules.base import Rule
from analyzer_engine.rules.registry import builtin_rules, schema_rules

logger = logging.getLogger(__name__)


class RuleRunner:
    """Run a fixed set of rules over batches of queries.

    Parameters
    ----------
    config:
        Analyzer configuration.  ``config.rules.disabled`` removes rules
        by ID (case-insensitive); ``config.rules.severity`` re-grades the
        violations of the remaining rules.  Unknown severity names are
        ignored.
    rules:
        Rule instances to run.  Defaults to the built-in performance,
        style and security rules.
    max_workers:
        Thread count for the rule fan-out.  Falls back to
        ``config.max_workers`` and then to the executor default.  ``1``
        runs everything inline.
    """

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        rules: Iterable[Rule] | None = None,
        max_workers: int | None = None,
    ) -> None:
        config = config or AnalyzerConfig()
        candidates = list(rules) if rules is not None else builtin_rules()

        disabled = {rule_id.upper() for rule_id in config.rules.disabled}
        self.rules: list[Rule] = [r for r in candidates if r.rule_id.upper() not in disabled]
        if len(self.rules) != len(candidates):
            logger.debug(
                "Disabled %d rule(s): %s",
                len(candidates) - len(self.rules),
                ", ".join(sorted(disabled)),
            )

        self.severity_overrides: dict[str, Severity] = {}
        enabled_ids = {r.rule_id.upper(): r.rule_id for r in self.rules}
        for rule_id, severity_name in config.rules.severity.items():
            target = enabled_ids.get(rule_id.upper())
            severity = Severity.parse(severity_name)
            if target is None:
                continue
            if severity is None:
                logger.warning("Ignoring unknown severity %r for rule %s", severity_name, rule_id)
                continue
            self.severity_overrides[target] = severity

        self.max_workers = max_workers if max_workers is not None else config.max_workers

    @classmethod
    def with_schema(
        cls,
        schema: Schema,
        config: AnalyzerConfig | None = None,
        max_workers: int | None = None,
    ) -> RuleRunner:
        """Build a runner with the built-in rules plus the schema-aware rules."""
        return cls(
            config=config,
            rules=[*builtin_rules(), *schema_rules(schema)],
            max_workers=max_workers,
        )

    # -- execution ---------------------------------------------------------

    def analyze(self, queries: Sequence[Query]) -> AnalysisReport:
        """Run every rule against every query and return a sorted report.

        Violations are ordered by severity (errors first), then by query
        index.  The sort is stable, so violations with equal keys keep
        their query order and, within a query, the rule order.
        """
        tasks = [(index, rule) for index, query in enumerate(queries) for rule in self.rules]

        if self.max_workers == 1 or len(tasks) < 2:
            batches = [rule.check(queries[index], index) for index, rule in tasks]
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(rule.check, queries[index], index) for index, rule in tasks]
                batches = [future.result() for future in futures]

        violations = [self._apply_override(v) for batch in batches for v in batch]
        violations.sort(key=lambda v: (-v.severity.rank, v.query_index))

        report = AnalysisReport(
            violations=violations,
            queries_count=len(queries),
            rules_count=len(self.rules),
        )
        logger.debug(
            "Analyzed %d queries with %d rules: %d violation(s) (%d error, %d warning, %d info)",
            report.queries_count,
            report.rules_count,
            len(violations),
            report.error_count,
            report.warning_count,
            report.info_count,
        )
        return report

    def _apply_override(self, violation: Violation) -> Violation:
        override = self.severity_overrides.get(violation.rule_id)
        if override is None or override == violation.severity:
            return violation
        return violation.model_copy(update={"severity": override})
