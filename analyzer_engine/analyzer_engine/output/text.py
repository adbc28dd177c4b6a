"""Human-readable report rendering with Rich.

Everything is rendered into a string through a recording
:class:`rich.console.Console`, so callers decide where the text goes.
With ``colored=False`` the output is plain text without escape codes.
"""

from __future__ import annotations

import io
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape

from analyzer_engine.models.query import ComplexityLevel, Query, QueryComplexity
from analyzer_engine.models.report import AnalysisReport, Severity, Violation

_SEVERITY_LABELS: dict[Severity, str] = {
    Severity.ERROR: "ERROR",
    Severity.WARNING: "WARN",
    Severity.INFO: "INFO",
}

_SEVERITY_ICONS: dict[Severity, str] = {
    Severity.ERROR: "✗",
    Severity.WARNING: "⚠",
    Severity.INFO: "ℹ",
}

_SEVERITY_COLOURS: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}

_COMPLEXITY_COLOURS: dict[ComplexityLevel, str] = {
    ComplexityLevel.LOW: "green",
    ComplexityLevel.MEDIUM: "yellow",
    ComplexityLevel.HIGH: "red",
}


def _console(colored: bool) -> Console:
    return Console(
        file=io.StringIO(),
        force_terminal=colored,
        no_color=not colored,
        color_system="standard" if colored else None,
        highlight=False,
        soft_wrap=True,
        emoji=False,
    )


def _render(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


def _complexity_markup(complexity: QueryComplexity) -> str:
    colour = _COMPLEXITY_COLOURS[complexity.level]
    return f"[{colour}]{complexity.level.value}[/{colour}] (score: {complexity.score})"


def format_text_report(
    report: AnalysisReport,
    queries: Sequence[Query] = (),
    colored: bool = True,
    verbose: bool = False,
    analysis: str | None = None,
) -> str:
    """Render *report* grouped by query, ending with a totals line.

    Parameters
    ----------
    report:
        The sorted analysis report.
    queries:
        The analysed queries.  Only needed for the per-query complexity
        shown in verbose mode.
    colored:
        Emit ANSI colours.
    verbose:
        Show each query's complexity label and score, including queries
        without violations.
    analysis:
        LLM review text, appended as a final ``SQL Query Analysis`` section.
    """
    console = _console(colored)
    console.print("[bold]=== Static Analysis ===[/bold]")

    by_query: dict[int, list[Violation]] = {}
    for v in report.violations:
        by_query.setdefault(v.query_index, []).append(v)

    indices = sorted(set(by_query) | (set(range(len(queries))) if verbose else set()))

    for index in indices:
        header = f"\n[bold cyan]Query #{index + 1}[/bold cyan]"
        if index < len(queries):
            header += f" [dim]({queries[index].query_type.value})[/dim]"
            if verbose:
                header += f"  Complexity: {_complexity_markup(queries[index].complexity)}"
        console.print(header)

        for v in by_query.get(index, []):
            colour = _SEVERITY_COLOURS[v.severity]
            icon = _SEVERITY_ICONS[v.severity]
            label = _SEVERITY_LABELS[v.severity]
            console.print(
                f"  [{colour}]{icon} {label:<5}[/{colour}] [bold]\\[{v.rule_id}][/bold] "
                f"{escape(v.rule_name)}: {escape(v.message)}"
            )
            if v.suggestion:
                console.print(f"      [dim]→ {escape(v.suggestion)}[/dim]")

    if not report.violations:
        console.print("\n  [green]✓ No issues found.[/green]")

    console.print(
        f"\n── {report.error_count} error(s), "
        f"{report.warning_count} warning(s), "
        f"{report.info_count} info(s)  "
        f"({report.queries_count} queries, {report.rules_count} rules)"
    )
    if analysis is not None:
        console.print("\n[bold]=== SQL Query Analysis ===[/bold]\n")
        console.print(escape(analysis))
    return _render(console)


def format_queries_summary(queries: Sequence[Query], colored: bool = False, verbose: bool = False) -> str:
    """Render the per-query extraction summary (``SQL Queries:`` block)."""
    console = _console(colored)
    console.print("SQL Queries:\n")

    for i, query in enumerate(queries):
        console.print(f"[bold cyan]Query #{i + 1} ({query.query_type.value}):[/bold cyan]")
        console.print(escape(query.raw))

        if query.cte_names:
            console.print(f"CTEs: {escape(', '.join(query.cte_names))}")
        console.print(f"Tables: {escape(', '.join(query.tables))}")

        for label, cols in (
            ("WHERE columns", query.where_cols),
            ("JOIN columns", query.join_cols),
            ("ORDER BY columns", query.order_cols),
            ("GROUP BY columns", query.group_cols),
            ("HAVING columns", query.having_cols),
        ):
            if cols:
                console.print(f"{label}: {escape(', '.join(cols))}")

        if query.window_funcs:
            console.print(f"Window functions: {', '.join(w.name for w in query.window_funcs)}")
        if query.limit is not None:
            console.print(f"LIMIT: {query.limit}")
        if query.offset is not None:
            console.print(f"OFFSET: {query.offset}")
        if query.has_distinct:
            console.print("Has DISTINCT: yes")
        if query.has_union:
            console.print("Has UNION/INTERSECT/EXCEPT: yes")
        if query.has_subquery:
            console.print("Has subquery: yes")
        if verbose:
            console.print(f"Complexity: {_complexity_markup(query.complexity)}")

        console.print()

    return _render(console)
