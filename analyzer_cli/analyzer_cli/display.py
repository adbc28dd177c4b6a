"""Rich output helpers for the sql-analyzer CLI.

Decoration goes to a :class:`rich.console.Console` bound to *stderr*;
reports and other machine-readable output are written to *stdout* by the
commands themselves.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from analyzer_engine.models.report import RuleInfo, Severity

_SEVERITY_COLOURS: dict[Severity, str] = {
    Severity.ERROR: "red",
    Severity.WARNING: "yellow",
    Severity.INFO: "blue",
}


def display_rule_catalogue(console: Console, infos: Sequence[RuleInfo]) -> None:
    """Render the rule catalogue as a table.

    Parameters
    ----------
    console:
        Rich console to write to.
    infos:
        Rule metadata, in catalogue order.
    """
    table = Table(title="SQL Analyzer Rules", show_lines=False)
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Name")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Category", no_wrap=True)

    for info in infos:
        colour = _SEVERITY_COLOURS[info.severity]
        table.add_row(
            info.id,
            info.name,
            f"[{colour}]{info.severity.value}[/{colour}]",
            info.category.value,
        )

    console.print(table)
    console.print(f"\n{len(infos)} rule(s)")


def display_error(console: Console, title: str, exc: BaseException) -> None:
    """Render a failure as a red panel."""
    console.print(
        Panel(
            escape(str(exc)),
            title=f"[bold red]{escape(title)}[/bold red]",
            border_style="red",
            expand=False,
        )
    )
