"""sql-analyzer CLI application -- Typer-based front-end for the analyzer engine.

Reports go to *stdout* in the requested format; human-readable
decoration and errors go to *stderr* via Rich so that pipelines can
compose cleanly.
"""

from __future__ import annotations

import typer
from pydantic import ValidationError
from rich.console import Console

from analyzer_cli.commands.analyze import analyze_command
from analyzer_cli.commands.rules import rules_command
from analyzer_cli.display import display_error
from analyzer_engine.config import load_settings
from analyzer_engine.logging_config import configure_logging
from analyzer_engine.output import ExitCode

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = typer.Typer(
    name="sql-analyzer",
    help="Static analysis for SQL queries: performance, style, security and schema checks.",
    no_args_is_help=True,
)
console = Console(stderr=True)

app.command(name="analyze")(analyze_command)
app.command(name="rules")(rules_command)


# ---------------------------------------------------------------------------
# Callback -- global options
# ---------------------------------------------------------------------------


@app.callback()
def _global_options(
    ctx: typer.Context,
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).  Defaults to SQL_ANALYZER_LOG_LEVEL or WARNING.",
    ),
    structured_logging: bool | None = typer.Option(
        None,
        "--structured-logging/--plain-logging",
        help="Emit log records as JSON lines.",
    ),
) -> None:
    """Global options applied to every command."""
    overrides: dict[str, object] = {}
    if log_level is not None:
        overrides["log_level"] = log_level
    if structured_logging is not None:
        overrides["structured_logging"] = structured_logging

    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        display_error(console, "Invalid settings", exc)
        raise typer.Exit(code=ExitCode.FAILURE) from exc

    configure_logging(settings.log_level, structured=settings.structured_logging)
    ctx.obj = settings
