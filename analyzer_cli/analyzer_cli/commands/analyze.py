"""``sql-analyzer analyze`` -- run static analysis over a file of SQL queries.

The report goes to stdout in the selected format; errors go to stderr.
Exit codes: 0 clean or info only, 1 warnings, 2 errors, 3 the input,
schema or configuration could not be read.

With ``--provider`` (or ``[llm] enabled = true``) the queries are also sent
to an LLM for review and its answer is appended to the report.  A failed
review is reported on stderr and leaves the exit code unchanged.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import typer
from pydantic import SecretStr
from rich.console import Console

from analyzer_cli.display import display_error
from analyzer_engine.cache import QueryCache, parse_queries_cached
from analyzer_engine.config import (
    AnalyzerConfig,
    LlmConfig,
    LlmProvider,
    RetryConfig,
    Settings,
    load_config,
    load_settings,
)
from analyzer_engine.errors import AnalyzerError, LlmError
from analyzer_engine.llm import LlmClient, build_review_prompt, has_llm_access
from analyzer_engine.models.query import Query
from analyzer_engine.models.schema import Schema
from analyzer_engine.output import (
    ExitCode,
    OutputFormat,
    calculate_exit_code,
    format_report,
)
from analyzer_engine.parser.dialect import SqlDialect
from analyzer_engine.rules.runner import RuleRunner
from analyzer_engine.schema import parse_schema

logger = logging.getLogger(__name__)

console = Console(stderr=True)

STDIN_MARKER = "-"
DRY_RUN_HEADER = "=== DRY RUN - Would send to LLM ==="


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _read_source(path: str, label: str) -> str:
    """Read *path*, or stdin when it is ``-``, exiting with code 3 on failure."""
    try:
        if path == STDIN_MARKER:
            return sys.stdin.read()
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        source = "stdin" if path == STDIN_MARKER else path
        console.print(f"[red]Failed to read {label} from {source}: {exc}[/red]")
        raise typer.Exit(code=ExitCode.FAILURE) from exc


def _effective_limits(settings: Settings, config: AnalyzerConfig) -> tuple[int | None, int]:
    """Environment settings win over the config file when explicitly set."""
    max_workers = settings.max_workers if settings.max_workers is not None else config.max_workers
    cache_size = settings.cache_size if "cache_size" in settings.model_fields_set else config.cache_size
    return max_workers, cache_size


def _resolve_llm_config(
    config: LlmConfig,
    settings: Settings,
    provider: LlmProvider | None,
    api_key: str | None,
    model: str | None,
    ollama_url: str | None,
) -> LlmConfig:
    """Layer command-line options over the environment over the ``[llm]`` table.

    Choosing a provider on the command line turns the review on.
    """
    update: dict[str, Any] = {}
    if provider is not None:
        update["enabled"] = True
        update["provider"] = provider
    if api_key:
        update["api_key"] = SecretStr(api_key)
    elif settings.llm_api_key is not None:
        update["api_key"] = settings.llm_api_key
    if model:
        update["model"] = model
    if ollama_url:
        update["ollama_url"] = ollama_url
    return config.model_copy(update=update)


def _llm_review(
    llm_config: LlmConfig,
    retry: RetryConfig,
    queries: Sequence[Query],
    schema: Schema | None,
) -> str | None:
    """Run the LLM review, returning ``None`` when it cannot run or fails."""
    if not has_llm_access(llm_config):
        console.print(
            f"[yellow]Note: set LLM_API_KEY or pass --api-key to run the "
            f"{llm_config.provider.value} review.[/yellow]"
        )
        return None
    try:
        with LlmClient(llm_config, retry) as client:
            return client.review(queries, schema)
    except LlmError as exc:
        logger.warning("LLM review failed: %s", exc)
        display_error(console, "LLM review failed", exc)
        return None


def _write_stdout(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else text + "\n")


# ---------------------------------------------------------------------------
# Analyze command
# ---------------------------------------------------------------------------


def analyze_command(
    ctx: typer.Context,
    queries_path: str = typer.Option(
        ...,
        "--queries",
        "-q",
        help="File with SQL queries to analyze, or '-' for stdin.",
    ),
    schema_path: Path | None = typer.Option(
        None,
        "--schema",
        "-s",
        help="File with CREATE TABLE / CREATE INDEX statements. Enables schema-aware rules.",
    ),
    dialect: SqlDialect = typer.Option(
        SqlDialect.GENERIC,
        "--dialect",
        "-d",
        case_sensitive=False,
        help="SQL dialect used to parse the schema and queries.",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TEXT,
        "--format",
        "-f",
        case_sensitive=False,
        help="Output format: text, json, yaml, or sarif.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a .sql-analyzer.toml config file.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Include per-query complexity in the report.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable coloured text output.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the prompt the LLM review would send instead of the report.",
    ),
    provider: LlmProvider | None = typer.Option(
        None,
        "--provider",
        "-p",
        case_sensitive=False,
        help="Run an LLM review with this provider: openai, anthropic, or ollama.",
    ),
    api_key: str | None = typer.Option(
        None,
        "--api-key",
        "-a",
        envvar="LLM_API_KEY",
        show_envvar=True,
        help="API key for the openai and anthropic providers.",
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="LLM model name. Defaults to the provider's standard model.",
    ),
    ollama_url: str | None = typer.Option(
        None,
        "--ollama-url",
        help="Base URL of the Ollama server.",
    ),
    information_uri: str | None = typer.Option(
        None,
        "--information-uri",
        help="Project URL recorded as the tool's informationUri in SARIF output.",
    ),
) -> None:
    """Analyze SQL queries for performance, style and security problems.

    Examples::

        sql-analyzer analyze -q queries.sql
        sql-analyzer analyze -s schema.sql -q queries.sql --format sarif
        cat queries.sql | sql-analyzer analyze -q - --dialect postgresql
        sql-analyzer analyze -s schema.sql -q queries.sql --provider ollama
    """
    settings = ctx.obj if isinstance(ctx.obj, Settings) else load_settings()

    try:
        config = load_config(config_path or settings.config_path)
    except AnalyzerError as exc:
        display_error(console, "Configuration error", exc)
        raise typer.Exit(code=ExitCode.FAILURE) from exc

    queries_sql = _read_source(queries_path, "queries")
    schema_sql = _read_source(str(schema_path), "schema") if schema_path is not None else None

    max_workers, cache_size = _effective_limits(settings, config)
    cache = QueryCache(max_entries=cache_size)

    schema: Schema | None = None
    try:
        if schema_sql is not None:
            schema = parse_schema(schema_sql, dialect)
        queries = parse_queries_cached(queries_sql, dialect, cache)
    except AnalyzerError as exc:
        display_error(console, "Parse error", exc)
        raise typer.Exit(code=ExitCode.FAILURE) from exc

    if schema is not None:
        runner = RuleRunner.with_schema(schema, config=config, max_workers=max_workers)
    else:
        runner = RuleRunner(config=config, max_workers=max_workers)

    report = runner.analyze(queries)
    exit_code = calculate_exit_code(report)

    if dry_run:
        _write_stdout(f"{DRY_RUN_HEADER}\n\n{build_review_prompt(queries, schema)}")
        raise typer.Exit(code=exit_code)

    llm_config = _resolve_llm_config(config.llm, settings, provider, api_key, model, ollama_url)
    analysis = _llm_review(llm_config, config.retry, queries, schema) if llm_config.enabled else None

    artifact_uri = None if queries_path == STDIN_MARKER else queries_path
    _write_stdout(
        format_report(
            report,
            queries,
            output_format,
            colored=not no_color and sys.stdout.isatty(),
            verbose=verbose,
            artifact_uri=artifact_uri,
            information_uri=information_uri,
            analysis=analysis,
        )
    )
    logger.debug("Query cache stats: %s", cache.stats())
    raise typer.Exit(code=exit_code)
