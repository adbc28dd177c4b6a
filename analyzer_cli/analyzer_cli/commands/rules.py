"""``sql-analyzer rules`` -- list the built-in rule catalogue."""

from __future__ import annotations

import json
import sys

import typer
from rich.console import Console

from analyzer_cli.display import display_rule_catalogue
from analyzer_engine.rules.registry import list_rule_infos

console = Console(stderr=True)


def rules_command(
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit the catalogue as JSON to stdout.",
    ),
) -> None:
    """List every built-in rule with its default severity and category.

    Schema-aware rules (SCHEMA*) only run when ``analyze`` is given a
    ``--schema`` file.
    """
    infos = list_rule_infos(include_schema=True)

    if json_output:
        rows = [info.model_dump(mode="json") for info in infos]
        sys.stdout.write(json.dumps(rows, indent=2) + "\n")
        return

    display_rule_catalogue(console, infos)
