"""Table-name helpers shared by the walker and the statement classifier."""

from __future__ import annotations

from sqlglot import exp

DERIVED_TABLE_PREFIX = "(subquery) AS "


def table_name(table: exp.Table) -> str:
    """Return ``catalog.db.name`` for *table*, omitting empty parts."""
    parts = [p for p in (table.catalog, table.db, table.name) if p]
    return ".".join(parts)


def derived_table_marker(alias: str) -> str:
    """Synthesized table label for an aliased derived table."""
    return f"{DERIVED_TABLE_PREFIX}{alias}"


def target_table(node: exp.Expression | None) -> str | None:
    """Resolve a DML target (possibly ``table(col, ...)``) to its name."""
    if isinstance(node, exp.Schema):
        node = node.this
    if isinstance(node, exp.Table) and not isinstance(node.this, exp.Func):
        return table_name(node) or None
    return None
