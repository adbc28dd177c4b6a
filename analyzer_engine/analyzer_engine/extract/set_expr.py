"""Walker for query bodies: SELECT, set operations and nested queries.

The walker fills an :class:`ExtractionContext`.  Set operations merge
both sides into the same context.  A derived table in FROM is walked
with a child context: its tables are shared with the parent, its
clause columns and flags are not.
"""

from __future__ import annotations

from sqlglot import exp

from analyzer_engine.extract.context import ExtractionContext
from analyzer_engine.extract.expressions import (
    contains_subquery,
    extract_columns,
    extract_window_functions,
)
from analyzer_engine.extract.tables import derived_table_marker, table_name

_SET_OPERATIONS = (exp.Union, exp.Intersect, exp.Except)


def walk_set_expression(node: exp.Expression | None, ctx: ExtractionContext) -> None:
    """Populate *ctx* from a query body.  Unsupported bodies are ignored."""
    if isinstance(node, exp.Select):
        _walk_select(node, ctx)
    elif isinstance(node, _SET_OPERATIONS):
        ctx.has_union = True
        walk_set_expression(node.this, ctx)
        walk_set_expression(node.expression, ctx)
    elif isinstance(node, exp.Subquery):
        # A parenthesized query; its own ORDER BY stays local to it.
        walk_set_expression(node.this, ctx)


def _walk_select(select: exp.Select, ctx: ExtractionContext) -> None:
    if select.args.get("distinct") is not None:
        ctx.has_distinct = True

    for item in select.expressions:
        extract_window_functions(item, ctx.window_funcs)
        if contains_subquery(item):
            ctx.has_subquery = True

    from_ = select.args.get("from")
    if from_ is not None:
        resolve_table_factor(from_.this, ctx)

    for join in select.args.get("joins") or []:
        resolve_table_factor(join.this, ctx)
        if _has_join_condition(join):
            ctx.join_cols.update(extract_columns(join.args.get("on")))

    where = select.args.get("where")
    if where is not None:
        ctx.where_cols.update(extract_columns(where.this))
        if contains_subquery(where.this):
            ctx.has_subquery = True

    group = select.args.get("group")
    if group is not None:
        for item in group.expressions:
            ctx.group_cols.update(extract_columns(item))

    having = select.args.get("having")
    if having is not None:
        ctx.having_cols.update(extract_columns(having.this))


def _has_join_condition(join: exp.Join) -> bool:
    # CROSS and NATURAL joins never contribute join columns.
    if join.kind == "CROSS" or join.method == "NATURAL":
        return False
    return join.args.get("on") is not None


def resolve_table_factor(node: exp.Expression | None, ctx: ExtractionContext) -> None:
    """Record the relation(s) named by one FROM / JOIN item."""
    if isinstance(node, exp.Table):
        if isinstance(node.this, exp.Func):
            return
        name = table_name(node)
        if name:
            ctx.tables.add(name)
        for join in node.args.get("joins") or []:
            resolve_table_factor(join.this, ctx)
    elif isinstance(node, exp.Subquery):
        if isinstance(node.this, exp.Query):
            alias = node.alias
            if alias:
                ctx.tables.add(derived_table_marker(alias))
            walk_set_expression(node.this, ctx.child())
        else:
            # Parenthesized join tree: (b JOIN c ON ...)
            resolve_table_factor(node.this, ctx)
        for join in node.args.get("joins") or []:
            resolve_table_factor(join.this, ctx)
    elif isinstance(node, exp.Paren):
        resolve_table_factor(node.this, ctx)
    # Table functions, UNNEST, LATERAL and VALUES are not modelled.
