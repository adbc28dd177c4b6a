"""Statement classifier: one sqlglot statement in, one :class:`Query` out.

Dispatch is by statement kind.  SELECT-shaped statements (including set
operations and parenthesized queries) go through the set-expression
walker; DML and DDL statements record only the tables and WHERE columns
the rules need.  Anything unrecognised becomes a ``QueryType.OTHER``
record carrying just the rendered SQL.  The classifier never raises.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlglot import exp

from analyzer_engine.extract.context import ExtractionContext, OrderedSet
from analyzer_engine.extract.expressions import column_name, extract_columns
from analyzer_engine.extract.set_expr import resolve_table_factor, walk_set_expression
from analyzer_engine.extract.tables import table_name, target_table
from analyzer_engine.models.query import Query, QueryType

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def classify_statement(statement: exp.Expression, dialect: str | None = None) -> Query:
    """Build the normalized :class:`Query` for *statement*.

    Parameters
    ----------
    statement:
        A parsed sqlglot statement.
    dialect:
        sqlglot dialect name used to render :attr:`Query.raw`.
    """
    raw = statement.sql(dialect=dialect)

    if isinstance(statement, exp.Query):
        return _classify_select(statement, raw)
    if isinstance(statement, exp.Insert):
        return _classify_insert(statement, raw)
    if isinstance(statement, exp.Update):
        return _classify_update(statement, raw)
    if isinstance(statement, exp.Delete):
        return _classify_delete(statement, raw)
    if isinstance(statement, exp.TruncateTable):
        return _classify_truncate(statement, raw)
    if isinstance(statement, exp.Drop):
        return _classify_drop(statement, raw)
    if isinstance(statement, exp.Command):
        return _classify_command(statement, raw)

    logger.debug("Unclassified statement type %s", type(statement).__name__)
    return Query(raw=raw, query_type=QueryType.OTHER)


# ---------------------------------------------------------------------------
# SELECT
# ---------------------------------------------------------------------------


def _classify_select(statement: exp.Query, raw: str) -> Query:
    ctx = ExtractionContext()
    walk_set_expression(statement, ctx)

    with_ = statement.args.get("with")
    cte_names = [cte.alias for cte in with_.expressions if cte.alias] if with_ is not None else []

    order_cols = OrderedSet()
    order = statement.args.get("order")
    if order is not None:
        for item in order.expressions:
            order_cols.update(extract_columns(item))

    limit, offset = _limit_offset(statement)

    return Query(
        raw=raw,
        query_type=QueryType.SELECT,
        tables=ctx.tables.to_list(),
        cte_names=cte_names,
        where_cols=ctx.where_cols.to_list(),
        join_cols=ctx.join_cols.to_list(),
        order_cols=order_cols.to_list(),
        group_cols=ctx.group_cols.to_list(),
        having_cols=ctx.having_cols.to_list(),
        window_funcs=ctx.window_funcs,
        limit=limit,
        offset=offset,
        has_union=ctx.has_union,
        has_distinct=ctx.has_distinct,
        has_subquery=ctx.has_subquery,
    )


def _limit_offset(statement: exp.Expression) -> tuple[int | None, int | None]:
    limit: int | None = None
    offset: int | None = None

    limit_node = statement.args.get("limit")
    if isinstance(limit_node, exp.Limit):
        limit = _literal_int(limit_node.expression)
        # MySQL ``LIMIT offset, count``.
        offset = _literal_int(limit_node.args.get("offset"))
    elif isinstance(limit_node, exp.Fetch):
        limit = _literal_int(limit_node.args.get("count"))

    offset_node = statement.args.get("offset")
    if isinstance(offset_node, exp.Offset):
        offset = _literal_int(offset_node.expression)

    return limit, offset


def _literal_int(node: Any) -> int | None:
    """Return a non-negative integer literal's value; anything else is ``None``."""
    if not isinstance(node, exp.Literal) or node.is_string:
        return None
    try:
        value = int(node.this)
    except ValueError:
        return None
    return value if value >= 0 else None


# ---------------------------------------------------------------------------
# DML
# ---------------------------------------------------------------------------


def _classify_insert(statement: exp.Insert, raw: str) -> Query:
    name = target_table(statement.this)
    return Query(raw=raw, query_type=QueryType.INSERT, tables=[name] if name else [])


def _classify_update(statement: exp.Update, raw: str) -> Query:
    name = target_table(statement.this)
    where = statement.args.get("where")
    return Query(
        raw=raw,
        query_type=QueryType.UPDATE,
        tables=[name] if name else [],
        where_cols=extract_columns(where.this) if where is not None else [],
    )


def _classify_delete(statement: exp.Delete, raw: str) -> Query:
    # Tables come from the FROM clause (with its joins) and USING.  The
    # MySQL multi-table targets in ``tables`` are usually aliases.
    ctx = ExtractionContext()
    resolve_table_factor(statement.this, ctx)
    using = statement.args.get("using")
    for item in using if isinstance(using, list) else [using]:
        resolve_table_factor(item, ctx)
    tables = ctx.tables
    if not tables:
        for target in statement.args.get("tables") or []:
            name = target_table(target)
            if name:
                tables.add(name)

    where = statement.args.get("where")
    return Query(
        raw=raw,
        query_type=QueryType.DELETE,
        tables=tables.to_list(),
        where_cols=extract_columns(where.this) if where is not None else [],
    )


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------


def _classify_truncate(statement: exp.TruncateTable, raw: str) -> Query:
    tables = OrderedSet(name for name in (target_table(t) for t in statement.expressions) if name)
    return Query(raw=raw, query_type=QueryType.TRUNCATE, tables=tables.to_list())


def _classify_drop(statement: exp.Drop, raw: str) -> Query:
    names = OrderedSet()
    for node in [statement.this, *(statement.args.get("expressions") or [])]:
        if isinstance(node, exp.Table):
            name = table_name(node)
        elif isinstance(node, exp.Expression):
            name = column_name(node) or node.name
        else:
            name = ""
        if name:
            names.add(name)

    kind = statement.args.get("kind")
    return Query(
        raw=raw,
        query_type=QueryType.DROP,
        tables=names.to_list(),
        object_kind=str(kind).upper() if kind else None,
    )


def _classify_command(statement: exp.Command, raw: str) -> Query:
    """Handle TRUNCATE / DROP forms the grammar only parsed as raw commands."""
    keyword = str(statement.this or "").upper()
    rest = statement.args.get("expression") or ""
    if isinstance(rest, exp.Expression):
        rest = rest.name
    rest = str(rest).strip()
    words = rest.split()

    if keyword == "TRUNCATE":
        if words and words[0].upper() == "TABLE":
            rest = rest.split(None, 1)[1] if len(words) > 1 else ""
        return Query(raw=raw, query_type=QueryType.TRUNCATE, tables=_command_names(rest))

    if keyword == "DROP" and words:
        kind = words[0].upper()
        remainder = rest.split(None, 1)[1] if len(words) > 1 else ""
        if remainder.upper().startswith("IF EXISTS"):
            remainder = remainder[len("IF EXISTS") :]
        return Query(
            raw=raw,
            query_type=QueryType.DROP,
            tables=_command_names(remainder),
            object_kind=kind,
        )

    return Query(raw=raw, query_type=QueryType.OTHER)


def _command_names(text: str) -> list[str]:
    names = OrderedSet()
    for part in text.split(","):
        tokens = part.split()
        if tokens:
            names.add(tokens[0].strip(";`\"[]"))
    return names.to_list()
