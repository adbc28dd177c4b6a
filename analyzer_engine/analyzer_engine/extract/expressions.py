"""Column, subquery and window-function extraction from expression trees.

These walkers operate on sqlglot expressions and never raise: shapes
they do not recognise contribute nothing.  Qualified references such as
``s.t.col`` contribute only their last segment.
"""

from __future__ import annotations

from sqlglot import exp

from analyzer_engine.extract.context import OrderedSet
from analyzer_engine.models.query import WindowFunction

# ---------------------------------------------------------------------------
# Column references
# ---------------------------------------------------------------------------


def column_name(node: exp.Expression) -> str | None:
    """Return the unqualified column name of *node*, or ``None``."""
    if isinstance(node, (exp.Column, exp.Dot)):
        name = node.name
        if name and name != "*":
            return name
    return None


def extract_columns(expr: exp.Expression | None) -> list[str]:
    """Return the column names referenced by *expr* in first-seen order."""
    found = OrderedSet()
    if expr is not None:
        collect_columns(expr, found)
    return found.to_list()


def collect_columns(node: exp.Expression, out: OrderedSet) -> None:
    """Add the column names referenced by *node* to *out*."""
    # Subqueries and EXISTS are opaque: their columns belong to their own scope.
    if isinstance(node, (exp.Subquery, exp.Query, exp.Exists)):
        return

    name = column_name(node)
    if name is not None:
        out.add(name)
    elif isinstance(node, exp.In):
        _collect(node.this, out)
        if node.args.get("query") is None:
            for item in node.expressions:
                _collect(item, out)
    elif isinstance(node, exp.Between):
        _collect(node.this, out)
        _collect(node.args.get("low"), out)
        _collect(node.args.get("high"), out)
    elif isinstance(node, exp.Binary):
        _collect(node.left, out)
        _collect(node.right, out)
    elif isinstance(node, (exp.Unary, exp.Alias, exp.Ordered, exp.Window)):
        _collect(node.this, out)
    elif isinstance(node, exp.Case):
        _collect(node.this, out)
        for branch in node.args.get("ifs") or []:
            _collect(branch.this, out)
            _collect(branch.args.get("true"), out)
        _collect(node.args.get("default"), out)
    elif isinstance(node, exp.Func):
        # CAST, EXTRACT, COALESCE and friends: every argument expression.
        for child in node.iter_expressions():
            _collect(child, out)
    elif isinstance(node, (exp.Distinct, exp.Tuple)):
        for item in node.expressions:
            _collect(item, out)


def _collect(node: exp.Expression | None, out: OrderedSet) -> None:
    if isinstance(node, exp.Expression):
        collect_columns(node, out)


# ---------------------------------------------------------------------------
# Subquery detection
# ---------------------------------------------------------------------------


def contains_subquery(node: exp.Expression | None) -> bool:
    """Return True if *node* holds a subquery, IN-subquery or EXISTS."""
    if not isinstance(node, exp.Expression):
        return False
    if isinstance(node, (exp.Subquery, exp.Query, exp.Exists)):
        return True
    if isinstance(node, exp.In):
        if node.args.get("query") is not None:
            return True
        return contains_subquery(node.this) or any(contains_subquery(e) for e in node.expressions)
    if isinstance(node, exp.Binary):
        return contains_subquery(node.left) or contains_subquery(node.right)
    if isinstance(node, (exp.Unary, exp.Alias)):
        return contains_subquery(node.this)
    if isinstance(node, exp.Case):
        if contains_subquery(node.this) or contains_subquery(node.args.get("default")):
            return True
        return any(
            contains_subquery(branch.this) or contains_subquery(branch.args.get("true"))
            for branch in node.args.get("ifs") or []
        )
    return False


# ---------------------------------------------------------------------------
# Window functions
# ---------------------------------------------------------------------------


def extract_window_functions(node: exp.Expression | None, out: list[WindowFunction]) -> None:
    """Append every windowed call found in *node* to *out*."""
    if not isinstance(node, exp.Expression):
        return
    if isinstance(node, exp.Window):
        out.append(_window_function(node))
        return
    if isinstance(node, (exp.Subquery, exp.Query)):
        return

    if isinstance(node, exp.Binary):
        extract_window_functions(node.left, out)
        extract_window_functions(node.right, out)
    elif isinstance(node, (exp.Unary, exp.Alias)):
        extract_window_functions(node.this, out)
    elif isinstance(node, exp.Case):
        extract_window_functions(node.this, out)
        for branch in node.args.get("ifs") or []:
            extract_window_functions(branch.this, out)
            extract_window_functions(branch.args.get("true"), out)
        extract_window_functions(node.args.get("default"), out)
    elif isinstance(node, exp.Func):
        for child in node.iter_expressions():
            extract_window_functions(child, out)


def _window_function(window: exp.Window) -> WindowFunction:
    partition_cols = [
        name for name in (column_name(p) for p in window.args.get("partition_by") or []) if name
    ]

    order_cols: list[str] = []
    order = window.args.get("order")
    if isinstance(order, exp.Order):
        for item in order.expressions:
            target = item.this if isinstance(item, exp.Ordered) else item
            name = column_name(target)
            if name:
                order_cols.append(name)

    return WindowFunction(
        name=_function_name(window.this),
        partition_cols=partition_cols,
        order_cols=order_cols,
    )


def _function_name(node: exp.Expression) -> str:
    # IGNORE NULLS / FILTER wrap the call itself.
    while not isinstance(node, exp.Func) and isinstance(node.this, exp.Expression):
        node = node.this
    if isinstance(node, exp.Anonymous):
        return node.name.upper()
    if isinstance(node, exp.Func):
        return node.sql_name()
    return node.key.upper()
