"""Build a :class:`Schema` from DDL text.

Only ``CREATE TABLE`` and ``CREATE INDEX`` statements contribute.
``CREATE INDEX`` attaches to a table defined earlier in the same input;
an index on an unknown table is ignored.  Every other statement (INSERT,
views, grants, ...) is skipped.  ClickHouse DDL is preprocessed first
and the stripped clauses are kept on :attr:`Schema.clickhouse`.
"""

from __future__ import annotations

import logging

import sqlglot
from sqlglot import exp
from sqlglot.errors import ErrorLevel, SqlglotError

from analyzer_engine.errors import SchemaParseError
from analyzer_engine.extract.tables import table_name
from analyzer_engine.models.schema import ColumnInfo, IndexInfo, Schema, TableInfo
from analyzer_engine.parser.clickhouse import preprocess
from analyzer_engine.parser.dialect import SqlDialect

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_schema(sql: str, dialect: SqlDialect = SqlDialect.GENERIC) -> Schema:
    """Parse DDL into a :class:`Schema`.

    Parameters
    ----------
    sql:
        DDL statements separated by ``;``.  Empty input yields an empty schema.
    dialect:
        Dialect of the DDL.

    Raises
    ------
    SchemaParseError
        If the DDL cannot be parsed, including a ``CREATE`` statement that
        sqlglot could only treat as an opaque command.
    """
    prepared = preprocess(sql, dialect)
    read = dialect.sqlglot_name

    try:
        statements = sqlglot.parse(prepared.sql, read=read, error_level=ErrorLevel.RAISE)
    except SqlglotError as exc:
        raise SchemaParseError.from_sqlglot(exc) from exc

    tables: dict[str, TableInfo] = {}
    for statement in statements:
        if statement is None:
            continue
        if isinstance(statement, exp.Command) and str(statement.this).upper() == "CREATE":
            raise SchemaParseError(f"Unsupported CREATE statement: {statement.sql(dialect=read)}")
        if not isinstance(statement, exp.Create):
            continue

        kind = (statement.args.get("kind") or "").upper()
        if kind == "TABLE":
            table = _table_from_create(statement, read)
            if table is not None:
                tables[table.name] = table
        elif kind == "INDEX":
            _attach_index(statement, tables)

    logger.debug("Parsed schema with %d table(s)", len(tables))
    metadata = None if prepared.metadata.is_empty else prepared.metadata
    return Schema(tables=tables, clickhouse=metadata)


# ---------------------------------------------------------------------------
# CREATE TABLE
# ---------------------------------------------------------------------------


def _table_from_create(create: exp.Create, dialect: str | None) -> TableInfo | None:
    target = create.this
    definitions: list[exp.Expression] = []
    if isinstance(target, exp.Schema):
        definitions = list(target.expressions)
        target = target.this
    if not isinstance(target, exp.Table):
        return None

    name = table_name(target)
    table_primary = _table_primary_key(definitions)

    columns: list[ColumnInfo] = []
    indexes: list[IndexInfo] = []
    for definition in definitions:
        if isinstance(definition, exp.ColumnDef):
            columns.append(_column_info(definition, dialect, table_primary))
        elif isinstance(definition, exp.IndexColumnConstraint):
            indexes.append(
                IndexInfo(
                    name=definition.name,
                    columns=tuple(_index_columns(definition.expressions)),
                    is_unique=str(definition.args.get("kind") or "").upper() == "UNIQUE",
                )
            )

    return TableInfo(name=name, columns=tuple(columns), indexes=tuple(indexes))


def _column_info(
    definition: exp.ColumnDef,
    dialect: str | None,
    table_primary: set[str],
) -> ColumnInfo:
    kind = definition.args.get("kind")
    data_type = kind.sql(dialect=dialect) if isinstance(kind, exp.Expression) else ""

    is_primary = definition.name.lower() in table_primary
    is_nullable = True
    for constraint in definition.args.get("constraints") or []:
        if not isinstance(constraint, exp.ColumnConstraint):
            continue
        constraint_kind = constraint.args.get("kind")
        if isinstance(constraint_kind, exp.PrimaryKeyColumnConstraint):
            is_primary = True
        elif isinstance(constraint_kind, exp.NotNullColumnConstraint):
            if not constraint_kind.args.get("allow_null"):
                is_nullable = False

    return ColumnInfo(
        name=definition.name,
        data_type=data_type,
        is_nullable=is_nullable,
        is_primary=is_primary,
    )


def _table_primary_key(definitions: list[exp.Expression]) -> set[str]:
    """Columns named by a table-level ``PRIMARY KEY (...)`` clause."""
    names: set[str] = set()
    for definition in definitions:
        if isinstance(definition, exp.PrimaryKey):
            names.update(c.lower() for c in _index_columns(definition.expressions))
    return names


# ---------------------------------------------------------------------------
# CREATE INDEX
# ---------------------------------------------------------------------------


def _attach_index(create: exp.Create, tables: dict[str, TableInfo]) -> None:
    index = create.this
    if not isinstance(index, exp.Index):
        return
    table = index.args.get("table")
    if not isinstance(table, exp.Table):
        return

    name = table_name(table)
    existing = tables.get(name)
    if existing is None:
        logger.debug("Ignoring index %s on unknown table %s", index.name, name)
        return

    params = index.args.get("params")
    column_nodes = index.args.get("columns")
    if not column_nodes and params is not None:
        column_nodes = params.args.get("columns")
    is_unique = bool(create.args.get("unique") or index.args.get("unique"))

    tables[name] = existing.with_index(
        IndexInfo(
            name=index.name,
            columns=tuple(_index_columns(column_nodes or [])),
            is_unique=is_unique,
        )
    )


def _index_columns(nodes: list[exp.Expression]) -> list[str]:
    columns: list[str] = []
    for node in nodes:
        if isinstance(node, exp.Ordered):
            node = node.this
        if isinstance(node, (exp.Column, exp.Identifier)):
            columns.append(node.name)
        elif isinstance(node, exp.Expression):
            # Functional index parts such as lower(email): keep every column they use.
            columns.extend(col.name for col in node.find_all(exp.Column))
    return columns
