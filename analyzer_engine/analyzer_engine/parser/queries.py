"""Parse SQL text into normalized :class:`Query` records.

All grammar parsing is delegated to sqlglot.  A syntax error anywhere in
the input fails the whole batch with a :class:`QueryParseError`; there
is no partial result.
"""

from __future__ import annotations

import logging

import sqlglot
from sqlglot.errors import ErrorLevel, SqlglotError

from analyzer_engine.errors import QueryParseError
from analyzer_engine.extract.classifier import classify_statement
from analyzer_engine.models.query import Query
from analyzer_engine.parser.dialect import SqlDialect

logger = logging.getLogger(__name__)


def parse_queries(sql: str, dialect: SqlDialect = SqlDialect.GENERIC) -> list[Query]:
    """Parse every statement in *sql* and classify it.

    Parameters
    ----------
    sql:
        One or more SQL statements separated by ``;``.
    dialect:
        Dialect used both to parse and to render :attr:`Query.raw`.

    Returns
    -------
    list[Query]
        One record per non-empty statement, in input order.

    Raises
    ------
    QueryParseError
        If sqlglot rejects the input.  The error carries the line and
        column of the first problem when sqlglot reports them.
    """
    read = dialect.sqlglot_name
    try:
        statements = sqlglot.parse(sql, read=read, error_level=ErrorLevel.RAISE)
    except SqlglotError as exc:
        raise QueryParseError.from_sqlglot(exc) from exc

    queries = [classify_statement(stmt, read) for stmt in statements if stmt is not None]
    logger.debug("Parsed %d statement(s) as %s", len(queries), dialect.value)
    return queries
