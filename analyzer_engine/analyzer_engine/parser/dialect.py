"""Supported SQL dialects and their sqlglot names."""

from __future__ import annotations

from enum import Enum


class SqlDialect(str, Enum):
    """SQL dialect accepted by the query and schema parsers."""

    GENERIC = "generic"
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"
    CLICKHOUSE = "clickhouse"

    @property
    def sqlglot_name(self) -> str | None:
        """The ``read``/``dialect`` argument to pass to sqlglot."""
        return _SQLGLOT_NAMES[self]


_SQLGLOT_NAMES: dict[SqlDialect, str | None] = {
    SqlDialect.GENERIC: None,
    SqlDialect.MYSQL: "mysql",
    SqlDialect.POSTGRESQL: "postgres",
    SqlDialect.SQLITE: "sqlite",
    SqlDialect.CLICKHOUSE: "clickhouse",
}
