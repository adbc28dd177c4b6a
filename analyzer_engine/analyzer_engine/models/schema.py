"""Database schema model built from DDL.

Every type here is immutable.  A :class:`Schema` is built once per run
and shared read-only by the schema-aware rules, including across the
rule runner's worker threads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """A single column of a table."""

    name: str
    data_type: str
    is_nullable: bool = True
    is_primary: bool = False


@dataclass(frozen=True, slots=True)
class IndexInfo:
    """An index declared with CREATE INDEX or an inline INDEX/KEY clause."""

    name: str
    columns: tuple[str, ...] = ()
    is_unique: bool = False


@dataclass(frozen=True, slots=True)
class TableInfo:
    """A table with its columns and indexes."""

    name: str
    columns: tuple[ColumnInfo, ...] = ()
    indexes: tuple[IndexInfo, ...] = ()

    def with_index(self, index: IndexInfo) -> TableInfo:
        """Return a copy with *index* appended."""
        return TableInfo(name=self.name, columns=self.columns, indexes=self.indexes + (index,))


@dataclass(frozen=True, slots=True)
class ClickHouseMetadata:
    """Vendor-specific clauses stripped from ClickHouse DDL before parsing."""

    codecs: Mapping[str, str] = field(default_factory=dict)
    ttl_expressions: tuple[str, ...] = ()
    settings: Mapping[str, str] = field(default_factory=dict)
    partition_by: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.codecs or self.ttl_expressions or self.settings or self.partition_by)


@dataclass(frozen=True)
class Schema:
    """Tables keyed by name, iterated in sorted name order.

    Lookups used by the schema-aware rules (column presence, index
    coverage) are case-insensitive.  Primary keys are not indexes.
    """

    tables: Mapping[str, TableInfo] = field(default_factory=dict)
    clickhouse: ClickHouseMetadata | None = None
    _column_names: frozenset[str] = field(init=False, repr=False, compare=False)
    _indexed_columns: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = {name: self.tables[name] for name in sorted(self.tables)}
        object.__setattr__(self, "tables", MappingProxyType(ordered))
        object.__setattr__(
            self,
            "_column_names",
            frozenset(c.name.lower() for t in ordered.values() for c in t.columns),
        )
        object.__setattr__(
            self,
            "_indexed_columns",
            frozenset(
                col.lower() for t in ordered.values() for idx in t.indexes for col in idx.columns
            ),
        )

    def has_column(self, name: str) -> bool:
        """Return True if any table has a column called *name*."""
        return name.lower() in self._column_names

    def is_indexed(self, name: str) -> bool:
        """Return True if any index of any table covers *name*."""
        return name.lower() in self._indexed_columns

    def to_summary(self) -> str:
        """Render a plain-text description of every table."""
        lines = ["Database Schema:", ""]
        for table in self.tables.values():
            lines.append(f"Table: {table.name}")
            lines.append("Columns:")
            for col in table.columns:
                nullable = "NULL" if col.is_nullable else "NOT NULL"
                primary = " PRIMARY KEY" if col.is_primary else ""
                lines.append(f"  - {col.name} {col.data_type} {nullable}{primary}")
            if table.indexes:
                lines.append("Indexes:")
                for idx in table.indexes:
                    unique = "UNIQUE " if idx.is_unique else ""
                    lines.append(f"  - {unique}INDEX {idx.name} ON ({', '.join(idx.columns)})")
            lines.append("")
        return "\n".join(lines) + "\n"
