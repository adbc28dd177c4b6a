"""Normalized query model produced by the statement classifier.

A :class:`Query` is the flat, clause-oriented view of one SQL statement
that every rule inspects.  Column and table collections keep first-seen
order and never contain duplicates, so rule messages are reproducible.
"""

from __future__ import annotations

from enum import Enum
from functools import cached_property

from pydantic import BaseModel, Field


class QueryType(str, Enum):
    """Statement kind recognised by the classifier."""

    SELECT = "Select"
    INSERT = "Insert"
    UPDATE = "Update"
    DELETE = "Delete"
    TRUNCATE = "Truncate"
    DROP = "Drop"
    OTHER = "Other"

    def __str__(self) -> str:
        return self.value


class ComplexityLevel(str, Enum):
    """Coarse bucket for a complexity score."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class WindowFunction(BaseModel):
    """A windowed function call found in a projection."""

    name: str = Field(..., description="Function name as rendered by the parser (e.g. ROW_NUMBER).")
    partition_cols: list[str] = Field(
        default_factory=list,
        description="Column names from the PARTITION BY clause.",
    )
    order_cols: list[str] = Field(
        default_factory=list,
        description="Column names from the window ORDER BY clause.",
    )


class QueryComplexity(BaseModel):
    """Weighted complexity score derived from a :class:`Query`."""

    score: int = Field(default=0, description="Weighted total.")
    table_count: int = Field(default=0, description="Number of referenced tables.")
    join_count: int = Field(default=0, description="Number of JOIN condition columns.")
    subquery_count: int = Field(default=0, description="1 when the query contains a subquery.")
    condition_count: int = Field(default=0, description="WHERE plus HAVING columns.")
    aggregation_count: int = Field(default=0, description="Number of GROUP BY columns.")
    window_count: int = Field(default=0, description="Number of window functions.")

    @property
    def level(self) -> ComplexityLevel:
        if self.score < 5:
            return ComplexityLevel.LOW
        if self.score < 15:
            return ComplexityLevel.MEDIUM
        return ComplexityLevel.HIGH

    @classmethod
    def from_query(cls, query: Query) -> QueryComplexity:
        """Compute the complexity of *query*.

        ``score = tables + 3*joins + conditions + 5*windows + 4*subquery
        + 2*groups + 3*union + distinct``
        """
        table_count = len(query.tables)
        join_count = len(query.join_cols)
        condition_count = len(query.where_cols) + len(query.having_cols)
        window_count = len(query.window_funcs)
        subquery_count = 1 if query.has_subquery else 0
        aggregation_count = len(query.group_cols)

        score = (
            table_count
            + join_count * 3
            + condition_count
            + window_count * 5
            + subquery_count * 4
            + aggregation_count * 2
            + (3 if query.has_union else 0)
            + (1 if query.has_distinct else 0)
        )

        return cls(
            score=score,
            table_count=table_count,
            join_count=join_count,
            subquery_count=subquery_count,
            condition_count=condition_count,
            aggregation_count=aggregation_count,
            window_count=window_count,
        )


class Query(BaseModel):
    """One parsed SQL statement in normalized form."""

    raw: str = Field(..., description="Canonical SQL re-rendered by the parser.")
    query_type: QueryType = Field(default=QueryType.OTHER, description="Statement kind.")
    tables: list[str] = Field(
        default_factory=list,
        description="Tables and derived-table markers, in first-seen order.",
    )
    cte_names: list[str] = Field(default_factory=list, description="Names defined in the WITH clause.")
    object_kind: str | None = Field(
        default=None,
        description="Object kind for DROP statements (TABLE, VIEW, INDEX, ...).",
    )
    where_cols: list[str] = Field(default_factory=list, description="Columns referenced in WHERE.")
    join_cols: list[str] = Field(default_factory=list, description="Columns referenced in JOIN ... ON.")
    order_cols: list[str] = Field(default_factory=list, description="Columns in the top-level ORDER BY.")
    group_cols: list[str] = Field(default_factory=list, description="Columns in GROUP BY.")
    having_cols: list[str] = Field(default_factory=list, description="Columns referenced in HAVING.")
    window_funcs: list[WindowFunction] = Field(
        default_factory=list,
        description="Window function calls found in projections.",
    )
    limit: int | None = Field(default=None, description="Literal LIMIT value, if any.")
    offset: int | None = Field(default=None, description="Literal OFFSET value, if any.")
    has_union: bool = Field(default=False, description="True for UNION / INTERSECT / EXCEPT.")
    has_distinct: bool = Field(default=False, description="True when any SELECT uses DISTINCT.")
    has_subquery: bool = Field(default=False, description="True when a subquery appears in WHERE or a projection.")

    @cached_property
    def complexity(self) -> QueryComplexity:
        """Complexity score, computed on first access."""
        return QueryComplexity.from_query(self)
