"""Built-in rule catalogue."""

from __future__ import annotations

from analyzer_engine.models.report import RuleInfo
from analyzer_engine.models.schema import Schema
from analyzer_engine.rules.base import Rule
from analyzer_engine.rules.performance import (
    DistinctWithOrderBy,
    FunctionOnColumn,
    LargeOffset,
    LeadingWildcard,
    MissingJoinCondition,
    NotInWithSubquery,
    OrInsteadOfIn,
    ScalarSubqueryInSelect,
    SelectStarWithoutLimit,
    SelectWithoutWhere,
    UnionWithoutAll,
)
from analyzer_engine.rules.schema_aware import (
    ColumnNotInSchema,
    MissingIndexOnFilterColumn,
    SchemaRule,
    SuggestIndex,
)
from analyzer_engine.rules.security import (
    DropDetected,
    MissingWhereInDelete,
    MissingWhereInUpdate,
    TruncateDetected,
)
from analyzer_engine.rules.style import MissingTableAlias, SelectStar

_BUILTIN_RULE_TYPES: tuple[type[Rule], ...] = (
    SelectStarWithoutLimit,
    LeadingWildcard,
    OrInsteadOfIn,
    LargeOffset,
    MissingJoinCondition,
    DistinctWithOrderBy,
    ScalarSubqueryInSelect,
    FunctionOnColumn,
    NotInWithSubquery,
    UnionWithoutAll,
    SelectWithoutWhere,
    SelectStar,
    MissingTableAlias,
    MissingWhereInUpdate,
    MissingWhereInDelete,
    TruncateDetected,
    DropDetected,
)

_SCHEMA_RULE_TYPES: tuple[type[SchemaRule], ...] = (
    MissingIndexOnFilterColumn,
    ColumnNotInSchema,
    SuggestIndex,
)


def builtin_rules() -> list[Rule]:
    """Instantiate the performance, style and security rules in catalogue order."""
    return [rule_type() for rule_type in _BUILTIN_RULE_TYPES]


def schema_rules(schema: Schema) -> list[Rule]:
    """Instantiate the schema-aware rules bound to *schema*."""
    return [rule_type(schema) for rule_type in _SCHEMA_RULE_TYPES]


def list_rule_infos(include_schema: bool = True) -> list[RuleInfo]:
    """Return the metadata of every built-in rule, without instantiating any."""
    types: list[type[Rule]] = list(_BUILTIN_RULE_TYPES)
    if include_schema:
        types.extend(_SCHEMA_RULE_TYPES)
    return [rule_type.info for rule_type in types]
