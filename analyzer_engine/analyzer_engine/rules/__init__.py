"""Analysis rules and the runner that executes them."""

from analyzer_engine.rules.base import Rule
from analyzer_engine.rules.registry import builtin_rules, list_rule_infos, schema_rules
from analyzer_engine.rules.runner import RuleRunner
from analyzer_engine.rules.schema_aware import SchemaRule

__all__ = [
    "Rule",
    "RuleRunner",
    "SchemaRule",
    "builtin_rules",
    "list_rule_infos",
    "schema_rules",
]
