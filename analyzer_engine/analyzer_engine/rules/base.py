"""Abstract base class for analysis rules.

Every rule subclasses :class:`Rule`, declares its metadata as a
class-level :attr:`Rule.info`, and implements :meth:`Rule.check`.
Rules are stateless apart from read-only construction arguments (the
schema-aware rules hold a :class:`~analyzer_engine.models.Schema`), so
one instance can be shared by every worker thread of the runner.
"""

from __future__ import annotations

import abc
from typing import ClassVar

from analyzer_engine.models.query import Query
from analyzer_engine.models.report import RuleInfo, Violation


class Rule(abc.ABC):
    """Abstract base for all rules.

    Implementations must never raise: a condition that cannot be
    evaluated means "no violation".
    """

    info: ClassVar[RuleInfo]

    @property
    def rule_id(self) -> str:
        return self.info.id

    @abc.abstractmethod
    def check(self, query: Query, query_index: int) -> list[Violation]:
        """Inspect one query and return zero or more violations.

        Parameters
        ----------
        query:
            The normalized query to inspect.
        query_index:
            Zero-based position of *query* in the analysed batch.
        """

    def violation(self, query_index: int, message: str, suggestion: str | None = None) -> Violation:
        """Build a violation carrying this rule's metadata."""
        return Violation(
            rule_id=self.info.id,
            rule_name=self.info.name,
            message=message,
            severity=self.info.severity,
            category=self.info.category,
            suggestion=suggestion,
            query_index=query_index,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.info.id})"
