"""Typed errors raised at the analyzer's fallible boundaries.

Parsing (queries and schema), configuration loading and the optional LLM
review can fail.  Extraction and rule execution return data and never raise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Self

from sqlglot.errors import ParseError, SqlglotError


class AnalyzerError(Exception):
    """Base exception for all analyzer errors."""


class _PositionedParseError(AnalyzerError):
    """A parse failure with an optional source position."""

    label = "Parse error"

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._render())

    def _render(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.label} at line {self.line}, column {self.column}:\n  {self.message}"
        return f"{self.label}:\n  {self.message}"

    @classmethod
    def from_sqlglot(cls, exc: SqlglotError) -> Self:
        """Translate a sqlglot error, keeping the first error's position."""
        line: int | None = None
        column: int | None = None
        message = str(exc)
        if isinstance(exc, ParseError) and exc.errors:
            first = exc.errors[0]
            line = first.get("line")
            column = first.get("col")
            message = first.get("description") or message
        return cls(message, line=line, column=column)


class QueryParseError(_PositionedParseError):
    """The query text could not be parsed."""

    label = "Query parse error"


class SchemaParseError(_PositionedParseError):
    """The schema DDL could not be parsed."""

    label = "Schema parse error"


class ConfigError(AnalyzerError):
    """A configuration file could not be read or is invalid."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid configuration in {self.path}: {reason}")


class LlmError(AnalyzerError):
    """An LLM review request failed.

    ``retryable`` marks transient failures (timeouts, dropped connections,
    rate limiting and 5xx gateway errors) that the client retries.
    """

    def __init__(self, message: str, status_code: int | None = None, retryable: bool = False) -> None:
        self.message = message
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)
