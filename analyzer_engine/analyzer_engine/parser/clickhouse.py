"""ClickHouse DDL preprocessing.

ClickHouse table definitions carry engine-specific clauses (column
``CODEC(...)``, ``TTL``, ``SETTINGS``, ``PARTITION BY``) that are not
needed for schema analysis.  :func:`preprocess` records them as
:class:`ClickHouseMetadata` and strips them from the DDL, so the
remaining text is plain ``CREATE TABLE`` syntax.

For every other dialect the SQL is returned unchanged.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from analyzer_engine.models.schema import ClickHouseMetadata
from analyzer_engine.parser.dialect import SqlDialect

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

# One level of nested parentheses, e.g. CODEC(Delta, ZSTD(3)).
_CODEC_ARGS = r"([^()]*(?:\([^()]*\)[^()]*)*)"

_CODEC_RE = re.compile(r"\s+CODEC\s*\(" + _CODEC_ARGS + r"\)", re.IGNORECASE)
_COLUMN_CODEC_RE = re.compile(
    r"(\w+)\s+\w+(?:\([^)]*\))?\s+CODEC\s*\(" + _CODEC_ARGS + r"\)",
    re.IGNORECASE,
)
# The terminator is not consumed: a following SETTINGS or ";" survives stripping.
_TTL_RE = re.compile(r"\bTTL\s+(.+?)(?=\s+SETTINGS\b|;|$)", re.IGNORECASE | re.MULTILINE)
_SETTINGS_RE = re.compile(r"\bSETTINGS\s+([^;]+)", re.IGNORECASE)
_PARTITION_BY_RE = re.compile(r"\bPARTITION\s+BY\s+(\S+(?:\([^)]*\))?)", re.IGNORECASE)
_SETTING_PAIR_RE = re.compile(r"(\w+)\s*=\s*('[^']*'|\d+)")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class PreprocessResult:
    """Rewritten SQL plus the metadata removed from it."""

    sql: str
    metadata: ClickHouseMetadata = field(default_factory=ClickHouseMetadata)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def preprocess(sql: str, dialect: SqlDialect) -> PreprocessResult:
    """Strip dialect-only DDL clauses from *sql*."""
    if dialect is not SqlDialect.CLICKHOUSE:
        return PreprocessResult(sql=sql)
    return preprocess_clickhouse(sql)


def preprocess_clickhouse(sql: str) -> PreprocessResult:
    """Extract, then remove, ClickHouse CODEC/TTL/SETTINGS/PARTITION BY."""
    codecs: dict[str, str] = {}
    for match in _COLUMN_CODEC_RE.finditer(sql):
        codecs[match.group(1)] = match.group(2).strip()

    ttl_expressions = tuple(m.group(1).strip() for m in _TTL_RE.finditer(sql))

    settings: dict[str, str] = {}
    for match in _SETTINGS_RE.finditer(sql):
        for pair in _SETTING_PAIR_RE.finditer(match.group(1)):
            settings[pair.group(1)] = pair.group(2).strip("'")

    partition_by = tuple(m.group(1).strip() for m in _PARTITION_BY_RE.finditer(sql))

    result = _CODEC_RE.sub("", sql)
    result = _TTL_RE.sub("", result)
    result = _SETTINGS_RE.sub("", result)
    result = _PARTITION_BY_RE.sub("", result)
    result = _WHITESPACE_RE.sub(" ", result.strip())

    metadata = ClickHouseMetadata(
        codecs=codecs,
        ttl_expressions=ttl_expressions,
        settings=settings,
        partition_by=partition_by,
    )
    if not metadata.is_empty:
        logger.debug(
            "Stripped ClickHouse clauses: %d codec(s), %d TTL, %d setting(s), %d partition key(s)",
            len(codecs),
            len(ttl_expressions),
            len(settings),
            len(partition_by),
        )
    return PreprocessResult(sql=result, metadata=metadata)
