"""Prompt text for the LLM review."""

from __future__ import annotations

from collections.abc import Sequence

from analyzer_engine.models.query import Query
from analyzer_engine.models.schema import Schema
from analyzer_engine.output.text import format_queries_summary

REVIEW_INSTRUCTIONS = (
    "You are a database performance expert. Analyze the following SQL queries "
    "for potential performance issues, especially regarding index usage."
)

REVIEW_CHECKLIST = (
    "For each query, identify:\n"
    "1. Whether existing indexes can be used effectively\n"
    "2. Missing indexes that would improve performance\n"
    "3. Full table scans or inefficient operations\n"
    "4. Suggestions for query optimization\n"
    "Provide specific, actionable recommendations."
)


def build_review_prompt(queries: Sequence[Query], schema: Schema | None = None) -> str:
    """Assemble the review prompt from the schema and query summaries.

    The schema block is left out when no schema was supplied.
    """
    sections = [REVIEW_INSTRUCTIONS]
    if schema is not None:
        sections.append(schema.to_summary().rstrip("\n"))
    sections.append(format_queries_summary(queries, colored=False).rstrip("\n"))
    sections.append(REVIEW_CHECKLIST)
    return "\n\n".join(sections)
