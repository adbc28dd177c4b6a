"""DDL schema parsing."""

from analyzer_engine.schema.ddl_parser import parse_schema

__all__ = ["parse_schema"]
