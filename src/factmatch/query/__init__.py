"""
Query-string parsing for factmatch.
"""

from factmatch.query.parser import (
    ClauseParser,
    QUERY_SEPARATOR,
    parse_clause,
    parse_clauses,
)

__all__ = [
    "ClauseParser",
    "QUERY_SEPARATOR",
    "parse_clause",
    "parse_clauses",
]
