"""
Query-string parser using pyparsing.

A query string is a conjunction of clauses separated by `` . ``. Each
clause is exactly three tokens (id, predicate, object); a quoted span
counts as one token. For example::

    ?a likes ?b . ?b likes "chocolate cake"
"""

import logging
from typing import Optional

from pyparsing import Regex

from factmatch.errors import FormatError, require
from factmatch.models import Triple

logger = logging.getLogger(__name__)

# Literal separator between clauses
QUERY_SEPARATOR = " . "


class ClauseParser:
    """
    Parser for the clause-based query language.
    
    Supports:
    - Conjunctions of clauses separated by `` . ``
    - Single- or double-quoted primitives containing whitespace
    - Variables prefixed with ``?``
    """
    
    def __init__(self):
        self._build_grammar()
    
    def _build_grammar(self):
        """Build the pyparsing token scanner for clauses."""
        quoted = Regex(r"[\"'][^\"']+[\"']")
        bare = Regex(r"[^\s\"]+")
        self.token = (quoted | bare).set_name("primitive")
    
    def tokenize(self, clause: str) -> list[str]:
        """Split a clause into its primitive tokens."""
        return [tokens[0] for tokens, _start, _end in self.token.scan_string(clause)]
    
    def parse_clause(self, clause: str) -> Triple:
        """
        Parse a single clause into a Triple.
        
        Raises:
            FormatError: If the clause does not have exactly three tokens or
                one of its primitives is invalid
        """
        require(clause, "Query string")
        if not clause.strip():
            raise FormatError("Query string must be non-empty")
        
        tokens = self.tokenize(clause)
        if len(tokens) != 3:
            raise FormatError(
                f"Query string is malformed, expected 3 tokens but got {len(tokens)}: {clause!r}"
            )
        return Triple(tokens[0], tokens[1], tokens[2])
    
    def parse(self, query_string: str) -> list[Triple]:
        """
        Parse a query string into an ordered list of Triples.
        
        Args:
            query_string: Clauses separated by `` . ``
            
        Returns:
            One Triple per clause, in input order
            
        Raises:
            MissingArgumentError: If query_string is None
            FormatError: If any clause is malformed
        """
        require(query_string, "Query string")
        if not query_string.strip():
            raise FormatError("Query string must be non-empty")
        
        clauses = query_string.lower().split(QUERY_SEPARATOR)
        triples = [self.parse_clause(clause.strip()) for clause in clauses]
        logger.debug(f"Parsed {len(triples)} clause(s) from {query_string!r}")
        return triples


# Module-level parser instance for convenience
_parser: Optional[ClauseParser] = None


def _get_parser() -> ClauseParser:
    global _parser
    if _parser is None:
        _parser = ClauseParser()
    return _parser


def parse_clauses(query_string: str) -> list[Triple]:
    """
    Parse a query string into Triples.
    
    This is a convenience function that uses a cached parser instance.
    """
    return _get_parser().parse(query_string)


def parse_clause(clause: str) -> Triple:
    """Parse a single clause into a Triple."""
    require(clause, "Query string")
    return _get_parser().parse_clause(clause.lower())
