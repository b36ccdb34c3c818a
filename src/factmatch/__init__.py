"""
factmatch: subject-predicate-object fact matching with named variables.

Parse conjunctive queries, match patterns against facts, and turn the
resulting variable bindings back into concrete triples.
"""

__version__ = "0.1.0"

from factmatch.errors import (
    FactMatchError,
    FormatError,
    MissingArgumentError,
    StoreClosedError,
    ConfigValidationError,
)
from factmatch.primitives import (
    VARIABLE_PREFIX,
    normalize_primitive,
    is_variable,
    as_variable,
    var,
)
from factmatch.models import Triple
from factmatch.bindings import Binding, Bindings
from factmatch.matching import (
    ScratchTable,
    matches_fact,
    derive_bindings,
    derive_conjunction,
    substitute,
    materialize,
    match_all,
)
from factmatch.query import parse_clauses, parse_clause
from factmatch.config import StoreConfig
from factmatch.storage import FactBackend, PolarsFactBackend
from factmatch.store import TripleStore

__all__ = [
    # Errors
    "FactMatchError",
    "FormatError",
    "MissingArgumentError",
    "StoreClosedError",
    "ConfigValidationError",
    # Primitives and model
    "VARIABLE_PREFIX",
    "normalize_primitive",
    "is_variable",
    "as_variable",
    "var",
    "Triple",
    "Binding",
    "Bindings",
    # Matching
    "ScratchTable",
    "matches_fact",
    "derive_bindings",
    "derive_conjunction",
    "substitute",
    "materialize",
    "match_all",
    # Parsing
    "parse_clauses",
    "parse_clause",
    # Store
    "StoreConfig",
    "FactBackend",
    "PolarsFactBackend",
    "TripleStore",
]
