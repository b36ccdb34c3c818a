"""
Textual encoding of triples for storage backends.

Facts follow the RDF triple shape: the ID and predicate are stored as IRIs
and the object as a literal. Values that are not already absolute URIs are
wrapped in a short default URN (``em:value``) to keep the stored form small.
"""

from typing import Iterable
from urllib.parse import urlparse

from factmatch.models import Triple
from factmatch.primitives import is_variable

# Default URN scheme for values that are not absolute URIs
DEFAULT_URN_START = "em:"


def _is_absolute_uri(value: str) -> bool:
    # Already in the default URN: wrap again, decoding strips exactly one prefix
    if value.startswith(DEFAULT_URN_START):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def to_default_uri(value: str) -> str:
    """Transform a value into a URI of the form ``em:value``."""
    return f"{DEFAULT_URN_START}{value}"


def escape_string(value: str, is_uri: bool = False) -> str:
    """
    Encode a single value as an IRI (``<...>``) or a quoted literal.
    """
    if is_uri:
        uri = value if _is_absolute_uri(value) else to_default_uri(value)
        return f"<{uri}>"
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def encode_slot(value: str, is_uri: bool) -> str:
    """Encode one triple slot, leaving variables untouched."""
    return value if is_variable(value) else escape_string(value, is_uri)


def encode_triple(triple: Triple) -> tuple[str, str, str]:
    return (
        encode_slot(triple.id, True),
        encode_slot(triple.predicate, True),
        encode_slot(triple.object, False),
    )


def to_db_string(triple: Triple) -> str:
    """Render a triple as ``S P O .`` in the stored encoding."""
    return "{} {} {} .".format(*encode_triple(triple))


def sanitize_uri(uri: str) -> str:
    """Strip the default URN prefix from a URI, returning the original value."""
    if uri.startswith(DEFAULT_URN_START):
        return uri[len(DEFAULT_URN_START):]
    return uri


def decode_term(term: str) -> str:
    """Decode a single stored term back to its primitive value."""
    if len(term) >= 2 and term.startswith("<") and term.endswith(">"):
        return sanitize_uri(term[1:-1])
    if len(term) >= 2 and term.startswith('"') and term.endswith('"'):
        return term[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return term


def query_variables(patterns: Iterable[Triple]) -> list[str]:
    """Distinct variables across patterns, in first-seen order."""
    variables: list[str] = []
    for pattern in patterns:
        for variable in pattern.variables():
            if variable not in variables:
                variables.append(variable)
    return variables


def render_select(patterns: Iterable[Triple]) -> str:
    """
    Render a conjunction of patterns as a SPARQL SELECT query.

    Example:
        SELECT ?b WHERE { <em:alice> <em:likes> ?b . }
    """
    patterns = list(patterns)
    variables = query_variables(patterns)
    projection = " ".join(variables) if variables else "*"
    body = " ".join(to_db_string(p) for p in patterns)
    return f"SELECT {projection} WHERE {{ {body} }}"
