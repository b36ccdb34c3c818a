"""
factmatch storage layer.

Defines the backend contract, the stored text encoding, and an in-memory
Polars backend.
"""

from factmatch.storage.backend import FactBackend
from factmatch.storage.encoding import (
    DEFAULT_URN_START,
    decode_term,
    escape_string,
    render_select,
    sanitize_uri,
    to_db_string,
)
from factmatch.storage.memory import PolarsFactBackend

__all__ = [
    "FactBackend",
    "PolarsFactBackend",
    "DEFAULT_URN_START",
    "decode_term",
    "escape_string",
    "render_select",
    "sanitize_uri",
    "to_db_string",
]
