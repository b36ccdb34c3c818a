"""
Primitive normalization and variable recognition.

A primitive is one slot of a triple. It is either a value (opaque and
case-insensitive) or a variable, which carries the reserved prefix.
"""

import re

from factmatch.errors import FormatError, require

# Prefix to identify variables
VARIABLE_PREFIX = "?"

QUOTE_CHARS = ('"', "'")

# A primitive made only of non-word characters is rejected
_INVALID_PRIMITIVE = re.compile(r"^\W*$")


def _require_text(value: str, name: str) -> str:
    require(value, name)
    if not isinstance(value, str):
        raise FormatError(f"{name} must be a string, got {type(value).__name__}")
    if not value.strip():
        raise FormatError(f"{name} must be a non-empty string")
    return value


def normalize_primitive(primitive: str) -> str:
    """
    Normalize a raw token into a primitive.
    
    Trims whitespace, strips one pair of matching quotes, and lowercases.
    Normalizing an already-normalized primitive returns it unchanged.
    
    Raises:
        MissingArgumentError: If primitive is None
        FormatError: If the primitive is empty, has an unmatched quote, or
            consists only of special characters
    """
    _require_text(primitive, "Primitive")
    
    sanitized = primitive.strip().lower()
    first_char = sanitized[0]
    if first_char in QUOTE_CHARS:
        if len(sanitized) > 2 and sanitized[-1] == first_char:
            sanitized = sanitized[1:-1].strip()
        else:
            raise FormatError(f"Malformed quoted primitive: {primitive!r}")
    
    if _INVALID_PRIMITIVE.match(sanitized):
        raise FormatError(
            f"Invalid triple primitive, must not contain only special characters: {primitive!r}"
        )
    
    return sanitized


def is_variable(token: str) -> bool:
    """Check if the token is a query variable."""
    _require_text(token, "Variable")
    return token.strip().startswith(VARIABLE_PREFIX)


def as_variable(name: str) -> str:
    """Return name with the variable prefix attached, adding it if absent."""
    _require_text(name, "Variable name")
    name = name.strip()
    if not name.startswith(VARIABLE_PREFIX):
        name = VARIABLE_PREFIX + name
    return name


def var(name: str) -> str:
    """
    Format a name as a variable understood by the store.
    
    Example:
        Triple(var("who"), "likes", "cake")
    """
    _require_text(name, "Variable name")
    return VARIABLE_PREFIX + name
