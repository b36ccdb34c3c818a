"""
Exception types raised by factmatch.

Format and missing-argument errors are fatal and raised at construction
time. A failed match is never an exception; matching returns False/None.
"""


class FactMatchError(Exception):
    """Base class for all factmatch errors."""
    pass


class FormatError(FactMatchError, ValueError):
    """A primitive, clause, or triple is malformed."""
    pass


class MissingArgumentError(FactMatchError, ValueError):
    """A required argument was None."""
    pass


class StoreClosedError(FactMatchError, RuntimeError):
    """Operation attempted on a closed store or backend."""
    pass


class ConfigValidationError(FactMatchError):
    """Configuration validation error."""
    pass


def require(value, name: str):
    """Raise MissingArgumentError if value is None, else return it."""
    if value is None:
        raise MissingArgumentError(f"{name} is required")
    return value
