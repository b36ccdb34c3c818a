"""
Contract between the TripleStore facade and a fact storage backend.

The backend owns durable storage and the execution of conjunctive queries.
The core only consumes the Bindings it returns and sees persistence as a
success/failure boolean.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from factmatch.bindings import Bindings
from factmatch.models import Triple


class FactBackend(ABC):
    """Abstract fact storage backend."""

    @abstractmethod
    def enumerate(self, patterns: Sequence[Triple]) -> list[Bindings]:
        """
        Return every bindings set satisfying all ``patterns``.

        A conjunction with no variables yields ``[Bindings()]`` if every
        fact is present and ``[]`` otherwise.
        """

    @abstractmethod
    def insert(self, triple: Triple) -> bool:
        """Store a concrete triple. Returns False if already present."""

    @abstractmethod
    def delete(self, triple: Triple) -> bool:
        """Delete a concrete triple. Returns False if it was not stored."""

    @abstractmethod
    def clear(self) -> bool:
        """Remove all facts."""

    def count(self) -> int:
        """Number of stored facts."""
        return len(self.enumerate([Triple("?a", "?b", "?c")]))

    def close(self) -> None:
        """Release backend resources."""
