"""
TripleStore facade over a fact backend.

The store accepts queries as query strings, Triples, lists of Triples, or
raw (id, predicate, object) strings. Query execution is delegated to the
backend; the store turns the returned Bindings back into concrete triples
when it needs to report what was removed.

Example:
    with TripleStore() as store:
        store.add("alice", "likes", "bob")
        store.add("bob", "likes", "cake")
        store.query("?a likes ?b . ?b likes cake")
        # [Bindings({'?a': 'alice', '?b': 'bob'})]
"""

import logging
import threading
from typing import Iterable, Optional, Sequence, Union

from factmatch.bindings import Bindings
from factmatch.config import StoreConfig, validate_or_raise
from factmatch.errors import FormatError, StoreClosedError, require
from factmatch.matching import match_all, materialize, substitute
from factmatch.models import Triple
from factmatch.primitives import var
from factmatch.query.parser import parse_clauses
from factmatch.storage.backend import FactBackend
from factmatch.storage.memory import PolarsFactBackend

logger = logging.getLogger(__name__)

QueryInput = Union[str, Triple, Sequence[Triple]]


class TripleStore:
    """
    A triple store answering conjunctive queries with variable bindings.

    This class is threadsafe. ``close()`` should be called by the owner, or
    the store used as a context manager.
    """

    def __init__(
        self,
        backend: Optional[FactBackend] = None,
        config: Optional[StoreConfig] = None,
    ):
        """
        Initialize a triple store.

        Args:
            backend: Fact backend to use; defaults to an in-memory Polars backend
            config: Store configuration; defaults to StoreConfig()
        """
        self.config = config if config is not None else StoreConfig()
        validate_or_raise(self.config)

        self._backend = backend if backend is not None else PolarsFactBackend(
            name=self.config.store_name,
            log_queries=self.config.log_queries,
        )
        # Guards read-then-write sequences such as contains-then-delete
        self._lock = threading.RLock()
        self._closed = False

        if self.config.clear_on_open:
            logger.info(f"Clearing triple store {self.config.store_name!r} on open")
            self.clear()

    @property
    def name(self) -> str:
        return self.config.store_name

    @property
    def backend(self) -> FactBackend:
        return self._backend

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"Triple store {self.name!r} is closed")

    def _as_patterns(
        self,
        query: QueryInput,
        predicate: Optional[str] = None,
        obj: Optional[str] = None,
    ) -> list[Triple]:
        require(query, "Query")
        if predicate is not None or obj is not None:
            return [Triple(query, predicate, obj)]
        if isinstance(query, Triple):
            return [query]
        if isinstance(query, str):
            return parse_clauses(query)

        patterns = list(query)
        for pattern in patterns:
            if not isinstance(pattern, Triple):
                raise FormatError(f"Expected Triple in query list, got {type(pattern).__name__}")
        return patterns

    # ========== Public API ==========

    @property
    def count(self) -> int:
        """Total number of stored triples."""
        with self._lock:
            self._check_open()
            return self._backend.count()

    def __len__(self) -> int:
        return self.count

    def add(
        self,
        triple: Union[Triple, str],
        predicate: Optional[str] = None,
        obj: Optional[str] = None,
    ) -> bool:
        """
        Add a triple to the store.

        Accepts a Triple or the three raw (id, predicate, object) strings.

        Returns:
            True if the triple was added, False if it was already stored
        """
        require(triple, "Triple")
        if not isinstance(triple, Triple):
            triple = Triple(triple, predicate, obj)
        with self._lock:
            self._check_open()
            return self._backend.insert(triple)

    def contains(self, triple: Triple) -> bool:
        """Check if at least one stored fact satisfies ``triple``."""
        require(triple, "Triple")
        with self._lock:
            self._check_open()
            return len(self._backend.enumerate([triple])) > 0

    def __contains__(self, triple: object) -> bool:
        return isinstance(triple, Triple) and self.contains(triple)

    def query(
        self,
        query: QueryInput,
        predicate: Optional[str] = None,
        obj: Optional[str] = None,
    ) -> list[Bindings]:
        """
        Query the store. Multiple patterns are combined into an AND query.

        Args:
            query: A query string, a Triple, a list of Triples, or the ID of
                a single pattern when ``predicate`` and ``obj`` are given

        Returns:
            A list of result bindings; empty if nothing matched
        """
        patterns = self._as_patterns(query, predicate, obj)
        with self._lock:
            self._check_open()
            results = self._backend.enumerate(patterns)

        max_results = self.config.max_results
        if max_results is not None and len(results) > max_results:
            logger.debug(f"Truncating {len(results)} results to max_results={max_results}")
            results = results[:max_results]
        return results

    def remove(
        self,
        query: QueryInput,
        predicate: Optional[str] = None,
        obj: Optional[str] = None,
    ) -> set[Triple]:
        """
        Remove every stored triple matching the query.

        Returns:
            The set of triples that were removed
        """
        patterns = self._as_patterns(query, predicate, obj)
        with self._lock:
            self._check_open()
            if len(patterns) == 1:
                removed = self._remove_pattern(patterns[0])
            else:
                removed = set()
                if patterns:
                    for bindings in self._backend.enumerate(patterns):
                        for triple in materialize(patterns, bindings):
                            if self._remove_triple_literal(triple):
                                removed.add(triple)
        logger.debug(f"Removed {len(removed)} triple(s) from {self.name!r}")
        return removed

    def _remove_pattern(self, pattern: Triple) -> set[Triple]:
        if not pattern.is_pattern:
            return {pattern} if self._remove_triple_literal(pattern) else set()

        if len(pattern.variables()) == 3:
            # ?a ?b ?c matches everything
            removed = self.all()
            self.clear()
            return removed

        removed = set()
        for bindings in self._backend.enumerate([pattern]):
            triple = substitute(pattern, bindings)
            if self._remove_triple_literal(triple):
                removed.add(triple)
        return removed

    def _remove_triple_literal(self, triple: Triple) -> bool:
        """Remove a triple without variables; True if it was stored and deleted."""
        if triple.is_pattern:
            return False
        if self.contains(triple):
            return self._backend.delete(triple)
        return False

    def all(self) -> set[Triple]:
        """Return all triples in the store."""
        query = Triple(var("a"), var("b"), var("c"))
        with self._lock:
            self._check_open()
            return {substitute(query, bindings) for bindings in self._backend.enumerate([query])}

    def clear(self) -> bool:
        """Remove all triples from the store."""
        with self._lock:
            self._check_open()
            return self._backend.clear()

    def match(self, query: QueryInput, facts: Iterable[Triple]) -> list[Bindings]:
        """
        Match a conjunction against caller-supplied facts instead of the
        stored ones.
        """
        patterns = self._as_patterns(query)
        return list(match_all(patterns, facts))

    def close(self) -> None:
        """Close the store and its backend."""
        with self._lock:
            if not self._closed:
                self._backend.close()
                self._closed = True
                logger.debug(f"Closed triple store {self.name!r}")

    def __enter__(self) -> "TripleStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
