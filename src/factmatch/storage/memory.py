"""
In-memory fact backend powered by Polars.

Facts are held in a single DataFrame of encoded terms (see encoding.py).
A conjunction is executed the way a SPARQL basic graph pattern is:

- Each pattern becomes a lazy filter on its concrete slots
- Variables become decoded columns named after the variable
- Patterns sharing variables are inner-joined, others cross-joined
"""

import logging
import threading
from typing import Optional, Sequence

import polars as pl

from factmatch.bindings import Bindings
from factmatch.errors import FormatError, StoreClosedError, require
from factmatch.models import Triple
from factmatch.primitives import is_variable
from factmatch.storage.backend import FactBackend
from factmatch.storage.encoding import (
    DEFAULT_URN_START,
    encode_triple,
    escape_string,
    render_select,
    to_db_string,
)

logger = logging.getLogger(__name__)

COLUMNS = ("id", "predicate", "object")
# Which columns hold IRIs (the object column holds literals)
URI_COLUMNS = (True, True, False)
SCHEMA = {name: pl.Utf8 for name in COLUMNS}


def _decoded(column: str, is_uri: bool) -> pl.Expr:
    """Polars expression decoding an encoded term column to primitive values."""
    expr = pl.col(column)
    if is_uri:
        return (
            expr.str.strip_prefix("<")
            .str.strip_suffix(">")
            .str.strip_prefix(DEFAULT_URN_START)
        )
    return (
        expr.str.strip_prefix('"')
        .str.strip_suffix('"')
        .str.replace_all('\\"', '"', literal=True)
        .str.replace_all("\\\\", "\\", literal=True)
    )


class PolarsFactBackend(FactBackend):
    """
    A fact backend storing encoded triples in a Polars DataFrame.

    This class is threadsafe; every operation runs under one re-entrant
    lock.
    """

    def __init__(self, name: str = "default", log_queries: bool = True):
        self.name = name
        self.log_queries = log_queries
        self._df = pl.DataFrame(schema=SCHEMA)
        self._lock = threading.RLock()
        self._closed = False
        logger.info(f"Created in-memory fact store {name!r}")

    def _check_open(self) -> None:
        if self._closed:
            raise StoreClosedError(f"Fact store {self.name!r} is closed")

    @staticmethod
    def _require_fact(triple: Triple) -> Triple:
        require(triple, "Triple")
        if triple.is_pattern:
            raise FormatError(f"Expected a concrete triple, got pattern {triple}")
        return triple

    def _row_filter(self, triple: Triple) -> pl.Expr:
        encoded = encode_triple(triple)
        return (
            (pl.col("id") == encoded[0])
            & (pl.col("predicate") == encoded[1])
            & (pl.col("object") == encoded[2])
        )

    def _has_row(self, triple: Triple) -> bool:
        return self._df.filter(self._row_filter(triple)).height > 0

    # ========== Persistence ==========

    def insert(self, triple: Triple) -> bool:
        self._require_fact(triple)
        with self._lock:
            self._check_open()
            if self._has_row(triple):
                logger.warning(f"Ignoring duplicate insert of {triple}")
                return False
            try:
                row = pl.DataFrame([dict(zip(COLUMNS, encode_triple(triple)))], schema=SCHEMA)
                self._df = pl.concat([self._df, row], how="vertical")
            except pl.exceptions.PolarsError as e:
                logger.error(f"Failed when inserting {to_db_string(triple)}: {e}")
                return False
            logger.debug(f"Inserted {to_db_string(triple)}")
            return True

    def delete(self, triple: Triple) -> bool:
        self._require_fact(triple)
        with self._lock:
            self._check_open()
            if not self._has_row(triple):
                return False
            try:
                self._df = self._df.filter(~self._row_filter(triple))
            except pl.exceptions.PolarsError as e:
                logger.error(f"Failed when deleting {to_db_string(triple)}: {e}")
                return False
            logger.debug(f"Deleted {to_db_string(triple)}")
            return True

    def clear(self) -> bool:
        with self._lock:
            self._check_open()
            removed = self._df.height
            self._df = pl.DataFrame(schema=SCHEMA)
            logger.info(f"Cleared fact store {self.name!r} ({removed} facts removed)")
            return True

    def count(self) -> int:
        with self._lock:
            self._check_open()
            return self._df.height

    def close(self) -> None:
        with self._lock:
            self._closed = True

    # ========== Enumeration ==========

    def _pattern_frame(self, df: pl.DataFrame, pattern: Triple) -> pl.DataFrame:
        """
        Execute one pattern against the store.

        Returns a DataFrame with one decoded column per distinct variable,
        or a single ``_match`` column if the pattern has no variables.
        """
        lf = df.lazy()
        filters = []
        columns: dict[str, tuple[str, bool]] = {}

        for column, slot, is_uri in zip(COLUMNS, pattern.slots, URI_COLUMNS):
            if is_variable(slot):
                if slot in columns:
                    # Repeated variable: both slots must hold the same value
                    first_column, first_is_uri = columns[slot]
                    filters.append(
                        _decoded(first_column, first_is_uri).str.to_lowercase()
                        == _decoded(column, is_uri).str.to_lowercase()
                    )
                else:
                    columns[slot] = (column, is_uri)
            else:
                filters.append(pl.col(column) == escape_string(slot, is_uri))

        if filters:
            combined = filters[0]
            for f in filters[1:]:
                combined = combined & f
            lf = lf.filter(combined)

        if not columns:
            height = lf.select(pl.len()).collect().item()
            return pl.DataFrame({"_match": [True] * height})

        return lf.select(
            [_decoded(column, is_uri).alias(variable) for variable, (column, is_uri) in columns.items()]
        ).collect()

    def _execute(self, patterns: Sequence[Triple]) -> Optional[pl.DataFrame]:
        df = self._df
        result_df: Optional[pl.DataFrame] = None

        for pattern in patterns:
            pattern_df = self._pattern_frame(df, pattern)

            if "_match" in pattern_df.columns:
                if pattern_df.height == 0:
                    return pl.DataFrame()
                continue

            if result_df is None:
                result_df = pattern_df
            else:
                shared_cols = set(result_df.columns) & set(pattern_df.columns)
                if shared_cols:
                    result_df = result_df.join(pattern_df, on=list(shared_cols), how="inner")
                else:
                    result_df = result_df.join(pattern_df, how="cross")

            if result_df.height == 0:
                return result_df

        return result_df

    def enumerate(self, patterns: Sequence[Triple]) -> list[Bindings]:
        require(patterns, "Patterns")
        patterns = list(patterns)
        if not patterns:
            return []

        with self._lock:
            self._check_open()
            if self.log_queries:
                logger.debug(f"Executing query on {self.name!r}: {render_select(patterns)}")
            try:
                result_df = self._execute(patterns)
            except pl.exceptions.PolarsError as e:
                logger.error(f"Error querying fact store {self.name!r} with {render_select(patterns)}: {e}")
                return []

        if result_df is None:
            # Every pattern was concrete and present
            return [Bindings()]
        if result_df.height == 0:
            return []
        return [Bindings(row) for row in result_df.iter_rows(named=True)]
