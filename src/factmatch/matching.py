"""
Pattern matching and binding derivation.

Matching a pattern against a fact is a pure computation. The only mutable
state is a scratch table recording variables seen during one attempt, which
is how a variable repeated in a single pattern (``?a knows ?a``) is held to
one value. Callers matching many facts may pass their own ScratchTable to
avoid reallocating it; it is cleared on entry of every call.

A failed match returns False/None rather than raising.
"""

from typing import Iterable, Iterator, Optional, Sequence

from factmatch.bindings import Binding, Bindings, EMPTY_BINDINGS
from factmatch.errors import require
from factmatch.models import Triple
from factmatch.primitives import is_variable


class ScratchTable:
    """Caller-owned variable store for a single matching attempt."""

    __slots__ = ("_values",)

    def __init__(self):
        self._values: dict[str, str] = {}

    def clear(self) -> None:
        self._values.clear()

    def bind(self, variable: str, value: str) -> bool:
        """
        Record ``variable = value``.

        Returns False if the variable was already bound in this attempt to a
        different value (compared case-insensitively).
        """
        current = self._values.get(variable)
        if current is not None and current.lower() != value.lower():
            return False
        self._values[variable] = value
        return True

    def get(self, variable: str) -> Optional[str]:
        return self._values.get(variable)

    def __len__(self) -> int:
        return len(self._values)


def _matches_primitive(fact_slot: str, pattern_slot: str, scratch: ScratchTable) -> bool:
    if is_variable(pattern_slot):
        return scratch.bind(pattern_slot, fact_slot)
    return pattern_slot.lower() == fact_slot.lower()


def matches_fact(
    pattern: Triple,
    fact: Triple,
    scratch: Optional[ScratchTable] = None,
) -> bool:
    """
    Check if ``fact`` matches ``pattern``.

    A variable slot matches any value, except that every occurrence of the
    same variable must see the same value. A value slot matches iff equal,
    ignoring case. Slots are checked id, predicate, object and the first
    mismatch short-circuits.
    """
    require(pattern, "Pattern")
    require(fact, "Fact")

    if scratch is None:
        scratch = ScratchTable()
    else:
        scratch.clear()

    return (
        _matches_primitive(fact.id, pattern.id, scratch)
        and _matches_primitive(fact.predicate, pattern.predicate, scratch)
        and _matches_primitive(fact.object, pattern.object, scratch)
    )


def derive_bindings(
    pattern: Triple,
    fact: Triple,
    existing: Optional[Bindings] = None,
    scratch: Optional[ScratchTable] = None,
) -> Optional[Bindings]:
    """
    Match ``fact`` against ``pattern`` and return the resulting bindings.

    The result subsumes ``existing``: variables already bound there keep
    their value, and only new variables are bound to the fact's values.

    Returns:
        The new Bindings, or None if the fact does not match.
    """
    if existing is None:
        existing = EMPTY_BINDINGS

    if not matches_fact(pattern, fact, scratch):
        return None

    additions = []
    for fact_slot, pattern_slot in zip(fact.slots, pattern.slots):
        if is_variable(pattern_slot) and not existing.contains(pattern_slot):
            additions.append(Binding(pattern_slot, fact_slot))

    return Bindings.layered(existing, additions)


def _apply_binding(bindings: Bindings, primitive: str) -> str:
    if is_variable(primitive):
        value = bindings.lookup(primitive)
        if value is not None:
            return value
    return primitive


def substitute(pattern: Triple, bindings: Bindings) -> Triple:
    """
    Replace the bound variables of ``pattern`` with their values.

    Bound values are trusted as already normalized. If nothing could be
    applied the pattern itself is returned.
    """
    require(pattern, "Pattern")
    require(bindings, "Bindings")

    replaced = tuple(_apply_binding(bindings, slot) for slot in pattern.slots)
    changed = any(
        new.lower() != old.lower() for new, old in zip(replaced, pattern.slots)
    )
    if not changed:
        return pattern
    return Triple._from_normalized(*replaced)


def materialize(patterns: Iterable[Triple], bindings: Bindings) -> list[Triple]:
    """Substitute one bindings set into every pattern, preserving order."""
    return [substitute(pattern, bindings) for pattern in patterns]


def derive_conjunction(
    patterns: Sequence[Triple],
    facts: Sequence[Triple],
    existing: Optional[Bindings] = None,
) -> Optional[Bindings]:
    """
    Re-derive the bindings of a conjunction from the facts each pattern
    matched, paired by position.

    Earlier patterns take precedence. Returns None at the first pattern
    that does not match its fact.
    """
    if len(patterns) != len(facts):
        raise ValueError(
            f"Expected one fact per pattern, got {len(facts)} facts for {len(patterns)} patterns"
        )

    bindings = existing if existing is not None else EMPTY_BINDINGS
    scratch = ScratchTable()
    for pattern, fact in zip(patterns, facts):
        # Bound variables are substituted first so the pattern also checks
        # agreement with earlier patterns.
        bindings = derive_bindings(substitute(pattern, bindings), fact, bindings, scratch)
        if bindings is None:
            return None
    return bindings


def match_all(
    patterns: Sequence[Triple],
    facts: Iterable[Triple],
    existing: Optional[Bindings] = None,
) -> Iterator[Bindings]:
    """
    Enumerate every bindings set satisfying the conjunction ``patterns``
    over a caller-supplied collection of facts.

    This is a nested-loop match intended for small, in-memory fact sets.
    A branch stops as soon as one pattern has no matching fact.
    """
    facts = list(facts)
    scratches = [ScratchTable() for _ in patterns]
    start = existing if existing is not None else EMPTY_BINDINGS

    def _walk(index: int, bindings: Bindings) -> Iterator[Bindings]:
        if index == len(patterns):
            yield bindings
            return
        bound = substitute(patterns[index], bindings)
        for fact in facts:
            derived = derive_bindings(bound, fact, bindings, scratches[index])
            if derived is not None:
                yield from _walk(index + 1, derived)

    yield from _walk(0, start)
