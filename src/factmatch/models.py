"""
The Triple model shared by facts and query patterns.

A triple has an ID, predicate, and object. It is a pattern if at least one
of the three slots is a variable, i.e. a name prefixed with ``?``.
All slots are normalized at construction and the triple is immutable
afterwards.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from factmatch.errors import require
from factmatch.primitives import is_variable, normalize_primitive

if TYPE_CHECKING:
    from factmatch.bindings import Bindings
    from factmatch.matching import ScratchTable


@dataclass(frozen=True, eq=False)
class Triple:
    """
    A subject-predicate-object triple, concrete (a fact) or with variables
    (a pattern).

    Equality and hashing are case-insensitive over all three slots.
    """
    id: str
    predicate: str
    object: str
    is_pattern: bool = field(init=False)

    def __post_init__(self):
        require(self.id, "ID")
        require(self.predicate, "Predicate")
        require(self.object, "Object")
        object.__setattr__(self, "id", normalize_primitive(self.id))
        object.__setattr__(self, "predicate", normalize_primitive(self.predicate))
        object.__setattr__(self, "object", normalize_primitive(self.object))
        object.__setattr__(self, "is_pattern", self._any_variable())

    @classmethod
    def _from_normalized(cls, id: str, predicate: str, obj: str) -> "Triple":
        """Build a triple from slots that are already normalized."""
        triple = cls.__new__(cls)
        object.__setattr__(triple, "id", id)
        object.__setattr__(triple, "predicate", predicate)
        object.__setattr__(triple, "object", obj)
        object.__setattr__(triple, "is_pattern", triple._any_variable())
        return triple

    def _any_variable(self) -> bool:
        return is_variable(self.id) or is_variable(self.predicate) or is_variable(self.object)

    @property
    def slots(self) -> tuple[str, str, str]:
        return (self.id, self.predicate, self.object)

    @property
    def is_fact(self) -> bool:
        return not self.is_pattern

    def variables(self) -> list[str]:
        """Return the distinct variables of this triple in slot order."""
        seen = []
        for slot in self.slots:
            if is_variable(slot) and slot not in seen:
                seen.append(slot)
        return seen

    def matches_fact(self, fact: "Triple", scratch: Optional["ScratchTable"] = None) -> bool:
        from factmatch.matching import matches_fact
        return matches_fact(self, fact, scratch)

    def derive_bindings(
        self,
        fact: "Triple",
        existing: Optional["Bindings"] = None,
        scratch: Optional["ScratchTable"] = None,
    ) -> Optional["Bindings"]:
        from factmatch.matching import derive_bindings
        return derive_bindings(self, fact, existing, scratch)

    def substitute(self, bindings: "Bindings") -> "Triple":
        from factmatch.matching import substitute
        return substitute(self, bindings)

    apply_bindings = substitute

    def _key(self) -> tuple[str, str, str]:
        return (self.id.lower(), self.predicate.lower(), self.object.lower())

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Triple):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return f"Triple = <{self.id}, {self.predicate}, {self.object}>"
