"""
Variable bindings produced by matching patterns against facts.

A Bindings set is immutable. New sets are built by layering additions on
top of an existing set; keys already present in the base always win, so an
earlier pattern in a conjunction fixes a variable for every later one.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Optional, Union

from factmatch.errors import FormatError, require
from factmatch.primitives import as_variable


@dataclass(frozen=True)
class Binding:
    """A single binding associating a value with a variable."""
    name: str
    value: str

    def __post_init__(self):
        require(self.name, "Binding name")
        require(self.value, "Binding value")
        if not isinstance(self.value, str):
            raise FormatError(f"Binding value must be a string, got {type(self.value).__name__}")
        if not self.value.strip():
            raise FormatError("Binding value must be a non-empty string")
        object.__setattr__(self, "name", as_variable(self.name))

    def __str__(self) -> str:
        return f"{self.name} = {self.value}"


BindingSource = Union[
    Iterable[Binding],
    Iterable[tuple[str, str]],
    Mapping[str, str],
]


def _iter_source(source: Optional[BindingSource]) -> Iterator[Binding]:
    if source is None:
        return
    if isinstance(source, Bindings):
        yield from source
        return
    if isinstance(source, Mapping):
        source = source.items()
    for item in source:
        if isinstance(item, Binding):
            yield item
        else:
            name, value = item
            yield Binding(name, value)


class Bindings:
    """
    An immutable set of bindings keyed by canonical variable name.

    Lookups canonicalize the name first, so ``b["a"]`` and ``b["?a"]``
    are the same lookup. Duplicate names in a source collection keep the
    first occurrence.
    """

    __slots__ = ("_bindings",)

    def __init__(
        self,
        bindings: Optional[BindingSource] = None,
        base: Optional["Bindings"] = None,
    ):
        """
        Build a bindings set.

        Args:
            bindings: Bindings, (name, value) pairs, or a mapping to add
            base: Existing set to layer under the new bindings. Its keys
                take precedence over any key in ``bindings``.
        """
        entries: dict[str, Binding] = {}

        # Phase 1: the base set is copied first and can never be overridden
        if base is not None:
            entries.update(base._bindings)

        # Phase 2: additions only fill in absent keys
        for binding in _iter_source(bindings):
            if binding.name not in entries:
                entries[binding.name] = binding

        object.__setattr__(self, "_bindings", entries)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Bindings is immutable")

    @classmethod
    def layered(cls, base: "Bindings", additions: Optional[BindingSource] = None) -> "Bindings":
        """Create a new set from ``base`` plus ``additions``; existing keys win."""
        require(base, "Binding set")
        return cls(additions, base=base)

    def lookup(self, name: str) -> Optional[str]:
        """Return the value bound to ``name`` or None if unbound."""
        binding = self._bindings.get(as_variable(name))
        return binding.value if binding is not None else None

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        value = self.lookup(name)
        return default if value is None else value

    def __getitem__(self, name: str) -> Optional[str]:
        return self.lookup(name)

    def contains(self, name: str) -> bool:
        """Check if the variable exists in the binding set."""
        return as_variable(name) in self._bindings

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name.strip()) and self.contains(name)

    @property
    def count(self) -> int:
        """Number of bindings stored in this set."""
        return len(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings.values())

    def names(self) -> list[str]:
        return list(self._bindings)

    def to_dict(self) -> dict[str, str]:
        return {name: b.value for name, b in self._bindings.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Bindings):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(frozenset(self.to_dict().items()))

    def __repr__(self) -> str:
        return f"Bindings({self.to_dict()!r})"

    def __str__(self) -> str:
        values = " ".join(f'"{b}"' for b in self._bindings.values())
        return f"Binding = {{ {values} }}" if values else "Binding = {}"


EMPTY_BINDINGS = Bindings()
