"""
Tri-state configuration values and configuration objects.

An attribute in a configuration is either null (not set), unknown (will
only be known after another resource is applied) or known. Validation and
diffing treat each state differently, so they are never collapsed into a
single "empty" value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping


class ValueState(Enum):
    """Resolution state of a configuration value."""

    NULL = "null"
    UNKNOWN = "unknown"
    KNOWN = "known"


@dataclass(frozen=True)
class Value:
    """A configuration value tagged with its resolution state."""

    state: ValueState
    value: Any = None

    @classmethod
    def null(cls) -> "Value":
        return cls(ValueState.NULL)

    @classmethod
    def unknown(cls) -> "Value":
        return cls(ValueState.UNKNOWN)

    @classmethod
    def known(cls, value: Any) -> "Value":
        return cls(ValueState.KNOWN, value)

    @property
    def is_null(self) -> bool:
        return self.state is ValueState.NULL

    @property
    def is_unknown(self) -> bool:
        return self.state is ValueState.UNKNOWN

    @property
    def is_known(self) -> bool:
        return self.state is ValueState.KNOWN

    @property
    def is_set(self) -> bool:
        """Known and not None; an empty string counts as set."""
        return self.is_known and self.value is not None


NULL = Value.null()
UNKNOWN = Value.unknown()


@dataclass(frozen=True)
class AttributePath:
    """Location of an attribute inside a (possibly nested) configuration."""

    steps: tuple[str, ...] = ()

    @classmethod
    def root(cls, name: str) -> "AttributePath":
        return cls((name,))

    @property
    def name(self) -> str | None:
        return self.steps[-1] if self.steps else None

    def parent(self) -> "AttributePath":
        return AttributePath(self.steps[:-1])

    def child(self, name: str) -> "AttributePath":
        return AttributePath(self.steps + (name,))

    def __str__(self) -> str:
        return ".".join(self.steps)


class Configuration(Mapping[str, Any]):
    """
    Desired configuration of one resource instance.

    Entries are either ``Value`` instances or nested ``Configuration``
    blocks. Attributes missing from the mapping read as null.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, Any] = dict(entries or {})

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Configuration":
        """Lift plain Python data; ``None`` is null, ``UNKNOWN`` passes through."""
        entries: dict[str, Any] = {}
        for name, item in raw.items():
            if isinstance(item, (Value, Configuration)):
                entries[name] = item
            elif isinstance(item, Mapping):
                entries[name] = cls.from_dict(item)
            elif item is None:
                entries[name] = NULL
            else:
                entries[name] = Value.known(item)
        return cls(entries)

    def __getitem__(self, name: str) -> Any:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def value(self, name: str) -> Value:
        entry = self._entries.get(name, NULL)
        if isinstance(entry, Configuration):
            return Value.known(entry.known_values())
        return entry

    def get_path(self, path: AttributePath) -> Value:
        """Resolve ``path``; missing steps read as null."""
        node: Any = self
        for step in path.steps:
            if not isinstance(node, Configuration):
                return NULL
            node = node._entries.get(step, NULL)
        if isinstance(node, Configuration):
            return Value.known(node.known_values())
        return node

    def block(self, path: AttributePath) -> "Configuration | None":
        node: Any = self
        for step in path.steps:
            if not isinstance(node, Configuration):
                return None
            node = node._entries.get(step)
        return node if isinstance(node, Configuration) else None

    def known_values(self) -> dict[str, Any]:
        """Plain data for known attributes only."""
        values: dict[str, Any] = {}
        for name, entry in self._entries.items():
            if isinstance(entry, Configuration):
                values[name] = entry.known_values()
            elif entry.is_known:
                values[name] = entry.value
        return values

    def has_unknown(self) -> bool:
        for entry in self._entries.values():
            if isinstance(entry, Configuration):
                if entry.has_unknown():
                    return True
            elif entry.is_unknown:
                return True
        return False

    def __repr__(self) -> str:
        return f"Configuration({self._entries!r})"
