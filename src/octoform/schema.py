"""Static per-resource-kind schema metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping


class Mutability(Enum):
    """How a change to an attribute is carried out remotely."""

    MUTABLE = "mutable"  # updated in place
    REPLACE = "replace"  # destroy-then-create
    COMPUTED = "computed"  # assigned by the service, never diffed


@dataclass(frozen=True)
class AttributeSpec:
    """Schema entry for one attribute of a resource kind."""

    description: str
    mutability: Mutability = Mutability.MUTABLE
    required: bool = False
    default: Any = None
    sensitive: bool = False
    readable: bool = True  # False: the service never returns this value
    validators: tuple[Any, ...] = ()
    normalizer: Callable[[Any], Any] | None = None
    derive: Callable[[Mapping[str, Any]], Any] | None = None
    block: "ResourceSchema | None" = None


@dataclass(frozen=True)
class ResourceSchema:
    """Schema metadata describing a provider-managed resource kind."""

    name: str
    description: str
    attributes: dict[str, AttributeSpec] = field(default_factory=dict)
    required_one_of: tuple[tuple[str, ...], ...] = ()
    import_id_parts: tuple[str, ...] = ("id",)
    # Computed attributes whose out-of-band change invalidates unreadable values
    write_only_guard: tuple[str, ...] = ()

    def mutability(self, name: str) -> Mutability:
        return self.attributes[name].mutability

    def configurable(self) -> list[str]:
        return [
            name
            for name, spec in self.attributes.items()
            if spec.mutability is not Mutability.COMPUTED
        ]

    def unreadable(self) -> list[str]:
        return [name for name, spec in self.attributes.items() if not spec.readable]

    def sensitive(self) -> list[str]:
        return [name for name, spec in self.attributes.items() if spec.sensitive]

    def defaults(self) -> dict[str, Any]:
        return {
            name: spec.default
            for name, spec in self.attributes.items()
            if spec.mutability is not Mutability.COMPUTED
        }

    def readable_view(self, attributes: Mapping[str, Any]) -> dict[str, Any]:
        """Attributes the service reports, i.e. what an import can reconstruct."""
        return {
            name: value
            for name, value in attributes.items()
            if name in self.attributes and self.attributes[name].readable
        }

    @property
    def attribute_descriptions(self) -> dict[str, str]:
        return {name: spec.description for name, spec in self.attributes.items()}
