from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Mapping, Protocol

from octoform.schema import Mutability, ResourceSchema


@dataclass(frozen=True)
class State:
    """Last-known-good attributes of a remote entity, keyed by its identifier."""

    resource_id: str
    attributes: dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    @classmethod
    def from_observed(
        cls,
        schema: ResourceSchema,
        resource_id: str,
        observed: Mapping[str, Any],
        carried: Mapping[str, Any],
    ) -> "State":
        """
        Build State from a normalized remote payload.

        Readable attributes come from ``observed``; attributes the service
        never returns are carried over from ``carried`` (desired values, the
        prior State, or schema defaults on import).
        """
        attributes = {
            name: observed.get(name) if spec.readable else carried.get(name)
            for name, spec in schema.attributes.items()
        }
        return cls(resource_id, attributes)


@dataclass(frozen=True)
class AttributeChange:
    """One attribute whose desired value differs from State."""

    name: str
    before: Any
    after: Any
    requires_replace: bool = False
    sensitive: bool = False

    def __repr__(self) -> str:
        if self.sensitive:
            return f"AttributeChange(name={self.name!r}, sensitive)"
        return f"AttributeChange(name={self.name!r}, before={self.before!r}, after={self.after!r})"


@dataclass(frozen=True)
class Diff:
    """Attribute-level delta between desired configuration and State."""

    changes: tuple[AttributeChange, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.changes

    @property
    def requires_replace(self) -> bool:
        return any(change.requires_replace for change in self.changes)

    @property
    def names(self) -> list[str]:
        return [change.name for change in self.changes]

    def changed_values(self) -> dict[str, Any]:
        return {change.name: change.after for change in self.changes}


PlanAction = Literal["noop", "create", "update", "replace"]


@dataclass(frozen=True)
class PlanResult:
    """Plan result summarising the pending action for one resource instance."""

    action: PlanAction
    diff: Diff = field(default_factory=Diff)
    resource_id: str | None = None

    @property
    def has_changes(self) -> bool:
        return self.action != "noop"


@dataclass(frozen=True)
class ProviderHealth:
    status: Literal["healthy", "degraded", "unreachable"]
    details: str | None = None


class RemoteResource(Protocol):
    """
    Contract for the remote side of a resource kind.

    ``get`` returns a payload keyed by schema attribute names, ready for
    normalization. Failures are raised as ``RemoteError`` subclasses.
    """

    schema: ClassVar[ResourceSchema]

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        ...

    async def get(self, resource_id: str) -> dict[str, Any]:
        ...

    async def create(self, fields: dict[str, Any]) -> str:
        ...

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        ...

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        ...


class Provider(Protocol):
    """Minimal provider interface exposed to the orchestrator."""

    name: str

    async def health_check(self) -> ProviderHealth:
        ...

    async def resources(self) -> list[ResourceSchema]:
        ...


def compute_diff(
    schema: ResourceSchema,
    desired: Mapping[str, Any],
    stored: Mapping[str, Any],
    *,
    unknown: tuple[str, ...] = (),
) -> Diff:
    """
    Compare normalized desired attributes against stored State.

    Computed attributes are never diffed. Attributes in ``unknown`` always
    count as changed since their final value is not known yet.
    """
    changes: list[AttributeChange] = []
    for name in schema.configurable():
        spec = schema.attributes[name]
        before = stored.get(name)
        if name in unknown:
            after: Any = None
        else:
            after = desired.get(name)
            if before == after:
                continue
        changes.append(
            AttributeChange(
                name=name,
                before=before,
                after=after,
                requires_replace=spec.mutability is Mutability.REPLACE,
                sensitive=spec.sensitive,
            )
        )
    return Diff(tuple(changes))
