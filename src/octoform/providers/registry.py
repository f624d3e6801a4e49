from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from octoform.schema import ResourceSchema

ResourceFactory = Callable[..., Any]


@dataclass(frozen=True)
class ResourceSpec:
    """A registered resource kind: its schema and how to build its remote side."""

    schema: ResourceSchema
    factory: ResourceFactory
    provider: str | None = None

    @property
    def name(self) -> str:
        return self.schema.name

    @property
    def description(self) -> str:
        return self.schema.description


class ResourceRegistry:
    """In-memory registry of resource kinds keyed by schema name."""

    def __init__(self) -> None:
        self._resources: Dict[str, ResourceSpec] = {}

    def register(self, factory: ResourceFactory, *, provider: str | None = None) -> ResourceFactory:
        """Register a resource class; its ``schema`` class attribute names the kind."""
        schema = getattr(factory, "schema", None)
        if not isinstance(schema, ResourceSchema):
            raise TypeError(f"{factory!r} does not declare a ResourceSchema")
        if not schema.name:
            raise ValueError("Resource type name is required")

        existing = self._resources.get(schema.name)
        if existing is not None and existing.factory is not factory:
            raise ValueError(f"Resource type '{schema.name}' is already registered")

        self._resources[schema.name] = ResourceSpec(schema, factory, provider)
        return factory

    def create(self, name: str, **kwargs: Any) -> Any:
        return self.get(name).factory(**kwargs)

    def get(self, name: str) -> ResourceSpec:
        spec = self._resources.get(name)
        if spec is None:
            raise KeyError(f"Resource type '{name}' is not registered")
        return spec

    def list(self, provider: str | None = None) -> List[ResourceSpec]:
        return [
            spec
            for spec in self._resources.values()
            if provider is None or spec.provider == provider
        ]

    def schemas(self, provider: str | None = None) -> List[ResourceSchema]:
        return [spec.schema for spec in self.list(provider)]


resource_registry = ResourceRegistry()


def register_resource(factory: ResourceFactory, *, provider: str | None = None) -> ResourceFactory:
    return resource_registry.register(factory, provider=provider)


def create_resource(name: str, **kwargs: Any) -> Any:
    return resource_registry.create(name, **kwargs)


def list_resources(provider: str | None = None) -> List[ResourceSpec]:
    return resource_registry.list(provider)


def resource_schemas(provider: str | None = None) -> List[ResourceSchema]:
    return resource_registry.schemas(provider)
