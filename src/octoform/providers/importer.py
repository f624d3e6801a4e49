"""
Import of existing remote entities.

``ImportResolver.resolve`` builds State from nothing but an identifier. The
result matches what a create followed by a read would have stored for a
configuration that uses schema defaults for every attribute the service
never returns.
"""

from __future__ import annotations

from octoform.core.errors import MalformedIdentifier, OctoformError
from octoform.logging import bind_context
from octoform.normalize.attributes import normalize_attributes
from octoform.providers.base import RemoteResource, State
from octoform.providers.identifiers import build_id


class ImportResolver:
    """Synthesize State for a resource kind from a remote identifier."""

    def __init__(self, resource: RemoteResource) -> None:
        self.resource = resource
        self.schema = resource.schema

    async def resolve(self, identifier: str) -> State:
        """
        Fetch and normalize the entity behind ``identifier``.

        Raises:
            MalformedIdentifier: The identifier does not have the expected parts
            RemoteNotFound: No entity exists for the identifier
        """
        try:
            parts = self.resource.parse_id(identifier)
        except MalformedIdentifier as exc:
            raise exc.annotate(resource_type=self.schema.name)
        resource_id = build_id(*self._normalize_parts(parts))
        log = bind_context(resource_type=self.schema.name, resource_id=resource_id)

        try:
            payload = await self.resource.get(resource_id)
        except OctoformError as exc:
            raise exc.annotate(resource_type=self.schema.name, resource_id=resource_id)

        observed = normalize_attributes(self.schema, payload)
        state = State.from_observed(self.schema, resource_id, observed, self.schema.defaults())
        log.info("resource_imported")
        return state

    def _normalize_parts(self, parts: tuple[str, ...]) -> tuple[str, ...]:
        """Canonicalize id parts that name attributes, as create would build them."""
        normalized = []
        for name, part in zip(self.schema.import_id_parts, parts):
            spec = self.schema.attributes.get(name)
            if spec is not None and spec.normalizer is not None:
                part = spec.normalizer(part)
            normalized.append(part)
        return tuple(normalized)
