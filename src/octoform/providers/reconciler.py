"""
Resource reconciliation.

A ``Reconciler`` drives one resource kind through its lifecycle::

    absent --apply--> created --apply (no diff)--> created   (no remote call)
                      created --apply (mutable)--> created   (update in place)
                      created --apply (replace)--> planned --> created
                      created --delete---------> deleted
                      *       --read (changed)--> drifted

The reconciler holds no per-instance state: State is passed in and the new
State is returned, so one reconciler can serve many instances concurrently
while each instance's operations are sequenced by the caller. State is only
produced after the remote call fully succeeds; a cancelled or failed call
returns nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from octoform.core.errors import (
    OctoformError,
    PartialApply,
    RemoteNotFound,
    ValidationFailed,
)
from octoform.core.values import AttributePath, Configuration
from octoform.logging import bind_context
from octoform.normalize.attributes import normalize_attributes
from octoform.providers.base import PlanResult, RemoteResource, State, compute_diff
from octoform.schema import Mutability
from octoform.validation.validators import Violation, ensure_valid


class ResourceStatus(Enum):
    """Lifecycle position of a resource instance."""

    ABSENT = "absent"
    PLANNED = "planned"
    CREATED = "created"
    DRIFTED = "drifted"
    DELETED = "deleted"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a reconciler operation."""

    status: ResourceStatus
    state: State | None
    action: str

    @property
    def resource_id(self) -> str | None:
        return self.state.resource_id if self.state else None


class Reconciler:
    """Validate, diff and apply desired configuration for one resource kind."""

    def __init__(self, resource: RemoteResource) -> None:
        self.resource = resource
        self.schema = resource.schema

    def desired_attributes(self, config: Configuration) -> dict[str, Any]:
        """Known desired values with schema defaults applied, normalized."""
        merged = self.schema.defaults()
        for name, value in config.known_values().items():
            if value is not None:
                merged[name] = value
        return normalize_attributes(self.schema, merged)

    def _unknown(self, config: Configuration) -> tuple[str, ...]:
        return tuple(
            name
            for name in self.schema.configurable()
            if config.value(name).is_unknown
        )

    def plan(self, config: Configuration, state: State | None = None) -> PlanResult:
        """Compute the pending action without calling the remote service."""
        resource_id = state.resource_id if state else None
        ensure_valid(self.schema, config, resource_id=resource_id)

        desired = self.desired_attributes(config)
        stored = state.attributes if state else {}
        diff = compute_diff(self.schema, desired, stored, unknown=self._unknown(config))

        if state is None:
            return PlanResult("create", diff)
        if diff.is_empty:
            return PlanResult("noop", diff, resource_id)
        if diff.requires_replace:
            return PlanResult("replace", diff, resource_id)
        return PlanResult("update", diff, resource_id)

    async def apply(self, config: Configuration, state: State | None = None) -> ReconcileResult:
        """
        Reconcile desired configuration against stored State.

        Raises:
            ValidationFailed: Configuration is invalid or still has unknown values
            RemoteRejected: The service refused the operation
            RemoteTransient: Temporary remote failure, State unchanged
            PartialApply: The change went through but the read-back failed;
                ``error.state`` is the State to persist
        """
        plan = self.plan(config, state)
        resource_id = plan.resource_id
        log = bind_context(resource_type=self.schema.name, resource_id=resource_id)

        unknown = self._unknown(config)
        if unknown:
            raise ValidationFailed(
                [
                    Violation(
                        AttributePath.root(name),
                        "Unknown Value",
                        f"{name!r} must be known before it can be applied",
                    )
                    for name in unknown
                ],
            ).annotate(resource_type=self.schema.name, resource_id=resource_id)

        desired = self.desired_attributes(config)
        try:
            if state is None:
                new_state = await self._create(desired, log)
                return ReconcileResult(ResourceStatus.CREATED, new_state, "create")

            if plan.action == "noop":
                log.debug("resource_unchanged")
                return ReconcileResult(ResourceStatus.CREATED, state, "noop")

            if plan.action == "update":
                changed = plan.diff.changed_values()
                await self.resource.update(state.resource_id, changed)
                log.info("resource_updated", attributes=sorted(changed))
                new_state = await self._read_back(state.resource_id, desired, log)
                return ReconcileResult(ResourceStatus.CREATED, new_state, "update")

            return await self._replace(state, desired, plan, log)
        except OctoformError as exc:
            raise exc.annotate(resource_type=self.schema.name, resource_id=resource_id)

    async def read(self, state: State) -> ReconcileResult:
        """
        Refresh State from the remote entity.

        Returns status ``absent`` when the entity is gone, ``created`` when it
        still matches State and ``drifted`` (with the fresh State as the new
        baseline) when it was changed out-of-band.
        """
        log = bind_context(resource_type=self.schema.name, resource_id=state.resource_id)
        try:
            payload = await self.resource.get(state.resource_id)
        except RemoteNotFound:
            log.info("resource_gone")
            return ReconcileResult(ResourceStatus.ABSENT, None, "read")
        except OctoformError as exc:
            raise exc.annotate(resource_type=self.schema.name, resource_id=state.resource_id)

        observed = normalize_attributes(self.schema, payload)
        carried = dict(state.attributes)

        guard_changed = [
            name
            for name in self.schema.write_only_guard
            if state.get(name) is not None and observed.get(name) != state.get(name)
        ]
        if guard_changed:
            # Values the service holds but never returns can no longer be trusted
            log.info("resource_write_only_values_invalidated", changed=guard_changed)
            for name in self.schema.unreadable():
                if self.schema.mutability(name) is Mutability.REPLACE:
                    carried[name] = None

        fresh = State.from_observed(self.schema, state.resource_id, observed, carried)
        if fresh == state:
            return ReconcileResult(ResourceStatus.CREATED, fresh, "read")

        drifted = sorted(
            name for name in self.schema.attributes if fresh.get(name) != state.get(name)
        )
        log.info("resource_drift_detected", attributes=drifted)
        return ReconcileResult(ResourceStatus.DRIFTED, fresh, "read")

    async def delete(self, state: State | None) -> ReconcileResult:
        """Delete the remote entity; an already absent entity counts as deleted."""
        if state is None:
            return ReconcileResult(ResourceStatus.DELETED, None, "delete")

        log = bind_context(resource_type=self.schema.name, resource_id=state.resource_id)
        try:
            await self.resource.delete(state.resource_id, state.attributes)
        except RemoteNotFound:
            log.info("resource_already_absent")
        except OctoformError as exc:
            raise exc.annotate(resource_type=self.schema.name, resource_id=state.resource_id)
        else:
            log.info("resource_deleted")
        return ReconcileResult(ResourceStatus.DELETED, None, "delete")

    async def _create(self, desired: dict[str, Any], log: Any) -> State:
        fields = {
            name: desired[name]
            for name in self.schema.configurable()
            if desired.get(name) is not None
        }
        resource_id = await self.resource.create(fields)
        log.info("resource_created", resource_id=resource_id)
        return await self._read_back(resource_id, desired, log)

    async def _read_back(self, resource_id: str, desired: dict[str, Any], log: Any) -> State:
        try:
            payload = await self.resource.get(resource_id)
        except OctoformError as exc:
            log.warning("resource_read_back_failed", resource_id=resource_id, error=exc.message)
            written = State(
                resource_id,
                {name: desired.get(name) for name in self.schema.attributes},
            )
            raise PartialApply(written, dict(exc.details, resource_id=resource_id)) from exc
        observed = normalize_attributes(self.schema, payload)
        return State.from_observed(self.schema, resource_id, observed, desired)

    async def _replace(
        self,
        state: State,
        desired: dict[str, Any],
        plan: PlanResult,
        log: Any,
    ) -> ReconcileResult:
        # Destroy first so the new entity cannot collide with the old identifier
        log.info(
            "resource_replacing",
            attributes=[c.name for c in plan.diff.changes if c.requires_replace],
        )
        try:
            await self.resource.delete(state.resource_id, state.attributes)
        except RemoteNotFound:
            log.info("resource_already_absent")

        try:
            new_state = await self._create(desired, log)
        except PartialApply:
            raise
        except OctoformError as exc:
            log.error("resource_replace_failed", error=exc.message)
            raise exc.annotate(status=ResourceStatus.ABSENT.value)
        return ReconcileResult(ResourceStatus.CREATED, new_state, "replace")
