"""
Unified error types for octoform.

Taxonomy:
- ValidationFailed: local, pre-flight; never touches the remote service
- RemoteRejected: the remote service refused the operation
- RemoteNotFound: the remote entity does not exist
- RemoteTransient: temporary remote failure, left to the caller's retry policy
- MalformedIdentifier: an import identifier could not be parsed
- PartialApply: a create or update succeeded but its read-back failed

Every error carries a ``details`` dict used for correlation across
concurrently reconciled resource instances (``resource_id``,
``resource_type``, ``status``, ``status_code``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from octoform.providers.base import State
    from octoform.validation.validators import Violation


class OctoformError(Exception):
    """Base exception for octoform errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def resource_id(self) -> str | None:
        return self.details.get("resource_id")

    def annotate(self, **fields: Any) -> "OctoformError":
        """Add correlation fields without overwriting existing ones."""
        for key, value in fields.items():
            if value is not None:
                self.details.setdefault(key, value)
        return self


class ConfigurationError(OctoformError):
    """Raised for provider configuration errors."""


class ValidationFailed(OctoformError):
    """Raised when a configuration fails one or more validators."""

    def __init__(
        self,
        violations: list[Violation],
        details: dict[str, Any] | None = None,
    ):
        count = len(violations)
        noun = "violation" if count == 1 else "violations"
        super().__init__(f"Configuration failed validation ({count} {noun})", details)
        self.violations = list(violations)


class RemoteError(OctoformError):
    """Base class for failures reported by the remote service."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        status_code: int | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        if status_code is not None:
            self.details.setdefault("status_code", status_code)


class RemoteRejected(RemoteError):
    """The remote service refused the operation (duplicate, malformed, forbidden)."""


class RemoteNotFound(RemoteError):
    """The remote entity does not exist."""


class RemoteTransient(RemoteError):
    """Temporary remote failure (timeout, rate limit, 5xx)."""


class PartialApply(OctoformError):
    """
    The remote change succeeded but the entity could not be read back.

    ``state`` holds what is known about the entity (its identifier and the
    desired attributes) so the caller can persist it instead of creating the
    entity a second time. A later read fills in the computed attributes.
    """

    def __init__(self, state: State, details: dict[str, Any] | None = None):
        super().__init__(
            f"Remote change to {state.resource_id} succeeded but could not be read back",
            details,
        )
        self.state = state


class MalformedIdentifier(OctoformError):
    """An import identifier does not have the expected shape."""


class EncryptionError(OctoformError):
    """A secret value could not be sealed with the repository public key."""


def format_error_message(error: OctoformError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg
