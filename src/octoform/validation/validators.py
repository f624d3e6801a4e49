"""
Validator set for resource configurations.

Validators are pure callables ``validator(value, context) -> list[Violation]``.
They never mutate their input and are only invoked for known values: null
and unknown values are skipped, not failed, so values computed by other
resources can be validated once they resolve.

``validate_configuration`` runs every validator of a schema and collects
all violations instead of stopping at the first one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from octoform.core.errors import ValidationFailed
from octoform.core.values import AttributePath, Configuration, Value
from octoform.normalize.keys import gpg_key_id, ssh_key_fingerprint
from octoform.schema import Mutability, ResourceSchema

NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
RESERVED_PREFIX = "GITHUB_"


@dataclass(frozen=True)
class Violation:
    """A single validation failure at an attribute path."""

    path: AttributePath
    summary: str
    detail: str

    def __str__(self) -> str:
        location = str(self.path) or "(root)"
        return f"{location}: {self.summary}: {self.detail}"


@dataclass(frozen=True)
class ValidationContext:
    """Where a value sits: the whole configuration plus the value's path."""

    config: Configuration
    path: AttributePath

    def sibling(self, name: str) -> Value:
        """Resolve an attribute next to the current one (same parent block)."""
        return self.config.get_path(self.path.parent().child(name))


class Validator(Protocol):
    def description(self) -> str:
        ...

    def __call__(self, value: Value, context: ValidationContext) -> list[Violation]:
        ...


class NameValidator:
    """
    Secret and variable names.

    Names may only contain alphanumerics or underscores, must not start with
    a digit and must not start with the reserved prefix (case-insensitive).
    Both checks always run.
    """

    def __init__(self, reserved_prefix: str = RESERVED_PREFIX) -> None:
        self.reserved_prefix = reserved_prefix

    def description(self) -> str:
        return (
            "Names can only contain alphanumeric characters or underscores and must "
            f"not start with a number or the {self.reserved_prefix} prefix"
        )

    def __call__(self, value: Value, context: ValidationContext) -> list[Violation]:
        if not value.is_known or value.value is None:
            return []

        name = value.value
        if not isinstance(name, str):
            return [Violation(context.path, "Invalid Name", "Names must be strings")]

        violations: list[Violation] = []
        if NAME_PATTERN.fullmatch(name) is None:
            violations.append(
                Violation(
                    context.path,
                    "Invalid Name",
                    "Names can only contain alphanumeric characters or underscores "
                    "and must not start with a number",
                )
            )
        if name.upper().startswith(self.reserved_prefix.upper()):
            violations.append(
                Violation(
                    context.path,
                    "Invalid Name",
                    f"Names must not start with {self.reserved_prefix}",
                )
            )
        return violations


class ConflictsWith:
    """Reject a value when any of the named sibling attributes is also set."""

    def __init__(self, *siblings: str) -> None:
        self.siblings = siblings

    def description(self) -> str:
        return f"Conflicts with: {', '.join(self.siblings)}"

    def __call__(self, value: Value, context: ValidationContext) -> list[Violation]:
        if not value.is_set:
            return []

        violations: list[Violation] = []
        for name in self.siblings:
            if context.sibling(name).is_set:
                other = context.path.parent().child(name)
                violations.append(
                    Violation(
                        context.path,
                        "Conflicting Attribute Configuration",
                        f"Cannot set {str(context.path)!r} when {str(other)!r} is set",
                    )
                )
        return violations


class OneOf:
    """Accept only one of a fixed set of values."""

    def __init__(self, *choices: Any) -> None:
        self.choices = choices

    def description(self) -> str:
        return f"Value must be one of: {', '.join(repr(c) for c in self.choices)}"

    def __call__(self, value: Value, context: ValidationContext) -> list[Violation]:
        if not value.is_known or value.value is None:
            return []
        if value.value in self.choices:
            return []
        return [
            Violation(
                context.path,
                "Invalid Attribute Value",
                f"{self.description()}, got: {value.value!r}",
            )
        ]


class KeyMaterialValidator:
    """Reject key material the parser cannot read."""

    def __init__(self, kind: str, parse: Callable[[str], Any]) -> None:
        self.kind = kind
        self._parse = parse

    def description(self) -> str:
        return f"Value must be a valid {self.kind}"

    def __call__(self, value: Value, context: ValidationContext) -> list[Violation]:
        if not value.is_set:
            return []
        try:
            self._parse(value.value)
        except (TypeError, ValueError) as exc:
            return [Violation(context.path, f"Invalid {self.kind}", str(exc))]
        return []


class SSHPublicKeyValidator(KeyMaterialValidator):
    def __init__(self) -> None:
        super().__init__("SSH public key", ssh_key_fingerprint)


class GPGPublicKeyValidator(KeyMaterialValidator):
    def __init__(self) -> None:
        super().__init__("GPG public key", gpg_key_id)


def validate_configuration(
    schema: ResourceSchema,
    config: Configuration,
    *,
    base: AttributePath | None = None,
) -> list[Violation]:
    """
    Run every schema check over ``config`` and collect all violations.

    Args:
        schema: Static resource schema (attribute specs and groups)
        config: Desired configuration (root object)
        base: Path of the block being validated, for nested blocks

    Returns:
        List of violations, empty when the configuration is valid
    """
    base = base or AttributePath()
    block = config if not base.steps else config.block(base)
    violations: list[Violation] = []

    for name in block or ():
        if name not in schema.attributes:
            violations.append(
                Violation(
                    base.child(name),
                    "Unsupported Attribute",
                    f"{name!r} is not an attribute of {schema.name}",
                )
            )

    for name, spec in schema.attributes.items():
        path = base.child(name)
        value = config.get_path(path)

        if spec.mutability is Mutability.COMPUTED:
            if value.is_set:
                violations.append(
                    Violation(path, "Computed Attribute", f"{name!r} is assigned by the service")
                )
            continue

        if value.is_null:
            if spec.required:
                violations.append(
                    Violation(path, "Missing Required Attribute", f"{name!r} must be provided")
                )
            continue

        if value.is_unknown:
            continue

        if spec.block is not None:
            violations.extend(validate_configuration(spec.block, config, base=path))
            continue

        context = ValidationContext(config, path)
        for validator in spec.validators:
            violations.extend(validator(value, context))

    for group in schema.required_one_of:
        if all(config.get_path(base.child(name)).is_null for name in group):
            violations.append(
                Violation(
                    base,
                    "Missing Attribute",
                    f"One of {', '.join(repr(n) for n in group)} must be provided",
                )
            )

    return violations


def ensure_valid(
    schema: ResourceSchema,
    config: Configuration,
    *,
    resource_id: str | None = None,
) -> None:
    """Raise ``ValidationFailed`` carrying every violation found."""
    violations = validate_configuration(schema, config)
    if violations:
        raise ValidationFailed(violations).annotate(
            resource_type=schema.name, resource_id=resource_id
        )
