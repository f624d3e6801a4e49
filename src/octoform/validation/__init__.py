"""Pre-flight validation of resource configurations."""

from octoform.validation.validators import (
    ConflictsWith,
    GPGPublicKeyValidator,
    KeyMaterialValidator,
    NameValidator,
    OneOf,
    SSHPublicKeyValidator,
    ValidationContext,
    Validator,
    Violation,
    ensure_valid,
    validate_configuration,
)

__all__ = [
    "ConflictsWith",
    "GPGPublicKeyValidator",
    "KeyMaterialValidator",
    "NameValidator",
    "OneOf",
    "SSHPublicKeyValidator",
    "ValidationContext",
    "Validator",
    "Violation",
    "ensure_valid",
    "validate_configuration",
]
