"""Core modules for octoform - error taxonomy and configuration values."""

from octoform.core.errors import (
    ConfigurationError,
    EncryptionError,
    MalformedIdentifier,
    OctoformError,
    PartialApply,
    RemoteError,
    RemoteNotFound,
    RemoteRejected,
    RemoteTransient,
    ValidationFailed,
    format_error_message,
)
from octoform.core.values import (
    NULL,
    UNKNOWN,
    AttributePath,
    Configuration,
    Value,
    ValueState,
)

__all__ = [
    # Errors
    "OctoformError",
    "ConfigurationError",
    "ValidationFailed",
    "RemoteError",
    "RemoteRejected",
    "RemoteNotFound",
    "RemoteTransient",
    "MalformedIdentifier",
    "PartialApply",
    "EncryptionError",
    "format_error_message",
    # Values
    "NULL",
    "UNKNOWN",
    "AttributePath",
    "Configuration",
    "Value",
    "ValueState",
]
