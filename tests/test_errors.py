from octoform.core.errors import (
    OctoformError,
    RemoteError,
    RemoteNotFound,
    ValidationFailed,
    format_error_message,
)
from octoform.core.values import AttributePath
from octoform.validation.validators import Violation


def test_annotate_does_not_overwrite():
    error = OctoformError("boom", {"resource_id": "a"})

    error.annotate(resource_id="b", resource_type="widget", status=None)

    assert error.details == {"resource_id": "a", "resource_type": "widget"}
    assert error.resource_id == "a"


def test_remote_error_status_code():
    error = RemoteNotFound("HTTP 404: Not Found", status_code=404)

    assert isinstance(error, RemoteError)
    assert error.status_code == 404
    assert error.details["status_code"] == 404


def test_validation_failed_keeps_violations():
    violations = [
        Violation(AttributePath.root("a"), "Invalid Name", "bad"),
        Violation(AttributePath.root("b"), "Invalid Name", "bad"),
    ]

    error = ValidationFailed(violations)

    assert error.violations == violations
    assert str(error) == "Configuration failed validation (2 violations)"


def test_format_error_message():
    error = OctoformError("Failed", {"resource_id": "org:user"})

    assert format_error_message(error) == "Failed (resource_id=org:user)"
    assert format_error_message(OctoformError("Plain")) == "Plain"
