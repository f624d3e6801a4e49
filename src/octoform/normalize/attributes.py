"""
Attribute normalization.

Normalizers canonicalize values reported by the remote service (and
desired values before comparison) so that a fresh read and a stored State
compare equal even when the service reformats them. Every normalizer is
pure and idempotent: ``f(f(x)) == f(x)``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Mapping

if TYPE_CHECKING:
    from octoform.schema import ResourceSchema

Normalizer = Callable[[Any], Any]

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def strip_whitespace(text: str) -> str:
    return text.strip()


def normalize_multiline(text: str) -> str:
    """Canonical line endings, no trailing blanks, no surrounding blank lines."""
    lines = normalize_line_endings(text).split("\n")
    return "\n".join(line.rstrip() for line in lines).strip()


def lowercase(text: str) -> str:
    return text.lower()


def uppercase(text: str) -> str:
    return text.upper()


def normalize_timestamp(value: Any) -> str:
    """ISO-8601 timestamp in UTC at second precision, e.g. 2024-01-02T03:04:05Z."""
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def chain(*normalizers: Normalizer) -> Normalizer:
    """Apply normalizers left to right."""

    def _chained(value: Any) -> Any:
        for normalizer in normalizers:
            value = normalizer(value)
        return value

    return _chained


def normalize_attributes(schema: ResourceSchema, payload: Mapping[str, Any]) -> dict[str, Any]:
    """
    Canonicalize a remote payload (or desired attributes) against a schema.

    Keys the schema does not declare are dropped, each attribute's
    normalizer runs on non-null values, then derived attributes are
    recomputed from the normalized result.
    """
    result: dict[str, Any] = {}
    for name, value in payload.items():
        spec = schema.attributes.get(name)
        if spec is None:
            continue
        if value is not None:
            if spec.block is not None and isinstance(value, Mapping):
                value = normalize_attributes(spec.block, value)
            elif spec.normalizer is not None:
                value = spec.normalizer(value)
        result[name] = value

    for name, spec in schema.attributes.items():
        if spec.derive is None:
            continue
        derived = spec.derive(result)
        if derived is not None:
            result[name] = derived

    return result
