"""
Composite resource identifiers.

Identifiers made of several parts (``organization:username``,
``repository:secret_name``) are joined with a single ``:``. Parsing splits
into exactly the expected number of parts; the last part keeps any further
separators.
"""

from __future__ import annotations

from octoform.core.errors import MalformedIdentifier

ID_SEPARATOR = ":"


def split_id(identifier: str, *names: str) -> tuple[str, ...]:
    """Split ``identifier`` into one part per name, failing fast on shape errors."""
    if not names:
        raise ValueError("At least one identifier part name is required")

    expected = ID_SEPARATOR.join(f"<{name}>" for name in names)
    if not isinstance(identifier, str):
        raise MalformedIdentifier(
            f"Unexpected ID {identifier!r}; expected {expected}",
            {"identifier": identifier},
        )

    parts = identifier.split(ID_SEPARATOR, len(names) - 1)
    if len(parts) != len(names) or any(not part for part in parts):
        raise MalformedIdentifier(
            f"Unexpected ID format ({identifier!r}); expected {expected}",
            {"identifier": identifier},
        )
    return tuple(parts)


def build_id(*parts: str) -> str:
    return ID_SEPARATOR.join(str(part) for part in parts)


def require_numeric(identifier: str, name: str = "id") -> int:
    """Service-assigned numeric identifiers (SSH and GPG keys)."""
    if not isinstance(identifier, str) or not (identifier.isascii() and identifier.isdigit()):
        raise MalformedIdentifier(
            f"Unable to parse {name} {identifier!r} as integer",
            {"identifier": identifier},
        )
    return int(identifier)
