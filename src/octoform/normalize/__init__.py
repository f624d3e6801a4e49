"""Canonicalization of remote and desired attribute values."""

from octoform.normalize.attributes import (
    chain,
    lowercase,
    normalize_attributes,
    normalize_line_endings,
    normalize_multiline,
    normalize_timestamp,
    strip_whitespace,
    uppercase,
)
from octoform.normalize.keys import (
    derive_from,
    gpg_key_id,
    normalize_armored_key,
    normalize_ssh_public_key,
    ssh_key_fingerprint,
)

__all__ = [
    "chain",
    "derive_from",
    "gpg_key_id",
    "lowercase",
    "normalize_armored_key",
    "normalize_attributes",
    "normalize_line_endings",
    "normalize_multiline",
    "normalize_ssh_public_key",
    "normalize_timestamp",
    "ssh_key_fingerprint",
    "strip_whitespace",
    "uppercase",
]
