"""
Key material canonicalization and derived identifiers.

SSH public keys are reduced to ``<type> <base64 blob>`` and fingerprinted the
way GitHub and OpenSSH display them (``SHA256:`` + unpadded base64 digest).
ASCII-armored OpenPGP keys are canonicalized line by line; their key ID is
read from the first public-key packet (v4: last 8 bytes of the SHA-1
fingerprint).
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from typing import Any, Callable, Mapping

from octoform.normalize.attributes import normalize_line_endings

ARMOR_BEGIN = "-----BEGIN PGP PUBLIC KEY BLOCK-----"
ARMOR_END = "-----END PGP PUBLIC KEY BLOCK-----"
PUBLIC_KEY_PACKET_TAG = 6


def normalize_ssh_public_key(text: str) -> str:
    """Drop the trailing comment and collapse whitespace."""
    return " ".join(text.split()[:2])


def ssh_key_fingerprint(text: str) -> str:
    """SHA256 fingerprint of an OpenSSH public key line."""
    if not isinstance(text, str):
        raise TypeError("SSH public key must be a string")

    fields = text.split()
    if len(fields) < 2:
        raise ValueError("expected '<type> <base64 key data>'")
    key_type, encoded = fields[0], fields[1]

    try:
        blob = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"key data is not valid base64: {exc}") from exc

    if len(blob) < 4:
        raise ValueError("key data is truncated")
    size = int.from_bytes(blob[:4], "big")
    embedded_type = blob[4 : 4 + size].decode("ascii", errors="replace")
    if embedded_type != key_type:
        raise ValueError(f"key data does not match key type {key_type!r}")

    digest = hashlib.sha256(blob).digest()
    return "SHA256:" + base64.b64encode(digest).decode("ascii").rstrip("=")


def normalize_armored_key(text: str) -> str:
    """Canonical line endings, no indentation or trailing blanks."""
    lines = normalize_line_endings(text).strip().split("\n")
    return "\n".join(line.strip() for line in lines)


def _dearmor(text: str) -> bytes:
    lines = normalize_armored_key(text).split("\n")
    try:
        start = lines.index(ARMOR_BEGIN)
        end = lines.index(ARMOR_END, start)
    except ValueError:
        raise ValueError("missing PGP public key block armor") from None

    body = lines[start + 1 : end]
    # Armor headers (Version:, Comment:) end at the first blank line
    if "" in body:
        body = body[body.index("") + 1 :]
    # The CRC-24 checksum line is the only one starting with '='
    encoded = "".join(line for line in body if line and not line.startswith("="))

    try:
        data = base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"armored data is not valid base64: {exc}") from exc
    if not data:
        raise ValueError("armored block is empty")
    return data


def _first_public_key_packet(data: bytes) -> bytes:
    header = data[0]
    if not header & 0x80:
        raise ValueError("data does not start with an OpenPGP packet")

    if header & 0x40:
        tag = header & 0x3F
        if len(data) < 2:
            raise ValueError("key packet is truncated")
        first = data[1]
        if first < 192:
            length, offset = first, 2
        elif first < 224:
            if len(data) < 3:
                raise ValueError("key packet is truncated")
            length, offset = ((first - 192) << 8) + data[2] + 192, 3
        elif first == 255:
            length, offset = int.from_bytes(data[2:6], "big"), 6
        else:
            raise ValueError("partial body lengths are not allowed for key packets")
    else:
        tag = (header >> 2) & 0x0F
        length_type = header & 0x03
        if length_type == 3:
            length, offset = len(data) - 1, 1
        else:
            size = 1 << length_type
            length, offset = int.from_bytes(data[1 : 1 + size], "big"), 1 + size

    if tag != PUBLIC_KEY_PACKET_TAG:
        raise ValueError(f"first packet is not a public key (tag {tag})")

    body = data[offset : offset + length]
    if len(body) != length or not body:
        raise ValueError("key packet is truncated")
    return body


def gpg_key_id(text: str) -> str:
    """Long key ID (16 uppercase hex digits) of an armored OpenPGP public key."""
    if not isinstance(text, str):
        raise TypeError("GPG public key must be a string")

    body = _first_public_key_packet(_dearmor(text))
    version = body[0]
    if version != 4:
        raise ValueError(f"unsupported public key version {version}")

    fingerprint = hashlib.sha1(b"\x99" + len(body).to_bytes(2, "big") + body).digest()
    return fingerprint[-8:].hex().upper()


def derive_from(attribute: str, extract: Callable[[str], Any]) -> Callable[[Mapping[str, Any]], Any]:
    """
    Build a derivation computing a value from another attribute.

    Returns None (keep whatever the service reported) when the source is
    missing or cannot be parsed.
    """

    def _derive(attributes: Mapping[str, Any]) -> Any:
        source = attributes.get(attribute)
        if not source:
            return None
        try:
            return extract(source)
        except (TypeError, ValueError):
            return None

    return _derive
