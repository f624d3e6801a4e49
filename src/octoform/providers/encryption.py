"""Sealing of secret values with a repository public key (libsodium sealed box)."""

from __future__ import annotations

import base64

from nacl import encoding, public
from nacl.exceptions import CryptoError

from octoform.core.errors import EncryptionError


def seal_secret(plaintext: str, public_key: str) -> str:
    """Encrypt ``plaintext`` for a base64 public key; returns base64 ciphertext."""
    try:
        key = public.PublicKey(public_key.encode("utf-8"), encoding.Base64Encoder())
        sealed = public.SealedBox(key).encrypt(plaintext.encode("utf-8"))
    except (CryptoError, TypeError, ValueError) as exc:
        raise EncryptionError(f"Unable to encrypt secret: {exc}") from exc
    return base64.b64encode(sealed).decode("utf-8")
