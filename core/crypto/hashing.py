"""
Module 02 - Hashing Utilities
SHA-256 primitives shared by the disclosure tree and the signing service.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- SHA-256 hashing for raw bytes
- Canonical hashing for components (via dumps_canonical)
- Per-leaf nonce derivation from a transaction privacy salt
- Hex encoding/decoding with 0x prefix

Security/Determinism Notes:
- Always hash raw bytes exactly as specified
- All operations are deterministic
"""
from __future__ import annotations

import hashlib
from typing import Any

from core.schemas.canonical import dumps_canonical


DIGEST_SIZE: int = 32


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def hash_canonical(obj: Any) -> bytes:
    """
    Hash an object using canonical JSON serialization.

    Rule: digest = sha256(dumps_canonical(obj).encode("utf-8"))

    Args:
        obj: Any object that can be canonically serialized
             (Pydantic model, dict, list, primitives)

    Returns:
        32-byte SHA-256 digest of the canonical JSON

    Raises:
        CanonicalizationException: If object cannot be canonically serialized
    """
    canonical_json = dumps_canonical(obj)
    return sha256(canonical_json.encode("utf-8"))


def hash_concat(left: bytes, right: bytes) -> bytes:
    """Hash the concatenation of two byte sequences: sha256(left + right)."""
    return sha256(left + right)


def derive_nonce(privacy_salt: bytes, position: int) -> bytes:
    """
    Derive the nonce mixed into the leaf at ``position``.

    nonce = sha256(privacy_salt || position as 4-byte big-endian)

    Without the salt a hidden leaf digest cannot be matched against
    guessed component values.
    """
    if position < 0:
        raise ValueError(f"Leaf position must be non-negative, got {position}")
    return sha256(privacy_salt + position.to_bytes(4, "big"))


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters
    """
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    hex_content = hex_string[2:]

    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


__all__ = [
    "DIGEST_SIZE",
    "sha256",
    "hash_canonical",
    "hash_concat",
    "derive_nonce",
    "to_hex",
    "from_hex",
]
