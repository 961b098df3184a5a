"""
Module 03 - Signing Service
Ed25519 signatures over fixed-length content digests.

Owner: Protocol/Crypto Engineer
Module ID: M03

Keys are addressed by their public half, rendered as 0x-prefixed hex of
the 32-byte raw Ed25519 public key. The same string is used as the
identity key in command signer lists, so a signature can be checked by
anyone holding the command and the digest.
"""
from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import DIGEST_SIZE, from_hex, to_hex


logger = logging.getLogger(__name__)

SIGNATURE_SCHEME = "ed25519"


class Signature(BaseModel):
    """A detached signature and the public key that produced it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    by: str = Field(..., description="Signer public key (0x hex)")
    signature_hex: str = Field(..., description="Raw signature bytes (0x hex)")
    scheme: str = Field(default=SIGNATURE_SCHEME)


def generate_private_key() -> Ed25519PrivateKey:
    return Ed25519PrivateKey.generate()


def private_key_from_hex(hex_string: str) -> Ed25519PrivateKey:
    """Load a private key from its 32-byte raw seed (0x hex)."""
    return Ed25519PrivateKey.from_private_bytes(from_hex(hex_string))


def private_key_to_hex(private_key: Ed25519PrivateKey) -> str:
    raw = private_key.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return to_hex(raw)


def public_key_hex(key: Ed25519PrivateKey | Ed25519PublicKey) -> str:
    """Render the public half of ``key`` as an identity key string."""
    if isinstance(key, Ed25519PrivateKey):
        key = key.public_key()
    raw = key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return to_hex(raw)


def sign(payload: bytes, private_key: Ed25519PrivateKey) -> Signature:
    """Sign ``payload`` with ``private_key``."""
    raw = private_key.sign(payload)
    return Signature(by=public_key_hex(private_key), signature_hex=to_hex(raw))


def verify(payload: bytes, signature: Signature, public_key: Optional[str] = None) -> bool:
    """
    Verify ``signature`` over ``payload``.

    Args:
        payload: The signed bytes (typically a 32-byte digest)
        signature: Signature to check
        public_key: Expected signer; defaults to ``signature.by``

    Returns:
        True if the signature is valid for the key, False otherwise
    """
    key_hex = public_key or signature.by
    if public_key is not None and public_key != signature.by:
        return False
    if signature.scheme != SIGNATURE_SCHEME:
        return False
    try:
        key = Ed25519PublicKey.from_public_bytes(from_hex(key_hex))
        key.verify(from_hex(signature.signature_hex), payload)
    except (InvalidSignature, ValueError):
        return False
    return True


class SigningService:
    """
    Holds private keys and signs digests on behalf of their owner.

    Key material never leaves the service; callers address keys by
    their public identity string. Access to the keys is serialized with
    a lock, so one service can be shared by concurrent exchanges.

    Example:
        >>> service = SigningService.generate()
        >>> key = service.default_key
        >>> sig = service.sign(key, sha256(b"tx"))
        >>> verify(sha256(b"tx"), sig, key)
        True
    """

    def __init__(self, private_keys: Iterable[Ed25519PrivateKey]) -> None:
        self._keys: dict[str, Ed25519PrivateKey] = {}
        self._order: list[str] = []
        for private_key in private_keys:
            key_id = public_key_hex(private_key)
            if key_id not in self._keys:
                self._keys[key_id] = private_key
                self._order.append(key_id)
        if not self._order:
            raise ValueError("SigningService requires at least one private key")
        self._lock = threading.Lock()

    @classmethod
    def generate(cls) -> "SigningService":
        """Create a service holding a single freshly generated key."""
        return cls([generate_private_key()])

    @classmethod
    def from_hex(cls, *hex_keys: str) -> "SigningService":
        return cls(private_key_from_hex(h) for h in hex_keys)

    @property
    def default_key(self) -> str:
        """Public key of the first key loaded into the service."""
        return self._order[0]

    @property
    def public_keys(self) -> list[str]:
        return list(self._order)

    def holds(self, key: str) -> bool:
        return key in self._keys

    def sign(self, key: str, digest: bytes) -> Signature:
        """
        Sign a content digest with the private half of ``key``.

        Args:
            key: Public identity key selecting the private key
            digest: Fixed-length content digest (32 bytes)

        Returns:
            Signature verifiable with ``key`` and ``digest``

        Raises:
            KeyError: If the service does not hold ``key``
            ValueError: If ``digest`` is not 32 bytes
        """
        if len(digest) != DIGEST_SIZE:
            raise ValueError(
                f"Digest must be {DIGEST_SIZE} bytes, got {len(digest)}"
            )
        if key not in self._keys:
            raise KeyError(f"No private key held for {key}")
        with self._lock:
            signature = sign(digest, self._keys[key])
        logger.debug(f"Signed digest {to_hex(digest)} with {key}")
        return signature


__all__ = [
    "SIGNATURE_SCHEME",
    "Signature",
    "SigningService",
    "generate_private_key",
    "private_key_from_hex",
    "private_key_to_hex",
    "public_key_hex",
    "sign",
    "verify",
]
