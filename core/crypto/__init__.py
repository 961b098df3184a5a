"""
Core cryptographic utilities.

Module 02 provides hashing, Module 03 signatures and attestations.
"""
from .hashing import (
    DIGEST_SIZE,
    sha256,
    hash_canonical,
    hash_concat,
    derive_nonce,
    to_hex,
    from_hex,
)
from .signatures import (
    Signature,
    SigningService,
    generate_private_key,
    private_key_from_hex,
    private_key_to_hex,
    public_key_hex,
    sign,
    verify,
)
from .attestation import Attestation, verify_attestation

__all__ = [
    "DIGEST_SIZE",
    "sha256",
    "hash_canonical",
    "hash_concat",
    "derive_nonce",
    "to_hex",
    "from_hex",
    "Signature",
    "SigningService",
    "generate_private_key",
    "private_key_from_hex",
    "private_key_to_hex",
    "public_key_hex",
    "sign",
    "verify",
    "Attestation",
    "verify_attestation",
]
