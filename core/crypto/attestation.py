from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from core.crypto.hashing import from_hex, to_hex
from core.crypto.signatures import Signature, verify
from core.schemas.ledger import Party


class Attestation(BaseModel):
    """An oracle's signature over the root of the tree it was shown."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    oracle: Party
    signature: Signature
    signed_digest: str = Field(..., description="Merkle root that was signed (0x hex)")


def verify_attestation(attestation: Attestation, expected_root: bytes | str | None = None) -> bool:
    """
    Check an attestation is a valid oracle signature over ``expected_root``.

    With no ``expected_root`` only the signature itself is checked.
    """
    if expected_root is not None:
        if isinstance(expected_root, bytes):
            expected_root = to_hex(expected_root)
        if attestation.signed_digest != expected_root:
            return False
    try:
        digest = from_hex(attestation.signed_digest)
    except ValueError:
        return False
    return verify(digest, attestation.signature, attestation.oracle.owning_key)
