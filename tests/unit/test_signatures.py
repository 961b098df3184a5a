"""
Module 03 - Signing Service Unit Tests
Tests for core/crypto/signatures.py and core/crypto/attestation.py
"""
import threading

import pytest

from core.crypto.attestation import Attestation, verify_attestation
from core.crypto.hashing import sha256, to_hex
from core.crypto.signatures import (
    Signature,
    SigningService,
    generate_private_key,
    private_key_to_hex,
    public_key_hex,
    sign,
    verify,
)
from core.schemas.ledger import Party


DIGEST = sha256(b"transaction id")


class TestSignAndVerify:
    """Tests for the module-level sign() and verify() helpers."""

    def test_signature_verifies(self):
        key = generate_private_key()
        signature = sign(DIGEST, key)

        assert signature.by == public_key_hex(key)
        assert signature.scheme == "ed25519"
        assert verify(DIGEST, signature)

    def test_wrong_payload_fails(self):
        signature = sign(DIGEST, generate_private_key())

        assert not verify(sha256(b"other"), signature)

    def test_wrong_expected_key_fails(self):
        signature = sign(DIGEST, generate_private_key())
        other = public_key_hex(generate_private_key())

        assert not verify(DIGEST, signature, other)

    def test_forged_by_field_fails(self):
        signature = sign(DIGEST, generate_private_key())
        forged = signature.model_copy(update={"by": public_key_hex(generate_private_key())})

        assert not verify(DIGEST, forged)

    def test_garbage_signature_fails(self):
        key = generate_private_key()
        forged = Signature(by=public_key_hex(key), signature_hex="0x" + "00" * 64)

        assert not verify(DIGEST, forged)

    def test_unknown_scheme_fails(self):
        signature = sign(DIGEST, generate_private_key())

        assert not verify(DIGEST, signature.model_copy(update={"scheme": "rsa"}))

    def test_public_key_format(self):
        key_hex = public_key_hex(generate_private_key())

        assert key_hex.startswith("0x")
        assert len(key_hex) == 66


class TestSigningService:
    """Tests for SigningService."""

    def test_generate_holds_default_key(self):
        service = SigningService.generate()

        assert service.holds(service.default_key)
        assert service.public_keys == [service.default_key]

    def test_sign_verifies_with_key(self):
        service = SigningService.generate()
        signature = service.sign(service.default_key, DIGEST)

        assert verify(DIGEST, signature, service.default_key)

    def test_from_hex_restores_same_identity(self):
        key = generate_private_key()
        service = SigningService.from_hex(private_key_to_hex(key))

        assert service.default_key == public_key_hex(key)

    def test_unknown_key_raises(self):
        service = SigningService.generate()
        other = SigningService.generate().default_key

        with pytest.raises(KeyError):
            service.sign(other, DIGEST)

    def test_digest_length_enforced(self):
        service = SigningService.generate()

        with pytest.raises(ValueError, match="32 bytes"):
            service.sign(service.default_key, b"not a digest")

    def test_requires_a_key(self):
        with pytest.raises(ValueError):
            SigningService([])

    def test_duplicate_keys_collapsed(self):
        key = generate_private_key()
        service = SigningService([key, key])

        assert len(service.public_keys) == 1

    def test_concurrent_signing(self):
        service = SigningService.generate()
        results: list[bool] = []
        lock = threading.Lock()

        def worker(i: int) -> None:
            digest = sha256(f"tx{i}".encode())
            ok = verify(digest, service.sign(service.default_key, digest), service.default_key)
            with lock:
                results.append(ok)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == [True] * 16


class TestAttestation:
    """Tests for verify_attestation()."""

    def _attestation(self):
        service = SigningService.generate()
        oracle = Party(name="Oracle", owning_key=service.default_key)
        return Attestation(
            oracle=oracle,
            signature=service.sign(oracle.owning_key, DIGEST),
            signed_digest=to_hex(DIGEST),
        )

    def test_valid_attestation(self):
        attestation = self._attestation()

        assert verify_attestation(attestation)
        assert verify_attestation(attestation, DIGEST)
        assert verify_attestation(attestation, to_hex(DIGEST))

    def test_different_root_fails(self):
        assert not verify_attestation(self._attestation(), sha256(b"other root"))

    def test_signature_from_other_key_fails(self):
        attestation = self._attestation()
        impostor = SigningService.generate()
        forged = attestation.model_copy(update={
            "signature": impostor.sign(impostor.default_key, DIGEST),
        })

        assert not verify_attestation(forged, DIGEST)
